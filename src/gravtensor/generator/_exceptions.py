__all__ = ["InvalidSubstitutionError"]

from dataclasses import dataclass

from ..expression import Tensor


@dataclass(frozen=True, slots=True)
class InvalidSubstitutionError(Exception):
    tensor: Tensor

    def __str__(self):
        return (
            f"Expected the components of {self.tensor} to vanish for some values of its variables, "
            f"but found a nonzero constant that no choice of variables cancels"
        )
