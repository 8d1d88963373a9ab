__all__ = ["ComputationError", "EquationError"]

from dataclasses import dataclass

from ..generator import CoefficientKey


@dataclass(frozen=True, slots=True)
class ComputationError(Exception):
    key: CoefficientKey
    cause: Exception

    def __str__(self):
        return (
            f"Expected coefficient {self.key} to be generated, "
            f"but found {type(self.cause).__name__}: {self.cause}"
        )


@dataclass(frozen=True, slots=True)
class EquationError(Exception):
    source: str
    cause: Exception

    def __str__(self):
        return f"Expected equation {self.source} to evaluate, but found: {self.cause}"
