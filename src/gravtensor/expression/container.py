from __future__ import annotations

__all__ = ["TensorContainer"]

from typing import Iterable, Iterator

from .tensor import Tensor


class TensorContainer:
    """Ordered collection of tensors; duplicates are allowed."""

    def __init__(self, tensors: Iterable[Tensor] = ()):
        self._tensors = list(tensors)

    def insert(self, tensor: Tensor):
        self._tensors.append(tensor)

    @property
    def is_empty(self) -> bool:
        return len(self._tensors) == 0

    def __len__(self) -> int:
        return len(self._tensors)

    def __getitem__(self, i: int) -> Tensor:
        return self._tensors[i]

    def __iter__(self) -> Iterator[Tensor]:
        return iter(self._tensors)

    def clone(self) -> TensorContainer:
        return TensorContainer(tensor.clone() for tensor in self._tensors)

    def deparse(self) -> str:
        return "[" + ", ".join(tensor.deparse() for tensor in self._tensors) + "]"

    def __str__(self):
        return self.deparse()
