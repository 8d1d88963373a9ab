from __future__ import annotations

__all__ = ["Index", "Indices"]

import itertools
from dataclasses import dataclass, replace
from typing import Iterable, Iterator, Mapping

_roman = "abcdefghijklmnopqrstuvwxyz"


@dataclass(frozen=True, slots=True)
class Index:
    name: str
    lower: int = 1
    upper: int = 3
    contravariant: bool = False

    @property
    def range(self) -> range:
        return range(self.lower, self.upper + 1)

    def deparse(self) -> str:
        return self.name

    def __str__(self):
        return self.deparse()


@dataclass(frozen=True, slots=True, init=False)
class Indices:
    """Ordered index slots of a tensor."""

    items: tuple[Index, ...]

    def __init__(self, items: Iterable[Index] = ()):
        object.__setattr__(self, "items", tuple(items))

    @staticmethod
    def roman(count: int, start: int = 0, lower: int = 1, upper: int = 3) -> Indices:
        return Indices(Index(name, lower, upper) for name in _roman[start : start + count])

    @staticmethod
    def from_names(names: Iterable[str], lower: int = 1, upper: int = 3) -> Indices:
        return Indices(Index(name, lower, upper) for name in names)

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(index.name for index in self.items)

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[Index]:
        return iter(self.items)

    def __getitem__(self, i):
        if isinstance(i, slice):
            return Indices(self.items[i])
        return self.items[i]

    def __add__(self, other: Indices) -> Indices:
        return Indices(self.items + other.items)

    def rename(self, mapping: Mapping[str, str]) -> Indices:
        """Rename every index simultaneously; names not in the mapping are kept."""
        return Indices(
            replace(index, name=mapping[index.name]) if index.name in mapping else index
            for index in self.items
        )

    def combinations(self) -> Iterator[tuple[int, ...]]:
        """Every assignment of values, lexicographic with the first index most significant."""
        return itertools.product(*(index.range for index in self.items))

    def assignments(self) -> Iterator[dict[str, int]]:
        names = self.names
        for values in self.combinations():
            yield dict(zip(names, values))

    def deparse(self) -> str:
        text = ""
        for contravariant, group in itertools.groupby(self.items, lambda index: index.contravariant):
            names = "".join(index.name for index in group)
            text += f"^{{{names}}}" if contravariant else f"_{{{names}}}"
        return text

    def __str__(self):
        return self.deparse()
