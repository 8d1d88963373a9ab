from __future__ import annotations

__all__ = [
    "NonlinearExpressionError",
    "RuleError",
    "IndexMismatchError",
    "RankError",
    "IndexAssignmentError",
    "SymbolicComponentError",
    "ZeroDenominatorError",
]

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .ast import Expression


@dataclass(frozen=True, slots=True)
class NonlinearExpressionError(Exception):
    expression: Expression

    def __str__(self):
        return (
            f"Expected an expression linear in its variables, but found {self.expression}"
        )


@dataclass(frozen=True, slots=True)
class RuleError(Exception):
    target: Expression

    def __str__(self):
        return (
            f"Expected the target of a substitution rule to be a variable, but found "
            f"{self.target.kind} {self.target}"
        )


@dataclass(frozen=True, slots=True)
class IndexMismatchError(Exception):
    expected: tuple[str, ...]
    actual: tuple[str, ...]

    def __str__(self):
        return (
            f"Expected free indices {{{''.join(self.expected)}}}, "
            f"but found {{{''.join(self.actual)}}}"
        )


@dataclass(frozen=True, slots=True)
class RankError(Exception):
    tensor: str
    expected: int
    actual: int

    def __str__(self):
        return (
            f"Expected {self.tensor} to carry {self.expected} indices, "
            f"but found {self.actual} indices"
        )


@dataclass(frozen=True, slots=True)
class IndexAssignmentError(Exception):
    index: str
    value: int | None

    def __str__(self):
        if self.value is None:
            return f"Expected a value for index {self.index}, but found none"
        else:
            return f"Expected a value for index {self.index} within its range, but found {self.value}"


@dataclass(frozen=True, slots=True)
class SymbolicComponentError(Exception):
    expression: Expression

    def __str__(self):
        return f"Expected purely numeric components, but found variables in {self.expression}"


@dataclass(frozen=True, slots=True)
class ZeroDenominatorError(Exception):
    numerator: int

    def __str__(self):
        return f"Expected a nonzero denominator, but found {self.numerator}/0"
