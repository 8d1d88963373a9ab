from __future__ import annotations

__all__ = ["Kind", "Precedence", "Expression", "rendering_equal"]

from abc import abstractmethod
from enum import Enum, IntEnum


class Kind(str, Enum):
    numeric = "numeric"
    variable = "variable"
    sum = "sum"
    product = "product"
    substitution = "substitution"
    tensor_leaf = "tensor_leaf"
    tensor_product = "tensor_product"
    tensor_sum = "tensor_sum"
    scaled_tensor = "scaled_tensor"

    def __str__(self):
        return self.value


class Precedence(IntEnum):
    sum = 1
    product = 2
    atom = 3


class Expression:
    """Node of an expression tree.

    Every concrete node declares a `kind` tag and a `precedence`. Renderings of children are
    wrapped in parentheses exactly when the child's precedence is lower than its parent's.
    """

    __slots__ = ()

    kind: Kind
    precedence: Precedence

    @abstractmethod
    def clone(self) -> Expression:
        """Deep copy that keeps the identity of every variable."""
        raise NotImplementedError()

    @abstractmethod
    def deparse(self) -> str:
        """Convert the expression back into a string."""
        raise NotImplementedError()

    def deparse_child(self, child: Expression) -> str:
        if child.precedence < self.precedence:
            return f"({child.deparse()})"
        else:
            return child.deparse()

    def __str__(self):
        return self.deparse()


def rendering_equal(left: Expression, right: Expression) -> bool:
    return left.deparse() == right.deparse()
