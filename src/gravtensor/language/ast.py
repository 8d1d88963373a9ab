from __future__ import annotations

__all__ = [
    "Expression",
    "Number",
    "Coefficient",
    "Builtin",
    "Symmetrize",
    "Negate",
    "Add",
    "Subtract",
    "Multiply",
]

from abc import abstractmethod
from dataclasses import dataclass
from fractions import Fraction
from typing import Mapping

from ..expression import UNIT, Delta, Epsilon, Gamma, Indices, Numeric, Tensor, scale
from ..generator import CoefficientKey


class Expression:
    __slots__ = ()

    @abstractmethod
    def coefficients(self) -> tuple[CoefficientKey, ...]:
        """Distinct coefficient keys in order of first appearance."""
        raise NotImplementedError()

    @abstractmethod
    def evaluate(self, tensors: Mapping[CoefficientKey, Tensor]) -> Tensor:
        """Build the tensor with each coefficient replaced by its generated tensor."""
        raise NotImplementedError()

    @abstractmethod
    def deparse(self) -> str:
        raise NotImplementedError()

    def __str__(self):
        return self.deparse()


def _merge_coefficients(*children: Expression) -> tuple[CoefficientKey, ...]:
    return tuple(dict.fromkeys(key for child in children for key in child.coefficients()))


@dataclass(frozen=True, slots=True)
class Number(Expression):
    value: Fraction

    def coefficients(self):
        return ()

    def evaluate(self, tensors):
        return scale(Numeric(self.value), UNIT)

    def deparse(self):
        return str(self.value)


@dataclass(frozen=True, slots=True)
class Coefficient(Expression):
    """Reference to a generated coefficient.

    The indices rename the roman indices `a, b, c, ...` of the coefficient positionally.
    """

    key: CoefficientKey
    indices: tuple[str, ...]

    def coefficients(self):
        return (self.key,)

    def evaluate(self, tensors):
        names = Indices.roman(self.key.order).names
        return tensors[self.key].rename_indices(dict(zip(names, self.indices)))

    def deparse(self):
        key = self.key
        flag = "" if key.exchange_symmetry else ":no"
        return f"#<{key.name}:{key.l}:{key.ld}:{key.r}:{key.rd}{flag}:{{{''.join(self.indices)}}}>"


_builtins = {"Gamma": Gamma, "Epsilon": Epsilon, "Delta": Delta}


@dataclass(frozen=True, slots=True)
class Builtin(Expression):
    name: str
    indices: tuple[str, ...]

    def coefficients(self):
        return ()

    def evaluate(self, tensors):
        return _builtins[self.name](Indices.from_names(self.indices))

    def deparse(self):
        return f"{self.name}({{{''.join(self.indices)}}})"


@dataclass(frozen=True, slots=True)
class Symmetrize(Expression):
    expression: Expression
    indices: tuple[str, ...]
    anti: bool = False

    def coefficients(self):
        return self.expression.coefficients()

    def evaluate(self, tensors):
        tensor = self.expression.evaluate(tensors)
        if self.anti:
            return tensor.antisymmetrize(self.indices)
        else:
            return tensor.symmetrize(self.indices)

    def deparse(self):
        name = "AntiSymmetrize" if self.anti else "Symmetrize"
        return f"{name}({self.expression.deparse()}, {{{''.join(self.indices)}}})"


@dataclass(frozen=True, slots=True)
class Negate(Expression):
    expression: Expression

    def coefficients(self):
        return self.expression.coefficients()

    def evaluate(self, tensors):
        return -self.expression.evaluate(tensors)

    def deparse(self):
        string = self.expression.deparse()
        if isinstance(self.expression, (Add, Subtract, Multiply)):
            string = f"({string})"
        return f"-{string}"


@dataclass(frozen=True, slots=True)
class Add(Expression):
    left: Expression
    right: Expression

    def coefficients(self):
        return _merge_coefficients(self.left, self.right)

    def evaluate(self, tensors):
        return self.left.evaluate(tensors) + self.right.evaluate(tensors)

    def deparse(self):
        right_string = self.right.deparse()
        if isinstance(self.right, (Add, Subtract)):
            right_string = f"({right_string})"

        return self.left.deparse() + " + " + right_string


@dataclass(frozen=True, slots=True)
class Subtract(Expression):
    left: Expression
    right: Expression

    def coefficients(self):
        return _merge_coefficients(self.left, self.right)

    def evaluate(self, tensors):
        return self.left.evaluate(tensors) - self.right.evaluate(tensors)

    def deparse(self):
        right_string = self.right.deparse()
        if isinstance(self.right, (Add, Subtract)):
            right_string = f"({right_string})"

        return self.left.deparse() + " - " + right_string


@dataclass(frozen=True, slots=True)
class Multiply(Expression):
    left: Expression
    right: Expression

    def coefficients(self):
        return _merge_coefficients(self.left, self.right)

    def evaluate(self, tensors):
        return self.left.evaluate(tensors) * self.right.evaluate(tensors)

    def deparse(self):
        left_string = self.left.deparse()
        if isinstance(self.left, (Add, Subtract)):
            left_string = f"({left_string})"

        right_string = self.right.deparse()
        if isinstance(self.right, (Add, Subtract, Multiply)):
            right_string = f"({right_string})"

        return f"{left_string} * {right_string}"
