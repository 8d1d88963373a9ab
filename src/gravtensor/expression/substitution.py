from __future__ import annotations

__all__ = ["Substitution"]

from typing import Iterable, Iterator, overload

from ._exceptions import RuleError
from .ast import Expression, Kind, Precedence
from .scalar import Scalar, Variable, as_scalar
from .tensor import Tensor


class Substitution(Expression):
    """Ordered list of rules `variable -> replacement`.

    Rules are applied one after another, so a later rule sees the result of the earlier ones.
    """

    __slots__ = ("_rules",)

    kind = Kind.substitution
    precedence = Precedence.atom

    def __init__(self, rules: Iterable[tuple[Scalar, Scalar | int]] = ()):
        self._rules: list[tuple[Variable, Scalar]] = []
        for variable, replacement in rules:
            self.insert(variable, replacement)

    def insert(self, variable: Scalar, replacement: Scalar | int):
        if not isinstance(variable, Variable):
            raise RuleError(variable)
        self._rules.append((variable, as_scalar(replacement)))

    @property
    def rules(self) -> tuple[tuple[Variable, Scalar], ...]:
        return tuple(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def __iter__(self) -> Iterator[tuple[Variable, Scalar]]:
        return iter(self.rules)

    @overload
    def apply(self, expression: Scalar) -> Scalar: ...

    @overload
    def apply(self, expression: Tensor) -> Tensor: ...

    def apply(self, expression):
        match expression:
            case Scalar():
                for variable, replacement in self._rules:
                    expression = expression.substitute(variable, replacement)
                return expression
            case Tensor():
                return expression.substitute_variables(self).collect_by_variables()
            case _:
                raise NotImplementedError(f"Cannot substitute into {type(expression).__name__}")

    __call__ = apply

    @staticmethod
    def merge(substitutions: Iterable[Substitution]) -> Substitution:
        """Concatenate substitutions in order.

        Each substitution is applied to the replacements merged before it, then its own rules are
        appended.
        """
        merged: list[tuple[Variable, Scalar]] = []
        for substitution in substitutions:
            merged = [(variable, substitution.apply(replacement)) for variable, replacement in merged]
            merged.extend(substitution.rules)
        return Substitution(merged)

    def clone(self) -> Substitution:
        return Substitution((variable, replacement.clone()) for variable, replacement in self._rules)

    def deparse(self) -> str:
        return "".join(f"{variable} = {replacement}\n" for variable, replacement in self._rules)

    def __repr__(self):
        return f"Substitution({self.rules!r})"
