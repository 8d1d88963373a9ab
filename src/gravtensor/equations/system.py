from __future__ import annotations

__all__ = ["Solution", "EquationSystem"]

import logging
from dataclasses import dataclass

from returns import result

from ..expression import NonlinearExpressionError, Substitution, Tensor
from ..generator import CoefficientKey, InvalidSubstitutionError, homogeneous_system
from ..language import LineError, ast, parse_equations
from ._exceptions import ComputationError, EquationError
from .coefficient import CoefficientCache
from .equation import Equation

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True, eq=False)
class Solution:
    substitution: Substitution
    coefficients: dict[CoefficientKey, Tensor]

    def deparse(self) -> str:
        return "".join(f"{key} = {tensor}\n" for key, tensor in self.coefficients.items())

    def __str__(self):
        return self.deparse()


class EquationSystem:
    """Set of equations solved together for the variables of their coefficients.

    Args:
        cache: Store of coefficient computations. A new cache is made when omitted.
        max_workers: Worker count of the new cache.
    """

    def __init__(self, cache: CoefficientCache | None = None, *, max_workers: int | None = None):
        self.cache = CoefficientCache(max_workers=max_workers) if cache is None else cache
        self._equations: list[Equation] = []

    @property
    def equations(self) -> tuple[Equation, ...]:
        return tuple(self._equations)

    def add(self, expression: ast.Expression, source: str | None = None) -> Equation:
        entries = {key: self.cache.get(key) for key in expression.coefficients()}
        equation = Equation(expression.deparse() if source is None else source, expression, entries)
        self._equations.append(equation)
        return equation

    def load(self, text: str) -> result.Result[list[Equation], LineError]:
        """Add every equation of a text, one per line."""
        return parse_equations(text).map(
            lambda parsed: [self.add(expression, source) for source, expression in parsed]
        )

    def solve(
        self,
    ) -> result.Result[
        Solution,
        ComputationError | EquationError | InvalidSubstitutionError | NonlinearExpressionError,
    ]:
        """Generate all coefficients, then solve the equations in the order they were added.

        Each equation sees the substitution solved from the equations before it. The coefficients
        are returned in the order they were first referenced, with the final substitution applied.
        """
        self.cache.start_all()

        substitution = Substitution()
        for equation in self._equations:
            match equation.wait():
                case result.Failure(error):
                    return result.Failure(error)
                case result.Success(tensor):
                    try:
                        solved = homogeneous_system(substitution.apply(tensor))
                    except (InvalidSubstitutionError, NonlinearExpressionError) as e:
                        return result.Failure(e)
                    logger.debug("Solved %s with %d rules", equation.source, len(solved))
                    substitution = Substitution.merge([substitution, solved])

        coefficients = {}
        for entry in self.cache.entries():
            match entry.wait():
                case result.Failure(error):
                    return result.Failure(error)
                case result.Success(tensor):
                    coefficients[entry.key] = substitution.apply(tensor)

        return result.Success(Solution(substitution, coefficients))

    def shutdown(self):
        self.cache.shutdown()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.shutdown()
