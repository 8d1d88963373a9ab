from __future__ import annotations

__all__ = ["Equation"]

import logging
import threading
from typing import Mapping

from returns import result

from ..expression import IndexMismatchError, RankError, Tensor
from ..generator import CoefficientKey
from ..language import ast
from ._exceptions import ComputationError, EquationError
from .coefficient import CoefficientEntry, CoefficientState

logger = logging.getLogger(__name__)


class Equation:
    """Tensor equation `expression = 0` over generated coefficients.

    Args:
        source: Text of the equation, used in messages.
        expression: Parsed expression.
        entries: Entry of every coefficient the expression references.
    """

    def __init__(
        self,
        source: str,
        expression: ast.Expression,
        entries: Mapping[CoefficientKey, CoefficientEntry],
    ):
        self.source = source
        self.expression = expression
        self._entries = [entries[key] for key in expression.coefficients()]
        self._condition = threading.Condition()
        self._result: result.Result[Tensor, ComputationError | EquationError] | None = None
        for entry in self._entries:
            entry.add_observer(self._notify)

    @property
    def coefficients(self) -> tuple[CoefficientKey, ...]:
        return tuple(entry.key for entry in self._entries)

    def _notify(self, entry: CoefficientEntry):
        with self._condition:
            self._condition.notify_all()

    def _ready(self) -> bool:
        states = [entry.state for entry in self._entries]
        return CoefficientState.error in states or all(
            state is CoefficientState.done for state in states
        )

    def wait(self) -> result.Result[Tensor, ComputationError | EquationError]:
        """Block until the equation can be evaluated.

        Returns as soon as any coefficient fails, without waiting for the others. Otherwise the
        expression is evaluated once with the generated tensors and the outcome is kept.
        """
        for entry in self._entries:
            try:
                entry.start()
            except RuntimeError:
                # The refused entry has already settled with the error
                logger.debug("Coefficient %s of %s was refused", entry.key, self.source)
                break

        with self._condition:
            if self._result is not None:
                return self._result

            logger.debug("Waiting for %d coefficients of %s", len(self._entries), self.source)
            self._condition.wait_for(self._ready)

            for entry in self._entries:
                if entry.state is CoefficientState.error:
                    logger.debug("Equation %s failed on %s", self.source, entry.key)
                    self._result = entry.wait()
                    return self._result

            tensors = {entry.key: entry.wait().unwrap() for entry in self._entries}

            try:
                self._result = result.Success(self.expression.evaluate(tensors))
            except (IndexMismatchError, RankError) as e:
                self._result = result.Failure(EquationError(self.source, e))
            return self._result

    def __repr__(self):
        return f"Equation({self.source!r})"
