__all__ = ["LineError"]

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class LineError(Exception):
    line: int
    error: Exception

    def __str__(self):
        return f"Expected a valid equation on line {self.line}, but found: {self.error}"
