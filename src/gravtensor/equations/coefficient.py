from __future__ import annotations

__all__ = [
    "CoefficientState",
    "CoefficientEntry",
    "CoefficientCache",
    "generate_coefficient",
]

import logging
import threading
from concurrent.futures import Executor, ThreadPoolExecutor
from enum import Enum
from typing import Callable, Iterator

from returns import maybe, result

from ..expression import Tensor
from ..generator import CoefficientKey, coefficient
from ._exceptions import ComputationError

logger = logging.getLogger(__name__)


class CoefficientState(str, Enum):
    pending = "pending"
    running = "running"
    done = "done"
    error = "error"

    def __str__(self):
        return self.value


def generate_coefficient(key: CoefficientKey) -> Tensor:
    """Generate the tensor of a key, naming its variables after the key."""
    return coefficient(key.l, key.ld, key.r, key.rd, key.exchange_symmetry, prefix=key.name)


class CoefficientEntry:
    """Computation of one coefficient.

    The state moves from pending to running at most once and then settles as done or error. A
    settled entry never changes again. Observers are told once when the entry settles.
    """

    def __init__(
        self,
        key: CoefficientKey,
        generate: Callable[[CoefficientKey], Tensor],
        executor: Executor,
    ):
        self.key = key
        self._generate = generate
        self._executor = executor
        self._condition = threading.Condition()
        self._state = CoefficientState.pending
        self._result: result.Result[Tensor, ComputationError] | None = None
        self._observers: list[Callable[[CoefficientEntry], None]] = []

    @property
    def state(self) -> CoefficientState:
        with self._condition:
            return self._state

    @property
    def settled(self) -> bool:
        return self.state in (CoefficientState.done, CoefficientState.error)

    def start(self) -> bool:
        """Submit the computation unless it was already started.

        Returns:
            Whether this call started the computation.
        """
        with self._condition:
            if self._state is not CoefficientState.pending:
                return False
            self._state = CoefficientState.running

        logger.debug("Starting coefficient %s", self.key)
        try:
            self._executor.submit(self._run)
        except RuntimeError as e:
            self._settle(result.Failure(ComputationError(self.key, e)))
            raise
        return True

    def _run(self):
        try:
            tensor = self._generate(self.key)
        except Exception as e:
            logger.debug("Coefficient %s failed: %s", self.key, e)
            self._settle(result.Failure(ComputationError(self.key, e)))
        else:
            logger.debug("Finished coefficient %s", self.key)
            self._settle(result.Success(tensor))

    def _settle(self, outcome: result.Result[Tensor, ComputationError]):
        with self._condition:
            self._result = outcome
            match outcome:
                case result.Success(_):
                    self._state = CoefficientState.done
                case result.Failure(_):
                    self._state = CoefficientState.error
            observers = self._observers
            self._observers = []
            self._condition.notify_all()

        for observer in observers:
            observer(self)

    def wait(self) -> result.Result[Tensor, ComputationError]:
        """Block until the entry settles, starting it first if it is still pending."""
        self.start()
        with self._condition:
            self._condition.wait_for(lambda: self._result is not None)
            return self._result

    def peek(self) -> maybe.Maybe[Tensor]:
        with self._condition:
            match self._result:
                case result.Success(tensor):
                    return maybe.Some(tensor)
                case _:
                    return maybe.Nothing

    def add_observer(self, observer: Callable[[CoefficientEntry], None]):
        """Call `observer` with this entry once it settles, immediately if it already has."""
        with self._condition:
            if self._result is None:
                self._observers.append(observer)
                return
        observer(self)

    def __repr__(self):
        return f"CoefficientEntry({self.key!r}, state={self.state})"


class CoefficientCache:
    """Keyed store of coefficient computations shared by every equation.

    Each key gets exactly one entry, created pending on first request. Computations run on a thread
    pool.

    Args:
        generate: Function producing the tensor of a key. Defaults to `generate_coefficient`.
        max_workers: Size of the thread pool. Defaults to the `ThreadPoolExecutor` default.
    """

    def __init__(
        self,
        generate: Callable[[CoefficientKey], Tensor] | None = None,
        max_workers: int | None = None,
    ):
        self._generate = generate_coefficient if generate is None else generate
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="coefficient"
        )
        self._lock = threading.Lock()
        self._entries: dict[CoefficientKey, CoefficientEntry] = {}

    def get(self, key: CoefficientKey) -> CoefficientEntry:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                entry = CoefficientEntry(key, self._generate, self._executor)
                self._entries[key] = entry
            return entry

    def request(self, key: CoefficientKey) -> CoefficientEntry:
        entry = self.get(key)
        entry.start()
        return entry

    def start_all(self) -> int:
        """Start every pending entry and return how many were started."""
        started = sum(entry.start() for entry in self.entries())
        logger.debug("Started %d of %d coefficients", started, len(self))
        return started

    def entries(self) -> list[CoefficientEntry]:
        with self._lock:
            return list(self._entries.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __iter__(self) -> Iterator[CoefficientEntry]:
        return iter(self.entries())

    def __contains__(self, key: CoefficientKey) -> bool:
        with self._lock:
            return key in self._entries

    def shutdown(self, wait: bool = True):
        self._executor.shutdown(wait=wait)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.shutdown()
