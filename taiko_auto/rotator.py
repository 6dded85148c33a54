# taiko_auto/rotator.py
import threading
import time
from typing import Callable, Generic, Sequence, Tuple, TypeVar

from .errors import ConfigError

T = TypeVar("T")

ROUND_ROBIN = "round_robin"
WINDOW = "window"
POLICIES = (ROUND_ROBIN, WINDOW)


class EndpointRotator(Generic[T]):
    """
    Hands out read endpoints for confirmation checks.

    round_robin advances on every call. window keeps returning the same
    endpoint until `window` seconds have passed since the last switch, then
    moves to the next one. Either way the pool is walked in order, so every
    endpoint gets its turn.
    """

    def __init__(
        self,
        endpoints: Sequence[T],
        policy: str = WINDOW,
        window: float = 30.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        if not endpoints:
            raise ConfigError("endpoint rotator needs at least one endpoint")
        if policy not in POLICIES:
            raise ConfigError(f"unknown rotation policy {policy!r}, expected one of {POLICIES}")
        self._endpoints: Tuple[T, ...] = tuple(endpoints)
        self._policy = policy
        self._window = float(window)
        self._clock = clock
        self._index = 0
        self._last_switch = clock()
        self._lock = threading.Lock()

    @property
    def endpoints(self) -> Tuple[T, ...]:
        return self._endpoints

    @property
    def policy(self) -> str:
        return self._policy

    def __len__(self) -> int:
        return len(self._endpoints)

    def next(self) -> T:
        with self._lock:
            if self._policy == ROUND_ROBIN:
                endpoint = self._endpoints[self._index]
                self._index = (self._index + 1) % len(self._endpoints)
                return endpoint

            now = self._clock()
            if now - self._last_switch > self._window:
                self._index = (self._index + 1) % len(self._endpoints)
                self._last_switch = now
            return self._endpoints[self._index]
