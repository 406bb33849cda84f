"""
Clock and TTL helpers. Stores take a clock so expiry can be driven from tests.
"""
import time
from typing import Protocol


class Clock(Protocol):
    def now(self) -> float:
        """Current instant in seconds. Only differences between instants are meaningful."""
        ...


class SystemClock:
    """Monotonic wall clock; immune to system time changes."""

    def now(self) -> float:
        return time.monotonic()


def deadline(clock: Clock, ttl_seconds: float) -> tuple[float, float]:
    """Return (issued_at, expires_at) for an entry created now."""
    issued_at = clock.now()
    return issued_at, issued_at + ttl_seconds


def is_expired(clock: Clock, expires_at: float) -> bool:
    # The expiry instant itself is already dead.
    return clock.now() >= expires_at
