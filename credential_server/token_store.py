"""
In-memory keyed store with TTL, shared by all three stages.
Verification tokens, temporary credentials and sessions each get their own instance.
Ids are random base64url strings; entries are single-use via take().
Expired entries are never returned; sweep() only reclaims memory.
"""
import logging
import secrets
import threading
from dataclasses import dataclass
from typing import Generic, TypeVar

from credential_server.clock import Clock, deadline, is_expired

logger = logging.getLogger(__name__)

V = TypeVar("V")

# 32 bytes -> 43 chars base64url (256 bits entropy)
DEFAULT_TOKEN_BYTES = 32
_MIN_TOKEN_BYTES = 16


def random_token(nbytes: int = DEFAULT_TOKEN_BYTES) -> str:
    """Opaque URL-safe identifier from the OS CSPRNG (no padding)."""
    return secrets.token_urlsafe(nbytes)


@dataclass(frozen=True)
class TimedEntry(Generic[V]):
    value: V
    issued_at: float
    expires_at: float

    def __post_init__(self):
        if self.expires_at <= self.issued_at:
            raise ValueError("expires_at must be after issued_at")


class TokenStore(Generic[V]):
    """Thread-safe id -> TimedEntry mapping with a fixed TTL per store."""

    def __init__(self, name: str, ttl_seconds: float, clock: Clock, token_bytes: int = DEFAULT_TOKEN_BYTES) -> None:
        if ttl_seconds <= 0:
            raise ValueError(f"ttl_seconds must be positive, got {ttl_seconds}")
        if token_bytes < _MIN_TOKEN_BYTES:
            raise ValueError(f"token_bytes must be at least {_MIN_TOKEN_BYTES}")
        self.name = name
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._token_bytes = token_bytes
        self._entries: dict[str, TimedEntry[V]] = {}
        self._lock = threading.Lock()

    def put(self, value: V) -> str:
        """Store value under a fresh id and return the id."""
        issued_at, expires_at = deadline(self._clock, self.ttl_seconds)
        entry = TimedEntry(value=value, issued_at=issued_at, expires_at=expires_at)
        with self._lock:
            token_id = random_token(self._token_bytes)
            # Never overwrite: redraw on the (practically impossible) collision
            while token_id in self._entries:
                token_id = random_token(self._token_bytes)
            self._entries[token_id] = entry
        return token_id

    def take(self, token_id: str | None) -> V | None:
        """
        Remove and return the value if present and live. At most one caller gets a given id.
        Expired entries are dropped here and reported as absent.
        """
        if not token_id:
            return None
        with self._lock:
            entry = self._entries.pop(token_id, None)
        if entry is None or is_expired(self._clock, entry.expires_at):
            return None
        return entry.value

    def peek(self, token_id: str | None) -> V | None:
        """Return the value without consuming it; None if absent or expired."""
        if not token_id:
            return None
        with self._lock:
            entry = self._entries.get(token_id)
            if entry is None:
                return None
            if is_expired(self._clock, entry.expires_at):
                del self._entries[token_id]
                return None
            return entry.value

    def sweep(self) -> int:
        """Drop all expired entries. Returns the number removed."""
        with self._lock:
            expired = [k for k, e in self._entries.items() if is_expired(self._clock, e.expires_at)]
            for k in expired:
                del self._entries[k]
        if expired:
            logger.debug("Swept %d expired entries from %s store", len(expired), self.name)
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
