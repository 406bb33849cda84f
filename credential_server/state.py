"""
Records held by the stores and the process-wide context passed to every stage.
"""
from dataclasses import dataclass

from fastapi import Request

from credential_server.clock import Clock, SystemClock
from credential_server.config import (
    BURN_CREDENTIAL_ON_BAD_SIGNATURE,
    CREDENTIAL_TTL_SECONDS,
    SESSION_TTL_SECONDS,
    VERIFICATION_CODE,
    VERIFICATION_TTL_SECONDS,
)
from credential_server.token_store import TokenStore

# Credential ids are shorter than bearer tokens (24 bytes -> 32 chars)
CREDENTIAL_ID_BYTES = 24


@dataclass(frozen=True)
class VerificationRecord:
    username: str


@dataclass(frozen=True)
class CredentialRecord:
    # Raw 32-byte Ed25519 public key. The seed is never stored.
    public_key: bytes
    username: str


@dataclass(frozen=True)
class SessionRecord:
    username: str


@dataclass
class AppState:
    clock: Clock
    verification_code: str
    verification_tokens: TokenStore[VerificationRecord]
    credentials: TokenStore[CredentialRecord]
    sessions: TokenStore[SessionRecord]
    burn_credential_on_bad_signature: bool = False

    def stores(self) -> list[TokenStore]:
        return [self.verification_tokens, self.credentials, self.sessions]


def create_state(
    *,
    clock: Clock | None = None,
    verification_code: str = VERIFICATION_CODE,
    verification_ttl: float = VERIFICATION_TTL_SECONDS,
    credential_ttl: float = CREDENTIAL_TTL_SECONDS,
    session_ttl: float = SESSION_TTL_SECONDS,
    burn_credential_on_bad_signature: bool = BURN_CREDENTIAL_ON_BAD_SIGNATURE,
) -> AppState:
    """Build fresh, empty stores sharing one clock. Defaults come from config."""
    clock = clock or SystemClock()
    return AppState(
        clock=clock,
        verification_code=verification_code,
        verification_tokens=TokenStore("verification", verification_ttl, clock),
        credentials=TokenStore("credential", credential_ttl, clock, token_bytes=CREDENTIAL_ID_BYTES),
        sessions=TokenStore("session", session_ttl, clock),
        burn_credential_on_bad_signature=burn_credential_on_bad_signature,
    )


def get_state(request: Request) -> AppState:
    """FastAPI dependency: the AppState attached to the running app."""
    return request.app.state.credential_state
