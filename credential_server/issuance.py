"""
Step 2: exchange a verification token for a temporary Ed25519 credential.
The seed goes back to the client and is not kept; only the public key is stored.
"""
import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from credential_server.errors import (
    INVALID_OR_EXPIRED_VERIFICATION_TOKEN,
    VERIFICATION_TOKEN_REQUIRED,
    StageError,
    to_http_exception,
)
from credential_server.keys import b64url_encode, generate_seed, public_key_from_seed
from credential_server.state import AppState, CredentialRecord, get_state

logger = logging.getLogger(__name__)
router = APIRouter()


class IssueCredentialsRequest(BaseModel):
    verification_token: str | None = None


def _new_keypair() -> tuple[bytes, bytes]:
    """Return (seed, public_key). Fails closed if the OS random source is unavailable."""
    try:
        seed = generate_seed()
    except (OSError, NotImplementedError):
        logger.exception("Secure random source failed; refusing to issue credential")
        raise StageError.internal("Could not generate credential")
    return seed, public_key_from_seed(seed)


def _token_rejected() -> StageError:
    return StageError.unauthorized(
        INVALID_OR_EXPIRED_VERIFICATION_TOKEN, "Invalid or expired verification token"
    )


def issue_credentials(state: AppState, verification_token: str | None) -> dict:
    token = (verification_token or "").strip()
    if not token:
        raise StageError.bad_request(VERIFICATION_TOKEN_REQUIRED, "verification_token is required")

    if state.verification_tokens.peek(token) is None:
        raise _token_rejected()

    # Key generation before take: an RNG failure must not consume the verification token.
    seed, public_key = _new_keypair()

    verified = state.verification_tokens.take(token)
    if verified is None:
        # A concurrent request consumed it, or it expired since the peek
        raise _token_rejected()

    credential_id = state.credentials.put(CredentialRecord(public_key=public_key, username=verified.username))
    logger.info("Temporary credential issued for username=%s", verified.username)

    return {
        "credential_id": credential_id,
        "credential_private": b64url_encode(seed),
        "expires_in_seconds": int(state.credentials.ttl_seconds),
    }


@router.post("/api/step2/issue-credentials")
def issue(body: IssueCredentialsRequest, state: AppState = Depends(get_state)):
    """Step 2. 400 verification_token_required, 401 invalid_or_expired_verification_token."""
    try:
        return issue_credentials(state, body.verification_token)
    except StageError as e:
        raise to_http_exception(e)
