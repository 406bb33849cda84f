"""
Step 3: prove possession of the temporary credential by signing a message; get a session token.

Input-shape checks (all 400) run before any store access:
credential_id_required, message_required, message_not_utf8, signature_required,
signature_not_base64url, signature_invalid_format (decoded length != 64).

Credential consumption:
- default: peek, verify, then take. A wrong signature leaves the credential in place
  for a retry within its TTL; only one caller can ever take it on success.
- burn_credential_on_bad_signature: take first, then verify. A wrong signature burns it.
"""
import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from credential_server.errors import (
    CREDENTIAL_ID_REQUIRED,
    INVALID_OR_EXPIRED_CREDENTIAL,
    INVALID_SIGNATURE,
    MESSAGE_NOT_UTF8,
    MESSAGE_REQUIRED,
    SIGNATURE_INVALID_FORMAT,
    SIGNATURE_NOT_BASE64URL,
    SIGNATURE_REQUIRED,
    StageError,
    to_http_exception,
)
from credential_server.keys import SIGNATURE_LENGTH, b64url_decode, verify_signature
from credential_server.state import AppState, SessionRecord, get_state

logger = logging.getLogger(__name__)
router = APIRouter()


class EnterSessionRequest(BaseModel):
    credential_id: str | None = None
    message: str | None = None
    signature: str | None = None


def _decode_signature(signature: str) -> bytes:
    try:
        raw = b64url_decode(signature)
    except ValueError:
        raise StageError.bad_request(SIGNATURE_NOT_BASE64URL, "signature must be unpadded base64url")
    if len(raw) != SIGNATURE_LENGTH:
        raise StageError.bad_request(
            SIGNATURE_INVALID_FORMAT, f"signature must decode to {SIGNATURE_LENGTH} bytes"
        )
    return raw


def _credential_gone() -> StageError:
    return StageError.unauthorized(INVALID_OR_EXPIRED_CREDENTIAL, "Invalid or expired credential")


def _signature_rejected(username: str) -> StageError:
    logger.warning("Signature rejected for username=%s", username)
    return StageError.unauthorized(INVALID_SIGNATURE, "Signature verification failed")


def enter_session(
    state: AppState,
    credential_id: str | None,
    message: str | None,
    signature: str | None,
) -> dict:
    credential_id = (credential_id or "").strip()
    if not credential_id:
        raise StageError.bad_request(CREDENTIAL_ID_REQUIRED, "credential_id is required")
    if not message:
        raise StageError.bad_request(MESSAGE_REQUIRED, "message is required")
    try:
        payload = message.encode("utf-8")
    except UnicodeEncodeError:
        raise StageError.bad_request(MESSAGE_NOT_UTF8, "message must be valid Unicode text")
    if not signature:
        raise StageError.bad_request(SIGNATURE_REQUIRED, "signature is required")
    sig = _decode_signature(signature)

    if state.burn_credential_on_bad_signature:
        cred = state.credentials.take(credential_id)
        if cred is None:
            raise _credential_gone()
        if not verify_signature(cred.public_key, payload, sig):
            raise _signature_rejected(cred.username)
    else:
        cred = state.credentials.peek(credential_id)
        if cred is None:
            raise _credential_gone()
        if not verify_signature(cred.public_key, payload, sig):
            raise _signature_rejected(cred.username)
        # Lost a race with a concurrent success, or expired since the peek
        if state.credentials.take(credential_id) is None:
            raise _credential_gone()

    session_token = state.sessions.put(SessionRecord(username=cred.username))
    logger.info("Session entered: username=%s", cred.username)
    return {
        "session_token": session_token,
        "expires_in_seconds": int(state.sessions.ttl_seconds),
    }


@router.post("/api/step3/enter")
def enter(body: EnterSessionRequest, state: AppState = Depends(get_state)):
    """Step 3. 400 on malformed input, 401 invalid_or_expired_credential / invalid_signature."""
    try:
        return enter_session(state, body.credential_id, body.message, body.signature)
    except StageError as e:
        raise to_http_exception(e)
