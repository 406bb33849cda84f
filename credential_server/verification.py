"""
Step 1: check the static code and mint a single-use verification token.
"""
import hmac
import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from credential_server.errors import INVALID_CODE, USERNAME_REQUIRED, StageError, to_http_exception
from credential_server.state import AppState, VerificationRecord, get_state

logger = logging.getLogger(__name__)
router = APIRouter()


class VerifyUserRequest(BaseModel):
    username: str | None = None
    code: str | None = None


def _code_matches(code: str | None, expected: str) -> bool:
    if code is None:
        return False
    try:
        given = code.encode("utf-8")
    except UnicodeEncodeError:
        # Lone surrogates from JSON escapes cannot equal the configured code
        return False
    return hmac.compare_digest(given, expected.encode("utf-8"))


def verify_user(state: AppState, username: str | None, code: str | None) -> dict:
    """
    Issue a verification token when code matches the configured value.
    A rejected attempt leaves the stores untouched, so the caller may simply retry.
    """
    username = (username or "").strip()
    if not username:
        raise StageError.bad_request(USERNAME_REQUIRED, "username is required")

    if not _code_matches(code, state.verification_code):
        logger.warning("Verification code rejected for username=%s", username)
        raise StageError.unauthorized(INVALID_CODE, "Invalid verification code")

    token = state.verification_tokens.put(VerificationRecord(username=username))
    logger.info("User verified: username=%s", username)
    return {
        "verification_token": token,
        "expires_in_seconds": int(state.verification_tokens.ttl_seconds),
    }


@router.post("/api/step1/verify")
def verify(body: VerifyUserRequest, state: AppState = Depends(get_state)):
    """Step 1. 400 username_required, 401 invalid_code."""
    try:
        return verify_user(state, body.username, body.code)
    except StageError as e:
        raise to_http_exception(e)
