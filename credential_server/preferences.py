"""
POST /api/user/preferences: shape validation and echo. Nothing is stored.
"""
import re
from typing import Any

from fastapi import APIRouter, Body

from credential_server.config import PREFERENCE_KEY_PATTERN
from credential_server.errors import (
    INVALID_PREFERENCE_KEY,
    PREFERENCES_EMPTY,
    PREFERENCES_MUST_BE_OBJECT,
    StageError,
    to_http_exception,
)

router = APIRouter()

_KEY_RE = re.compile(PREFERENCE_KEY_PATTERN)


def validate_preferences(payload: Any) -> dict:
    if not isinstance(payload, dict):
        raise StageError.bad_request(PREFERENCES_MUST_BE_OBJECT, "preferences must be a JSON object")
    if not payload:
        raise StageError.bad_request(PREFERENCES_EMPTY, "preferences must not be empty")
    for key in payload:
        if not _KEY_RE.fullmatch(key):
            raise StageError.bad_request(INVALID_PREFERENCE_KEY, "Invalid preference key")
    return {"ok": True, "preferences": payload}


@router.post("/api/user/preferences")
def submit_preferences(payload: Any = Body(None)):
    try:
        return validate_preferences(payload)
    except StageError as e:
        raise to_http_exception(e)
