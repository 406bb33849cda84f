"""
Error codes returned by the stages. 400 = malformed input, 401 = failed authentication,
500 = internal failure (fail closed). Wire shape follows the HTTPException detail convention.
"""
from fastapi import HTTPException, status

USERNAME_REQUIRED = "username_required"
INVALID_CODE = "invalid_code"
VERIFICATION_TOKEN_REQUIRED = "verification_token_required"
INVALID_OR_EXPIRED_VERIFICATION_TOKEN = "invalid_or_expired_verification_token"
CREDENTIAL_ID_REQUIRED = "credential_id_required"
MESSAGE_REQUIRED = "message_required"
MESSAGE_NOT_UTF8 = "message_not_utf8"
SIGNATURE_REQUIRED = "signature_required"
SIGNATURE_NOT_BASE64URL = "signature_not_base64url"
SIGNATURE_INVALID_FORMAT = "signature_invalid_format"
INVALID_OR_EXPIRED_CREDENTIAL = "invalid_or_expired_credential"
INVALID_SIGNATURE = "invalid_signature"
PREFERENCES_MUST_BE_OBJECT = "preferences_must_be_object"
PREFERENCES_EMPTY = "preferences_empty"
INVALID_PREFERENCE_KEY = "invalid_preference_key"
INTERNAL_ERROR = "internal_error"


class StageError(Exception):
    """Raised by a stage when a request is rejected. Recovered at the route boundary."""

    def __init__(self, status_code: int, error: str, description: str = "") -> None:
        self.status_code = status_code
        self.error = error
        self.description = description
        super().__init__(f"{status_code} {error}")

    @classmethod
    def bad_request(cls, error: str, description: str = "") -> "StageError":
        return cls(status.HTTP_400_BAD_REQUEST, error, description)

    @classmethod
    def unauthorized(cls, error: str, description: str = "") -> "StageError":
        return cls(status.HTTP_401_UNAUTHORIZED, error, description)

    @classmethod
    def internal(cls, description: str = "Internal error") -> "StageError":
        return cls(status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_ERROR, description)


def to_http_exception(exc: StageError) -> HTTPException:
    detail = {"error": exc.error}
    if exc.description:
        detail["error_description"] = exc.description
    return HTTPException(status_code=exc.status_code, detail=detail)
