"""
Client-side signing with the seed returned by step 2.
"""
import base64
import re

from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey

_B64URL_RE = re.compile(r"[A-Za-z0-9_-]*")


def _b64url_decode(value: str) -> bytes:
    if not _B64URL_RE.fullmatch(value) or len(value) % 4 == 1:
        raise ValueError("credential_private is not base64url")
    raw = base64.urlsafe_b64decode(value + "=" * (-len(value) % 4))
    # Same canonical form the server emits: unused trailing bits are zero
    if base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii") != value:
        raise ValueError("credential_private is not canonical base64url")
    return raw


def load_signing_key(credential_private: str) -> Ed25519PrivateKey:
    """Rebuild the Ed25519 key from the base64url 32-byte seed."""
    seed = _b64url_decode(credential_private)
    if len(seed) != 32:
        raise ValueError("invalid private key length")
    return Ed25519PrivateKey.from_private_bytes(seed)


def sign_message(credential_private: str, message: str) -> str:
    """Sign the UTF-8 bytes of message; return the signature as unpadded base64url."""
    signature = load_signing_key(credential_private).sign(message.encode("utf-8"))
    return base64.urlsafe_b64encode(signature).rstrip(b"=").decode("ascii")
