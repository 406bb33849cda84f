"""
Ed25519 key material for temporary credentials.
The client receives the 32-byte seed; the server keeps only the raw public key.
"""
import base64
import re
import secrets

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey, Ed25519PublicKey

SEED_LENGTH = 32
PUBLIC_KEY_LENGTH = 32
SIGNATURE_LENGTH = 64

_B64URL_RE = re.compile(r"[A-Za-z0-9_-]*")


def b64url_encode(raw: bytes) -> str:
    """base64url without padding."""
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def b64url_decode(value: str) -> bytes:
    """
    Strict unpadded base64url decode. Raises ValueError on padding, whitespace,
    characters outside [A-Za-z0-9_-], an impossible length, or non-zero trailing bits.
    """
    if not _B64URL_RE.fullmatch(value):
        raise ValueError("not base64url")
    if len(value) % 4 == 1:
        raise ValueError("invalid base64url length")
    raw = base64.urlsafe_b64decode(value + "=" * (-len(value) % 4))
    # Unused trailing bits must be zero
    if b64url_encode(raw) != value:
        raise ValueError("non-canonical base64url")
    return raw


def generate_seed() -> bytes:
    """Fresh private seed from the OS CSPRNG. Propagates OSError if the source fails."""
    return secrets.token_bytes(SEED_LENGTH)


def signing_key_from_seed(seed: bytes) -> Ed25519PrivateKey:
    if len(seed) != SEED_LENGTH:
        raise ValueError("invalid private key length")
    return Ed25519PrivateKey.from_private_bytes(seed)


def public_key_from_seed(seed: bytes) -> bytes:
    """Raw 32-byte public key derived from the seed."""
    return signing_key_from_seed(seed).public_key().public_bytes(
        encoding=serialization.Encoding.Raw,
        format=serialization.PublicFormat.Raw,
    )


def verify_signature(public_key: bytes, message: bytes, signature: bytes) -> bool:
    """True if signature is a valid Ed25519 signature of message under public_key."""
    if len(signature) != SIGNATURE_LENGTH:
        return False
    try:
        Ed25519PublicKey.from_public_bytes(public_key).verify(signature, message)
    except InvalidSignature:
        return False
    return True
