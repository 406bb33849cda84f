"""Tests for POST /api/step3/enter: input checks, signature verification, consumption policy."""
import base64

import pytest
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey
from fastapi.testclient import TestClient

from credential_server.main import create_app
from credential_server.state import create_state


def _b64url(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def _b64url_decode(value: str) -> bytes:
    return base64.urlsafe_b64decode(value + "=" * (-len(value) % 4))


def _sign(credential_private: str, message: str) -> str:
    key = Ed25519PrivateKey.from_private_bytes(_b64url_decode(credential_private))
    return _b64url(key.sign(message.encode("utf-8")))


def _credential(client):
    token = client.post("/api/step1/verify", json={"username": "alice", "code": "123456"}).json()["verification_token"]
    data = client.post("/api/step2/issue-credentials", json={"verification_token": token}).json()
    return data["credential_id"], data["credential_private"]


def _enter(client, credential_id, message, signature):
    return client.post(
        "/api/step3/enter",
        json={"credential_id": credential_id, "message": message, "signature": signature},
    )


def test_valid_signature_opens_session(client, state):
    cid, priv = _credential(client)
    r = _enter(client, cid, "hello-proof", _sign(priv, "hello-proof"))
    assert r.status_code == 200
    data = r.json()
    assert data["expires_in_seconds"] == 1800
    assert state.sessions.peek(data["session_token"]).username == "alice"
    assert state.credentials.peek(cid) is None


def test_credential_single_use(client, error):
    cid, priv = _credential(client)
    sig = _sign(priv, "hello-proof")
    assert _enter(client, cid, "hello-proof", sig).status_code == 200
    r = _enter(client, cid, "hello-proof", sig)
    assert r.status_code == 401
    assert error(r) == "invalid_or_expired_credential"


def test_unicode_message_signed_as_utf8(client):
    cid, priv = _credential(client)
    msg = "prüfung ✓"
    assert _enter(client, cid, msg, _sign(priv, msg)).status_code == 200


@pytest.mark.parametrize(
    "body,code",
    [
        ({"message": "m", "signature": "s"}, "credential_id_required"),
        ({"credential_id": "  ", "message": "m", "signature": "s"}, "credential_id_required"),
        ({"credential_id": "c", "signature": "s"}, "message_required"),
        ({"credential_id": "c", "message": "", "signature": "s"}, "message_required"),
        ({"credential_id": "c", "message": "m"}, "signature_required"),
        ({"credential_id": "c", "message": "m", "signature": ""}, "signature_required"),
        ({"credential_id": "c", "message": "m", "signature": "not-base64!!"}, "signature_not_base64url"),
        ({"credential_id": "c", "message": "m", "signature": _b64url(bytes(64)) + "=="}, "signature_not_base64url"),
        ({"credential_id": "c", "message": "m", "signature": _b64url(bytes(63))}, "signature_invalid_format"),
        ({"credential_id": "c", "message": "m", "signature": _b64url(bytes(65))}, "signature_invalid_format"),
    ],
)
def test_input_shape_errors(client, error, body, code):
    r = client.post("/api/step3/enter", json=body)
    assert r.status_code == 400
    assert error(r) == code


def test_shape_errors_do_not_touch_credential(client, state, error):
    cid, _ = _credential(client)
    r = _enter(client, cid, "hello-proof", "not-base64!!")
    assert error(r) == "signature_not_base64url"
    assert state.credentials.peek(cid) is not None


def test_unknown_credential(client, error):
    r = _enter(client, "unknown-credential", "hello-proof", _b64url(bytes(64)))
    assert r.status_code == 401
    assert error(r) == "invalid_or_expired_credential"


def test_expired_credential(client, clock, error):
    cid, priv = _credential(client)
    clock.advance(300)
    r = _enter(client, cid, "hello-proof", _sign(priv, "hello-proof"))
    assert r.status_code == 401
    assert error(r) == "invalid_or_expired_credential"


def test_signature_over_other_message_rejected(client, error):
    cid, priv = _credential(client)
    r = _enter(client, cid, "hello-proof", _sign(priv, "something else"))
    assert r.status_code == 401
    assert error(r) == "invalid_signature"


def test_signature_from_other_credential_rejected(client, error):
    cid, _ = _credential(client)
    _, other_priv = _credential(client)
    r = _enter(client, cid, "hello-proof", _sign(other_priv, "hello-proof"))
    assert error(r) == "invalid_signature"


@pytest.mark.parametrize("bit", [0, 7, 100, 511])
def test_single_bit_flip_detected(client, error, bit):
    cid, priv = _credential(client)
    raw = bytearray(_b64url_decode(_sign(priv, "hello-proof")))
    raw[bit // 8] ^= 1 << (bit % 8)
    r = _enter(client, cid, "hello-proof", _b64url(bytes(raw)))
    assert r.status_code == 401
    assert error(r) == "invalid_signature"


def test_bad_signature_keeps_credential_for_retry(client, state, error):
    cid, priv = _credential(client)
    r1 = _enter(client, cid, "hello-proof", _b64url(bytes(64)))
    assert error(r1) == "invalid_signature"
    assert state.credentials.peek(cid) is not None
    r2 = _enter(client, cid, "hello-proof", _sign(priv, "hello-proof"))
    assert r2.status_code == 200


def test_burn_policy_consumes_credential_on_bad_signature(clock, error):
    state = create_state(clock=clock, burn_credential_on_bad_signature=True)
    client = TestClient(create_app(state))
    cid, priv = _credential(client)
    r1 = _enter(client, cid, "hello-proof", _b64url(bytes(64)))
    assert error(r1) == "invalid_signature"
    assert state.credentials.peek(cid) is None
    r2 = _enter(client, cid, "hello-proof", _sign(priv, "hello-proof"))
    assert r2.status_code == 401
    assert error(r2) == "invalid_or_expired_credential"


def test_burn_policy_success_path(clock):
    state = create_state(clock=clock, burn_credential_on_bad_signature=True)
    client = TestClient(create_app(state))
    cid, priv = _credential(client)
    r = _enter(client, cid, "hello-proof", _sign(priv, "hello-proof"))
    assert r.status_code == 200


def test_session_expires_after_ttl(client, state, clock):
    cid, priv = _credential(client)
    session = _enter(client, cid, "hello-proof", _sign(priv, "hello-proof")).json()["session_token"]
    clock.advance(1799)
    assert state.sessions.peek(session) is not None
    clock.advance(1)
    assert state.sessions.peek(session) is None


def test_lone_surrogate_message_rejected(client, state, error):
    cid, _ = _credential(client)
    body = '{"credential_id": "%s", "message": "\\ud800", "signature": "%s"}' % (cid, _b64url(bytes(64)))
    r = client.post("/api/step3/enter", content=body, headers={"Content-Type": "application/json"})
    assert r.status_code == 400
    assert error(r) == "message_not_utf8"
    assert state.credentials.peek(cid) is not None
