"""
Pytest configuration for credential_server. Stores run on a manual clock so TTLs can be stepped over.
"""
import pytest
from fastapi.testclient import TestClient

from credential_server.main import create_app
from credential_server.state import create_state


class ManualClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.current = start

    def now(self) -> float:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += seconds


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def state(clock):
    return create_state(clock=clock, verification_code="123456", burn_credential_on_bad_signature=False)


@pytest.fixture
def client(state):
    return TestClient(create_app(state))


def error_of(response) -> str | None:
    body = response.json()
    return (body.get("detail") or body).get("error")


@pytest.fixture
def error():
    return error_of
