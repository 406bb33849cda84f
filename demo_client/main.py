"""
Demo client: walks the three steps against a running credential server.
verify -> issue credential -> sign challenge locally -> enter session -> submit preferences.
Run: python -m demo_client.main
"""
import logging
from dataclasses import dataclass

import httpx

from demo_client.config import CODE, MESSAGE, SERVER_URL, TIMEOUT_SECONDS, USERNAME
from demo_client.signing import sign_message

logger = logging.getLogger(__name__)

DEMO_PREFERENCES = {"theme": "dark", "notifications": True}


@dataclass
class FlowResult:
    verification_token: str
    credential_id: str
    credential_private: str
    session_token: str
    preferences: dict


def _post(http: httpx.Client, path: str, payload) -> dict:
    response = http.post(path, json=payload)
    response.raise_for_status()
    return response.json()


def run_flow(http: httpx.Client, *, username: str = USERNAME, code: str = CODE, message: str = MESSAGE) -> FlowResult:
    """
    Run the full flow with an httpx client whose base_url points at the server.
    Raises httpx.HTTPStatusError on the first non-2xx response.
    """
    verified = _post(http, "/api/step1/verify", {"username": username, "code": code})
    verification_token = verified["verification_token"]
    logger.info("Step 1 ok: verification token valid for %ss", verified["expires_in_seconds"])

    issued = _post(http, "/api/step2/issue-credentials", {"verification_token": verification_token})
    credential_id = issued["credential_id"]
    credential_private = issued["credential_private"]
    logger.info("Step 2 ok: credential valid for %ss", issued["expires_in_seconds"])

    signature = sign_message(credential_private, message)
    entered = _post(
        http,
        "/api/step3/enter",
        {"credential_id": credential_id, "message": message, "signature": signature},
    )
    logger.info("Step 3 ok: session valid for %ss", entered["expires_in_seconds"])

    prefs = _post(http, "/api/user/preferences", DEMO_PREFERENCES)

    return FlowResult(
        verification_token=verification_token,
        credential_id=credential_id,
        credential_private=credential_private,
        session_token=entered["session_token"],
        preferences=prefs,
    )


def main() -> int:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    with httpx.Client(base_url=SERVER_URL, timeout=TIMEOUT_SECONDS) as http:
        try:
            result = run_flow(http, username=USERNAME, code=CODE, message=MESSAGE)
        except httpx.HTTPStatusError as e:
            logger.error("Flow failed at %s: %s %s", e.request.url.path, e.response.status_code, e.response.text)
            return 1
        except httpx.RequestError as e:
            logger.error("Could not reach %s: %s", SERVER_URL, e)
            return 1

    print(f"verification_token: {result.verification_token}")
    print(f"credential_id: {result.credential_id}")
    print(f"credential_private (client-held): {result.credential_private}")
    print(f"session_token: {result.session_token}")
    print(f"preferences response: {result.preferences}")
    print("\nFlow complete")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
