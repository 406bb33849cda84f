"""
Demo client configuration. Defaults match the server's proof-of-concept values.
"""
import os

# Credential server base URL
SERVER_URL = os.environ.get("CRED_SERVER_URL", "http://127.0.0.1:8080").rstrip("/")

USERNAME = os.environ.get("CRED_DEMO_USERNAME", "alice")
CODE = os.environ.get("CRED_DEMO_CODE", "123456")

# Challenge signed in step 3
MESSAGE = os.environ.get("CRED_DEMO_MESSAGE", "hello-proof")

TIMEOUT_SECONDS = 10.0
