"""
Credential server configuration.
TTLs are fixed; the verification code and runtime knobs may come from env.
"""
import os

# Comparison code for step 1. Proof-of-concept value; override with env.
VERIFICATION_CODE = os.environ.get("CRED_VERIFICATION_CODE", "123456")

# Verification token lifetime (seconds): 5 minutes
VERIFICATION_TTL_SECONDS = 300

# Temporary credential lifetime (seconds)
CREDENTIAL_TTL_SECONDS = 300

# Session token lifetime (seconds): 30 minutes
SESSION_TTL_SECONDS = 1800

# Background sweep of expired entries. Lookups check expiry themselves, so this only reclaims memory.
SWEEP_INTERVAL_SECONDS = float(os.environ.get("CRED_SWEEP_INTERVAL_SECONDS", "30"))

# When true, a wrong signature in step 3 consumes the credential; when false the caller may retry within the TTL.
BURN_CREDENTIAL_ON_BAD_SIGNATURE = os.environ.get(
    "CRED_BURN_CREDENTIAL_ON_BAD_SIGNATURE", "false"
).strip().lower() in ("1", "true", "yes", "on")

# Allowed preference keys
PREFERENCE_KEY_PATTERN = r"^[A-Za-z0-9][A-Za-z0-9_.-]{0,63}$"

# CORS origins, comma-separated ("*" = any)
CORS_ALLOW_ORIGINS = [
    o.strip() for o in os.environ.get("CRED_CORS_ALLOW_ORIGINS", "*").split(",") if o.strip()
]

HOST = os.environ.get("CRED_HOST", "0.0.0.0")
PORT = int(os.environ.get("CRED_PORT", "8080"))
