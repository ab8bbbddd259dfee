"""Record ids and per-record secure access tokens.

A secure token is a bearer credential: whoever holds the string may fetch the
record's file. Validation is exact equality against the stored token and
nothing else.
"""
import base64
import hmac
import re
import secrets
import string
import time
from typing import Optional

_ID_ALPHABET = string.ascii_lowercase + string.digits
_NON_ALNUM = re.compile(r"[^a-zA-Z0-9]")


def _now_ms() -> int:
    return int(time.time() * 1000)


def new_file_id() -> str:
    """e.g. ``pitch_1718000000000_k3j9x0q2a``"""
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(9))
    return f"pitch_{_now_ms()}_{suffix}"


def generate_secure_token(file_id: str) -> str:
    """Derive an opaque URL-safe token from the id, a timestamp and 16 random bytes."""
    raw = f"{file_id}_{_now_ms()}_{secrets.token_hex(16)}"
    encoded = base64.b64encode(raw.encode("utf-8")).decode("ascii")
    return _NON_ALNUM.sub("", encoded)


def verify_token(stored: Optional[str], presented: Optional[str]) -> bool:
    if not stored or not presented:
        return False
    return hmac.compare_digest(stored.encode("utf-8"), presented.encode("utf-8"))


def extract_bearer(authorization: Optional[str]) -> Optional[str]:
    """Return the token from an ``Authorization: Bearer <token>`` header, else None."""
    if not authorization or not authorization.startswith("Bearer "):
        return None
    token = authorization[len("Bearer "):]
    return token or None
