"""JWT encode/decode utilities for operator tokens."""

from datetime import datetime, timedelta, timezone

import jwt

from conductor.config import settings

ALGORITHM = "HS256"
TOKEN_EXPIRY_HOURS = 24
_JWT_AUD = "conductor"
_JWT_ISS = "conductor"


def create_token(operator: str, expires_in: timedelta | None = None) -> str:
    """Create a JWT token for the given operator."""
    now = datetime.now(timezone.utc)
    payload = {
        "sub": operator,
        "aud": _JWT_AUD,
        "iss": _JWT_ISS,
        "exp": now + (expires_in or timedelta(hours=TOKEN_EXPIRY_HOURS)),
        "iat": now,
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=ALGORITHM)


def decode_token(token: str) -> dict:
    """Decode and validate a JWT token. Raises jwt.PyJWTError on failure."""
    return jwt.decode(
        token,
        settings.JWT_SECRET,
        algorithms=[ALGORITHM],
        audience=_JWT_AUD,
        issuer=_JWT_ISS,
        options={"require": ["exp", "iat", "sub", "aud", "iss"]},
    )
