"""JWT helpers for bearer-token authentication.

Tokens are issued by the Fixia auth service; this module verifies them and
can mint equivalent tokens for tooling and tests.
"""

import uuid
from datetime import UTC, datetime, timedelta
from typing import Any

from jose import JWTError, jwt

from fixia.config import settings


class InvalidToken(Exception):
    """Raised when a bearer token cannot be trusted."""


def create_access_token(
    user_id: uuid.UUID,
    email: str,
    user_type: str,
    expires_delta: timedelta | None = None,
    issued_at: datetime | None = None,
) -> str:
    iat = issued_at or datetime.now(UTC)
    expire = iat + (expires_delta or timedelta(minutes=settings.jwt_expire_minutes))
    claims = {
        "sub": str(user_id),
        "email": email,
        "user_type": user_type,
        "jti": uuid.uuid4().hex,
        "iat": int(iat.timestamp()),
        "exp": int(expire.timestamp()),
        "iss": settings.jwt_issuer,
        "aud": settings.jwt_audience,
    }
    return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict[str, Any]:
    """Verify signature, expiry, issuer and audience. Raises InvalidToken."""
    try:
        claims = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            audience=settings.jwt_audience,
            issuer=settings.jwt_issuer,
            options={"leeway": settings.jwt_clock_skew_seconds},
        )
    except JWTError as exc:
        raise InvalidToken(str(exc)) from exc

    for claim in ("sub", "email", "user_type"):
        if not claims.get(claim):
            raise InvalidToken(f"Missing claim: {claim}")
    return claims


def verified_subject(token: str) -> str | None:
    """``sub`` of a token that passes verification, else None."""
    try:
        return decode_access_token(token)["sub"]
    except InvalidToken:
        return None
