"""Bearer-token authentication dependencies for FastAPI."""

import logging
import uuid
from datetime import UTC, datetime, timedelta

from fastapi import Depends, HTTPException, Request
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fixia.auth.tokens import InvalidToken, decode_access_token
from fixia.config import settings
from fixia.database import get_db
from fixia.models.user import User, UserType
from fixia.utils.dates import as_utc

logger = logging.getLogger(__name__)


class AuthenticatedUser:
    """Container for the verified user context."""

    def __init__(self, user_id: uuid.UUID, user: User, token: str) -> None:
        self.user_id = user_id
        self.user = user
        self.token = token

    @property
    def is_explorer(self) -> bool:
        return self.user.user_type == UserType.CUSTOMER


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=401, detail=detail, headers={"WWW-Authenticate": "Bearer"}
    )


async def verify_request(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> AuthenticatedUser:
    """Verify the bearer token and load the active user behind it."""
    auth_header = request.headers.get("Authorization")
    if not auth_header:
        raise _unauthorized("Access token required")

    scheme, _, token = auth_header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise _unauthorized("Invalid authorization scheme")
    token = token.strip()

    try:
        claims = decode_access_token(token)
        user_id = uuid.UUID(claims["sub"])
    except (InvalidToken, ValueError) as exc:
        logger.info("Rejected bearer token: %s", exc)
        raise _unauthorized("Invalid or expired token")

    result = await db.execute(select(User).where(User.user_id == user_id))
    user = result.scalar_one_or_none()
    if user is None:
        raise _unauthorized("User not found")

    if not user.is_active:
        raise _unauthorized("Account deactivated")

    # Tokens minted before the latest login are superseded
    if user.last_login is not None and "iat" in claims:
        last_login = as_utc(user.last_login)
        issued_at = datetime.fromtimestamp(claims["iat"], UTC)
        if issued_at < last_login - timedelta(seconds=settings.stale_token_tolerance_seconds):
            raise _unauthorized("Stale token, please sign in again")

    return AuthenticatedUser(user_id=user_id, user=user, token=token)


async def require_explorer(
    auth: AuthenticatedUser = Depends(verify_request),
) -> AuthenticatedUser:
    """Only Explorers (customers) may use the review-obligation endpoints."""
    if not auth.is_explorer:
        raise HTTPException(status_code=403, detail="Only explorers can access this resource")
    return auth
