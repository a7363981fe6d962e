"""
Authentication for FastAPI.

Supabase JWT verification and the CallerContext dependency used by every
signature endpoint. With REQUIRE_AUTH=false a request without a token runs
as the anonymous caller; a token that is sent must still be valid.
"""

from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError

from core.config import settings
from core.exceptions import AuthenticationError, InvalidTokenError
from core.logging import get_logger
from models.domain.context import CallerContext, ANONYMOUS

logger = get_logger(__name__)

ALGORITHM = "HS256"

security_optional = HTTPBearer(auto_error=False)


def verify_supabase_token(token: str, secret: str = None) -> dict:
    """
    Verify a Supabase JWT and return the user claims.

    Returns:
        dict with user info: {id, email, role, aud}

    Raises:
        InvalidTokenError: bad signature, expired, or no subject
        AuthenticationError: SUPABASE_JWT_SECRET is not configured
    """
    secret = secret or settings.supabase_jwt_secret
    if not secret:
        logger.error("SUPABASE_JWT_SECRET not configured!")
        raise AuthenticationError("Authentication not configured on server")

    try:
        payload = jwt.decode(
            token,
            secret,
            algorithms=[ALGORITHM],
            options={"verify_aud": False}  # Supabase doesn't always set aud
        )
    except JWTError as e:
        logger.warning(f"Supabase JWT verification failed: {e}")
        raise InvalidTokenError()

    user_id = payload.get("sub")
    if not user_id:
        logger.warning("Supabase JWT without subject")
        raise InvalidTokenError()

    return {
        "id": user_id,
        "email": payload.get("email"),
        "role": payload.get("role", "authenticated"),
        "aud": payload.get("aud"),
    }


async def get_caller_context(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security_optional)
) -> CallerContext:
    """
    CallerContext for the request, injected into enroll, set-primary,
    training and verify endpoints for log attribution.
    """
    if credentials is None:
        if settings.require_auth:
            raise AuthenticationError()
        return ANONYMOUS

    user = verify_supabase_token(credentials.credentials)
    return CallerContext(user_id=user["id"], email=user["email"], role=user["role"])
