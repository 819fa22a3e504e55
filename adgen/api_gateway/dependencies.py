"""
FastAPI dependencies.

Service lookup and Supabase JWT authentication.
"""

from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from adgen.api_gateway.container import Services
from adgen.api_gateway.orchestrator import AdGenOrchestrator
from adgen.shared.errors import ConfigError
from adgen.shared.logging import get_logger

logger = get_logger(__name__)

# HTTP Bearer token scheme
security = HTTPBearer(auto_error=False)  # Don't auto-raise on missing token

JWT_ALGORITHM = "HS256"
JWT_AUDIENCE = "authenticated"


def get_services(request: Request) -> Services:
    """Return the services built at startup."""
    return request.app.state.services


def get_orchestrator(services: Services = Depends(get_services)) -> AdGenOrchestrator:
    return services.orchestrator


def _decode_token(token: str, secret: Optional[str]) -> dict:
    """
    Validate a Supabase access token.

    Returns:
        Dictionary with user_id and, when present, email

    Raises:
        ConfigError: If SUPABASE_JWT_SECRET is not configured
        HTTPException: If the token is invalid
    """
    if not secret:
        raise ConfigError("SUPABASE_JWT_SECRET is required to authenticate requests")

    try:
        payload = jwt.decode(token, secret, algorithms=[JWT_ALGORITHM], audience=JWT_AUDIENCE)
    except JWTError as e:
        logger.warning("JWT validation failed", extra={"error": str(e)})
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired authentication token",
            headers={"WWW-Authenticate": "Bearer"}
        ) from e

    user_id = payload.get("sub")  # Supabase uses "sub" for user_id
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token: missing user_id"
        )

    user = {"user_id": user_id}
    if payload.get("email"):
        user["email"] = payload["email"]
    return user


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    services: Services = Depends(get_services)
) -> dict:
    """
    Validate the Bearer token and return the current user.

    Raises:
        HTTPException: If the token is missing or invalid
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing authentication token",
            headers={"WWW-Authenticate": "Bearer"}
        )
    return _decode_token(credentials.credentials, services.settings.supabase_jwt_secret)


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    services: Services = Depends(get_services)
) -> Optional[dict]:
    """
    Return the current user, or None for anonymous requests.

    A token that is present but invalid is still rejected.
    """
    if credentials is None:
        return None
    return _decode_token(credentials.credentials, services.settings.supabase_jwt_secret)
