"""Bearer-token authentication against the identity provider."""
from typing import Optional
from fastapi import Depends, Header

from app.dependencies import get_identity_provider
from app.services.identity import AuthSession, IdentityProvider
from app.utils.exceptions import AuthError, authentication_error
from app.utils.logger import logger


async def get_current_session(
    authorization: Optional[str] = Header(None, description="Bearer access token"),
    identity: IdentityProvider = Depends(get_identity_provider),
) -> AuthSession:
    """
    Resolve the request's bearer token to a session.

    Args:
        authorization: Authorization header ("Bearer <token>")
        identity: Identity provider

    Returns:
        The caller's session

    Raises:
        HTTPException: If the token is missing or rejected
    """
    if not authorization:
        raise authentication_error("Authorization token is required")

    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        raise authentication_error("Invalid authorization header")

    try:
        return await identity.get_user(token)
    except AuthError as e:
        logger.info(f"[AUTH] Rejected token: {e.reason}")
        raise authentication_error("Invalid or expired session", reason=e.reason)
