"""Authentication and profile API endpoints."""
from fastapi import APIRouter, Depends, HTTPException, status

from app.auth.session import get_current_session
from app.dependencies import get_identity_provider, get_profile_service
from app.schemas.auth import (
    AuthResponse,
    DisplayNameUpdate,
    LoginRequest,
    MessageResponse,
    PasswordResetRequest,
    SignUpRequest,
    UserProfile,
)
from app.services.identity import AuthSession, IdentityProvider
from app.services.profile_service import ProfileService
from app.utils.exceptions import AppException
from app.utils.logger import logger

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/signup", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def signup(
    request: SignUpRequest,
    identity: IdentityProvider = Depends(get_identity_provider),
    profiles: ProfileService = Depends(get_profile_service),
) -> AuthResponse:
    """
    Create an account and its profile record.

    Args:
        request: Email, password and display name
        identity: Identity provider
        profiles: Profile service

    Returns:
        The new profile and session tokens
    """
    session = await identity.sign_up(request.email, request.password, request.display_name)
    try:
        profile = await profiles.create_profile(session, request.display_name)
    except AppException:
        raise
    except Exception as e:
        logger.error(f"Failed to create profile for {session.uid}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Account created but profile could not be saved",
        )

    return AuthResponse(
        user=profile,
        access_token=session.access_token,
        refresh_token=session.refresh_token,
    )


@router.post("/login", response_model=AuthResponse)
async def login(
    request: LoginRequest,
    identity: IdentityProvider = Depends(get_identity_provider),
    profiles: ProfileService = Depends(get_profile_service),
) -> AuthResponse:
    """
    Sign in with email and password.

    The profile is read, then ``lastSeen`` is refreshed as its own step.
    """
    session = await identity.sign_in(request.email, request.password)

    profile = await profiles.get_profile(session.uid)
    if profile is None:
        profile = profiles.fallback_profile(session)
    else:
        await profiles.touch_last_seen(session.uid)

    return AuthResponse(
        user=profile,
        access_token=session.access_token,
        refresh_token=session.refresh_token,
    )


@router.post("/logout", response_model=MessageResponse)
async def logout(
    session: AuthSession = Depends(get_current_session),
    identity: IdentityProvider = Depends(get_identity_provider),
) -> MessageResponse:
    """Revoke the caller's session."""
    await identity.sign_out(access_token=session.access_token)
    return MessageResponse(success=True, message="Signed out")


@router.post("/password-reset", response_model=MessageResponse)
async def password_reset(
    request: PasswordResetRequest,
    identity: IdentityProvider = Depends(get_identity_provider),
) -> MessageResponse:
    """Send a password reset email."""
    await identity.send_password_reset(request.email)
    return MessageResponse(success=True, message="Password reset email sent!")


@router.get("/me", response_model=UserProfile)
async def get_me(
    session: AuthSession = Depends(get_current_session),
    profiles: ProfileService = Depends(get_profile_service),
) -> UserProfile:
    """The caller's profile. Read only."""
    profile = await profiles.get_profile(session.uid)
    return profile or profiles.fallback_profile(session)


@router.post("/me/last-seen", response_model=MessageResponse)
async def touch_last_seen(
    session: AuthSession = Depends(get_current_session),
    profiles: ProfileService = Depends(get_profile_service),
) -> MessageResponse:
    """Refresh the caller's ``lastSeen`` timestamp."""
    touched = await profiles.touch_last_seen(session.uid)
    return MessageResponse(
        success=touched,
        message="Last seen updated" if touched else "No profile record",
    )


@router.put("/me/display-name", response_model=UserProfile)
async def update_display_name(
    request: DisplayNameUpdate,
    session: AuthSession = Depends(get_current_session),
    profiles: ProfileService = Depends(get_profile_service),
) -> UserProfile:
    """Rename the caller."""
    name = request.display_name.strip()
    if not name:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Display name is required")

    await profiles.update_display_name(session, name)
    profile = await profiles.get_profile(session.uid)
    return profile or profiles.fallback_profile(session)
