"""Pydantic schemas for request/response validation."""
from app.schemas.site import (
    GeneratedPage,
    PublicSite,
    SaveSiteRequest,
    SeoMeta,
    Site,
    SitePrompt,
    SiteResponse,
    UnpublishResponse,
)
from app.schemas.auth import (
    AuthResponse,
    DisplayNameUpdate,
    LoginRequest,
    MessageResponse,
    PasswordResetRequest,
    SignUpRequest,
    UserProfile,
)

__all__ = [
    "GeneratedPage",
    "PublicSite",
    "SaveSiteRequest",
    "SeoMeta",
    "Site",
    "SitePrompt",
    "SiteResponse",
    "UnpublishResponse",
    "AuthResponse",
    "DisplayNameUpdate",
    "LoginRequest",
    "MessageResponse",
    "PasswordResetRequest",
    "SignUpRequest",
    "UserProfile",
]
