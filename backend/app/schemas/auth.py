"""Schemas for authentication and user profiles."""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class SignUpRequest(BaseModel):
    """Request schema for /api/auth/signup endpoint."""
    email: str
    password: str
    display_name: str = Field("", alias="displayName")

    class Config:
        populate_by_name = True


class LoginRequest(BaseModel):
    """Request schema for /api/auth/login endpoint."""
    email: str
    password: str


class PasswordResetRequest(BaseModel):
    """Request schema for /api/auth/password-reset endpoint."""
    email: str = ""


class DisplayNameUpdate(BaseModel):
    """Request schema for /api/auth/me/display-name endpoint."""
    display_name: str = Field(..., alias="displayName")

    class Config:
        populate_by_name = True


class UserProfile(BaseModel):
    """Profile record kept in the users collection."""
    uid: str
    email: Optional[str] = None
    display_name: Optional[str] = Field(None, alias="displayName")
    photo_url: Optional[str] = Field(None, alias="photoURL")
    created_at: Optional[datetime] = Field(None, alias="createdAt")
    last_seen: Optional[datetime] = Field(None, alias="lastSeen")

    class Config:
        populate_by_name = True


class AuthResponse(BaseModel):
    """Response schema for sign-in and sign-up."""
    user: UserProfile
    access_token: Optional[str] = Field(None, alias="accessToken")
    refresh_token: Optional[str] = Field(None, alias="refreshToken")

    class Config:
        populate_by_name = True


class MessageResponse(BaseModel):
    """Generic acknowledgement."""
    success: bool
    message: str
