"""Identity provider adapter backed by Supabase Auth (GoTrue) REST API."""
import inspect
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

import httpx

from app.config import settings
from app.utils.exceptions import AuthError
from app.utils.logger import logger, mask_secret


@dataclass
class AuthSession:
    """Signed-in identity plus the tokens that prove it."""
    uid: str
    email: Optional[str] = None
    display_name: Optional[str] = None
    photo_url: Optional[str] = None
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None


SessionCallback = Callable[[Optional[AuthSession]], Union[None, Awaitable[None]]]


class IdentityProvider(ABC):
    """Sign-in, sign-up, sign-out and profile updates against an external provider.

    Listeners registered with ``on_session_change`` hear about every sign-in and
    sign-out made through this adapter.
    """

    def __init__(self):
        self.current_session: Optional[AuthSession] = None
        self._listeners: List[SessionCallback] = []

    def on_session_change(self, callback: SessionCallback) -> Callable[[], None]:
        """Register a listener; returns a function that unregisters it."""
        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    async def _set_session(self, session: Optional[AuthSession]) -> None:
        self.current_session = session
        for callback in list(self._listeners):
            result = callback(session)
            if inspect.isawaitable(result):
                await result

    @abstractmethod
    async def sign_in(self, email: str, password: str) -> AuthSession:
        """Sign in with email and password."""

    @abstractmethod
    async def sign_up(self, email: str, password: str, display_name: str) -> AuthSession:
        """Create an account and sign it in."""

    @abstractmethod
    async def sign_out(self, access_token: Optional[str] = None) -> None:
        """Revoke the session."""

    @abstractmethod
    async def send_password_reset(self, email: str) -> None:
        """Email a password reset link."""

    @abstractmethod
    async def update_display_name(self, name: str, access_token: Optional[str] = None) -> None:
        """Change the signed-in user's display name."""

    @abstractmethod
    async def get_user(self, access_token: str) -> AuthSession:
        """Resolve an access token to the identity it belongs to."""


class SupabaseIdentityProvider(IdentityProvider):
    """Identity provider using the Supabase Auth REST endpoints."""

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        super().__init__()
        self.supabase_url = settings.supabase_url
        self.supabase_key = settings.supabase_anon_key

        if not self.supabase_url or not self.supabase_key:
            raise ValueError(
                "Supabase URL and anon key must be configured. "
                "Set SUPABASE_URL and SUPABASE_ANON_KEY environment variables."
            )

        # Ensure URL doesn't have trailing slash
        self.supabase_url = self.supabase_url.rstrip('/')
        self.auth_url = f"{self.supabase_url}/auth/v1"
        self.timeout = settings.identity_timeout_seconds
        self._transport = transport
        logger.info(f"[AUTH] Using {self.auth_url}, key: {mask_secret(self.supabase_key)}")

    def _headers(self, access_token: Optional[str] = None) -> Dict[str, str]:
        return {
            "apikey": self.supabase_key,
            "Authorization": f"Bearer {access_token or self.supabase_key}",
            "Content-Type": "application/json",
        }

    def _token(self, access_token: Optional[str]) -> str:
        token = access_token or (self.current_session.access_token if self.current_session else None)
        if not token:
            raise AuthError("Not signed in", reason="no_session")
        return token

    async def _request(
        self,
        method: str,
        path: str,
        json: Optional[Dict[str, Any]] = None,
        access_token: Optional[str] = None,
        params: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        """Call an auth endpoint and return the decoded body, raising AuthError on failure."""
        url = f"{self.auth_url}{path}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.request(
                    method,
                    url,
                    headers=self._headers(access_token),
                    json=json,
                    params=params,
                )
        except httpx.HTTPError as e:
            logger.error(f"[AUTH] Request to {path} failed: {e}", exc_info=True)
            raise AuthError("Identity provider unreachable", reason="network_error") from e

        if response.status_code >= 400:
            message, reason = self._parse_error(response)
            logger.warning(f"[AUTH] {path} rejected: {response.status_code} - {reason}")
            raise AuthError(message, reason=reason)

        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError:
            return {}

    @staticmethod
    def _parse_error(response: httpx.Response) -> tuple[str, str]:
        """Pull the provider's message and reason code out of an error response."""
        try:
            body = response.json()
        except ValueError:
            return response.text or "Authentication failed", f"http_{response.status_code}"

        message = (
            body.get("msg")
            or body.get("error_description")
            or body.get("message")
            or "Authentication failed"
        )
        reason = body.get("error_code") or body.get("error") or f"http_{response.status_code}"
        return message, str(reason)

    @staticmethod
    def _session_from_user(
        user: Dict[str, Any],
        access_token: Optional[str] = None,
        refresh_token: Optional[str] = None,
    ) -> AuthSession:
        metadata = user.get("user_metadata") or {}
        return AuthSession(
            uid=user["id"],
            email=user.get("email"),
            display_name=metadata.get("display_name") or metadata.get("full_name"),
            photo_url=metadata.get("avatar_url"),
            access_token=access_token,
            refresh_token=refresh_token,
        )

    def _session_from_token_response(self, data: Dict[str, Any]) -> AuthSession:
        user = data.get("user") or data
        if not user.get("id"):
            raise AuthError("Identity provider returned no user", reason="malformed_response")
        return self._session_from_user(user, data.get("access_token"), data.get("refresh_token"))

    async def sign_in(self, email: str, password: str) -> AuthSession:
        data = await self._request(
            "POST",
            "/token",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
        )
        session = self._session_from_token_response(data)
        logger.info(f"[AUTH] Signed in {session.uid}")
        await self._set_session(session)
        return session

    async def sign_up(self, email: str, password: str, display_name: str) -> AuthSession:
        if len(password) < settings.min_password_length:
            raise AuthError(
                f"Password must be at least {settings.min_password_length} characters long.",
                reason="weak_password",
            )

        data = await self._request(
            "POST",
            "/signup",
            json={
                "email": email,
                "password": password,
                "data": {"display_name": display_name},
            },
        )
        session = self._session_from_token_response(data)
        if not session.display_name:
            session.display_name = display_name
        logger.info(f"[AUTH] Signed up {session.uid}")

        # Projects requiring email confirmation return a user but no tokens yet
        if session.access_token:
            await self._set_session(session)
        return session

    async def sign_out(self, access_token: Optional[str] = None) -> None:
        token = self._token(access_token)
        await self._request("POST", "/logout", access_token=token)
        logger.info("[AUTH] Signed out")
        await self._set_session(None)

    async def send_password_reset(self, email: str) -> None:
        if not email:
            raise AuthError("Please enter your email to reset password", reason="email_required")
        await self._request("POST", "/recover", json={"email": email})
        logger.info("[AUTH] Password reset email requested")

    async def update_display_name(self, name: str, access_token: Optional[str] = None) -> None:
        token = self._token(access_token)
        await self._request(
            "PUT",
            "/user",
            access_token=token,
            json={"data": {"display_name": name}},
        )
        if self.current_session and self.current_session.access_token == token:
            self.current_session.display_name = name

    async def get_user(self, access_token: str) -> AuthSession:
        data = await self._request("GET", "/user", access_token=access_token)
        if not data.get("id"):
            raise AuthError("Invalid session", reason="invalid_token")
        return self._session_from_user(data, access_token=access_token)
