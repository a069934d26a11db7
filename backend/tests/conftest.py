"""
Pytest configuration and fixtures for the landing page builder tests.
"""
import os
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Set

import pytest
from fastapi.testclient import TestClient

# Settings are read at import time; point them at in-memory SQLite and dummy keys
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENVIRONMENT"] = "test"
os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_ANON_KEY", "test-anon-key")
os.environ.setdefault("GENERATOR_API_KEY", "test-generator-key")

from app.database import Base, SessionLocal, engine
from app.dependencies import get_content_generator, get_identity_provider
from app.main import app
from app.models import Record  # noqa: F401  (registers the table)
from app.schemas.site import GeneratedPage, SitePrompt
from app.services.document_store import DESCENDING, DocumentStore, SQLDocumentStore
from app.services.generator import ContentGenerator
from app.services.identity import AuthSession, IdentityProvider
from app.services.profile_service import ProfileService
from app.services.site_lifecycle import SiteLifecycleManager
from app.utils.exceptions import AuthError, DocumentStoreError


# ============================================================================
# Fakes
# ============================================================================

class SteppingClock:
    """Deterministic clock advancing one second per call."""

    def __init__(self, start: Optional[datetime] = None, step: timedelta = timedelta(seconds=1)):
        self.current = start or datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)
        self.step = step

    def __call__(self) -> datetime:
        value = self.current
        self.current = self.current + self.step
        return value


class FakeContentGenerator(ContentGenerator):
    """Generator returning a small deterministic document."""

    def __init__(self):
        self.prompts: List[SitePrompt] = []
        self.error: Optional[Exception] = None
        self.content_override: Optional[str] = None

    async def generate(self, prompt: SitePrompt) -> GeneratedPage:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        content = self.content_override
        if content is None:
            content = (
                "<!DOCTYPE html><html><head><title>{0}</title></head>"
                "<body><h1>{0}</h1><p>{1}</p></body></html>"
            ).format(prompt.title, prompt.business_type)
        return GeneratedPage(
            content=content,
            seo_title=f"{prompt.title} | {prompt.business_type}",
            seo_description=f"{prompt.title} serves {prompt.target_audience}.",
        )


class FakeIdentityProvider(IdentityProvider):
    """In-memory identity provider with deterministic uids and tokens."""

    def __init__(self):
        super().__init__()
        self.accounts: Dict[str, Dict[str, Any]] = {}
        self.tokens: Dict[str, AuthSession] = {}
        self.reset_emails: List[str] = []

    def register(self, email: str, password: str = "password123", display_name: str = "") -> AuthSession:
        """Create an account without emitting session events."""
        uid = f"uid-{len(self.accounts) + 1}"
        session = AuthSession(
            uid=uid,
            email=email,
            display_name=display_name or None,
            access_token=f"token-{uid}",
            refresh_token=f"refresh-{uid}",
        )
        self.accounts[email] = {"password": password, "session": session}
        self.tokens[session.access_token] = session
        return replace(session)

    async def sign_up(self, email: str, password: str, display_name: str) -> AuthSession:
        if len(password) < 8:
            raise AuthError("Password must be at least 8 characters long.", reason="weak_password")
        if email in self.accounts:
            raise AuthError("User already registered", reason="user_already_exists")
        session = self.register(email, password, display_name)
        await self._set_session(session)
        return session

    async def sign_in(self, email: str, password: str) -> AuthSession:
        account = self.accounts.get(email)
        if account is None or account["password"] != password:
            raise AuthError("Invalid login credentials", reason="invalid_credentials")
        session = account["session"]
        self.tokens[session.access_token] = session
        result = replace(session)
        await self._set_session(result)
        return result

    async def sign_out(self, access_token: Optional[str] = None) -> None:
        token = access_token or (self.current_session.access_token if self.current_session else None)
        self.tokens.pop(token, None)
        await self._set_session(None)

    async def send_password_reset(self, email: str) -> None:
        if not email:
            raise AuthError("Please enter your email to reset password", reason="email_required")
        self.reset_emails.append(email)

    async def update_display_name(self, name: str, access_token: Optional[str] = None) -> None:
        session = self.tokens.get(access_token or "")
        if session is None:
            raise AuthError("Not signed in", reason="no_session")
        session.display_name = name

    async def get_user(self, access_token: str) -> AuthSession:
        session = self.tokens.get(access_token)
        if session is None:
            raise AuthError("Invalid session", reason="invalid_token")
        return replace(session)


class FlakyStore(DocumentStore):
    """Wraps a store and fails chosen operations on chosen collections."""

    def __init__(self, inner: DocumentStore):
        self.inner = inner
        self.fail_set_on: Set[str] = set()
        self.fail_delete_on: Set[str] = set()
        self.fail_get_on: Set[str] = set()
        self.calls: List[tuple] = []

    async def get(self, collection_path: str, record_id: str) -> Dict[str, Any]:
        self.calls.append(("get", collection_path, record_id))
        if collection_path in self.fail_get_on:
            raise DocumentStoreError(f"Simulated read failure on {collection_path}")
        return await self.inner.get(collection_path, record_id)

    async def set(self, collection_path: str, record_id: str, fields: Dict[str, Any], merge: bool = False) -> None:
        self.calls.append(("set", collection_path, record_id))
        if collection_path in self.fail_set_on:
            raise DocumentStoreError(f"Simulated write failure on {collection_path}")
        await self.inner.set(collection_path, record_id, fields, merge=merge)

    async def delete(self, collection_path: str, record_id: str) -> None:
        self.calls.append(("delete", collection_path, record_id))
        if collection_path in self.fail_delete_on:
            raise DocumentStoreError(f"Simulated delete failure on {collection_path}")
        await self.inner.delete(collection_path, record_id)

    async def list(self, collection_path: str, order_by: Optional[str] = None, direction: str = DESCENDING):
        return await self.inner.list(collection_path, order_by=order_by, direction=direction)


# ============================================================================
# Database Fixtures
# ============================================================================

@pytest.fixture(scope="function")
def db_session():
    """Fresh records table per test."""
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def store(db_session) -> SQLDocumentStore:
    return SQLDocumentStore(db_session)


@pytest.fixture
def flaky_store(store) -> FlakyStore:
    return FlakyStore(store)


@pytest.fixture
def fresh_store(db_session):
    """Store on a separate session, for reading what the API committed."""
    session = SessionLocal()
    try:
        yield SQLDocumentStore(session)
    finally:
        session.close()


# ============================================================================
# Service Fixtures
# ============================================================================

@pytest.fixture
def clock() -> SteppingClock:
    return SteppingClock()


@pytest.fixture
def generator() -> FakeContentGenerator:
    return FakeContentGenerator()


@pytest.fixture
def identity() -> FakeIdentityProvider:
    return FakeIdentityProvider()


@pytest.fixture
def manager(store, generator, clock) -> SiteLifecycleManager:
    return SiteLifecycleManager(store, generator=generator, clock=clock)


@pytest.fixture
def flaky_manager(flaky_store, generator, clock) -> SiteLifecycleManager:
    return SiteLifecycleManager(flaky_store, generator=generator, clock=clock)


@pytest.fixture
def profiles(store, identity, clock) -> ProfileService:
    return ProfileService(store, identity, clock=clock)


@pytest.fixture
def acme_prompt() -> SitePrompt:
    return SitePrompt(title="Acme", business_type="Bakery")


# ============================================================================
# API Fixtures
# ============================================================================

@pytest.fixture
def client(db_session, identity, generator):
    """Test client with fake identity provider and generator."""
    app.dependency_overrides[get_identity_provider] = lambda: identity
    app.dependency_overrides[get_content_generator] = lambda: generator
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def owner(identity) -> AuthSession:
    return identity.register("owner@example.com", display_name="Owner")


@pytest.fixture
def auth_headers(owner) -> Dict[str, str]:
    return {"Authorization": f"Bearer {owner.access_token}"}


@pytest.fixture
def other_headers(identity) -> Dict[str, str]:
    other = identity.register("other@example.com", display_name="Other")
    return {"Authorization": f"Bearer {other.access_token}"}
