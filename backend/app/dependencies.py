"""FastAPI dependency providers for adapters and services."""
from functools import lru_cache

from fastapi import Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.services.document_store import DocumentStore, SQLDocumentStore
from app.services.generator import ContentGenerator, OpenRouterContentGenerator
from app.services.identity import IdentityProvider, SupabaseIdentityProvider
from app.services.profile_service import ProfileService
from app.services.site_lifecycle import SiteLifecycleManager


@lru_cache
def get_identity_provider() -> IdentityProvider:
    """Process-wide identity provider, built on first use."""
    return SupabaseIdentityProvider()


@lru_cache
def get_content_generator() -> ContentGenerator:
    """Process-wide content generator, built on first use."""
    return OpenRouterContentGenerator()


def get_document_store(db: Session = Depends(get_db)) -> DocumentStore:
    """Document store bound to the request's database session."""
    return SQLDocumentStore(db)


def get_site_manager(
    store: DocumentStore = Depends(get_document_store),
) -> SiteLifecycleManager:
    """Site manager for operations that never call the generator."""
    return SiteLifecycleManager(store, generator=None)


def get_generating_site_manager(
    store: DocumentStore = Depends(get_document_store),
    generator: ContentGenerator = Depends(get_content_generator),
) -> SiteLifecycleManager:
    """Site manager wired to the content generator."""
    return SiteLifecycleManager(store, generator=generator)


def get_profile_service(
    store: DocumentStore = Depends(get_document_store),
    identity: IdentityProvider = Depends(get_identity_provider),
) -> ProfileService:
    """Profile service bound to the request's store."""
    return ProfileService(store, identity)
