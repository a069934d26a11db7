"""Site builder API endpoints."""
from typing import List

from fastapi import APIRouter, Depends

from app.auth.session import get_current_session
from app.dependencies import get_generating_site_manager, get_site_manager
from app.schemas.site import (
    GeneratedPage,
    SaveSiteRequest,
    Site,
    SitePrompt,
    SiteResponse,
    UnpublishResponse,
)
from app.services.identity import AuthSession
from app.services.site_lifecycle import SiteLifecycleManager
from app.utils.exceptions import ValidationError
from app.utils.logger import logger
from app.utils.url import public_site_url

router = APIRouter(prefix="/api/sites", tags=["sites"])


def to_response(site: Site) -> SiteResponse:
    """Attach the public link to a published site."""
    return SiteResponse.from_site(site, public_site_url(site.site_id) if site.site_id else None)


@router.get("", response_model=List[SiteResponse])
async def list_sites(
    session: AuthSession = Depends(get_current_session),
    manager: SiteLifecycleManager = Depends(get_site_manager),
) -> List[SiteResponse]:
    """The caller's sites, most recently updated first."""
    return [to_response(site) for site in await manager.list_sites(session.uid)]


@router.get("/new", response_model=Site)
async def new_site(
    session: AuthSession = Depends(get_current_session),
    manager: SiteLifecycleManager = Depends(get_site_manager),
) -> Site:
    """A fresh draft with default prompt values. Nothing is stored until it is saved."""
    return await manager.create_or_load(session.uid)


@router.post("/generate", response_model=GeneratedPage)
async def generate_site(
    prompt: SitePrompt,
    session: AuthSession = Depends(get_current_session),
    manager: SiteLifecycleManager = Depends(get_generating_site_manager),
) -> GeneratedPage:
    """
    Generate a landing page from a structured prompt.

    Args:
        prompt: Title and business type are required
        session: Caller's session
        manager: Site manager

    Returns:
        Generated HTML document and SEO metadata
    """
    if not prompt.title.strip() or not prompt.business_type.strip():
        raise ValidationError("Title and business type are required")

    logger.info(f"[SITES] {session.uid} generating \"{prompt.title}\"")
    return await manager.generate(prompt)


@router.post("/save", response_model=SiteResponse)
async def save_site(
    request: SaveSiteRequest,
    session: AuthSession = Depends(get_current_session),
    manager: SiteLifecycleManager = Depends(get_site_manager),
) -> SiteResponse:
    """
    Save the builder's current state, optionally publishing it.

    Omit ``siteId`` (or pass the id from ``/new``) for a site that was never saved.
    The request carries every editable field; status and timestamps are taken
    from the stored record by the manager.
    """
    site = Site(
        site_id=request.site_id or None,
        owner_uid=session.uid,
        title=request.title if request.title is not None else request.prompt.title,
        prompt=request.prompt,
        content=request.content,
        meta=request.meta,
    )
    return to_response(await manager.save(site, publish=request.publish))


@router.get("/{site_id}", response_model=SiteResponse)
async def get_site(
    site_id: str,
    session: AuthSession = Depends(get_current_session),
    manager: SiteLifecycleManager = Depends(get_site_manager),
) -> SiteResponse:
    """Load one of the caller's sites into the builder."""
    return to_response(await manager.create_or_load(session.uid, site_id))


@router.post("/{site_id}/unpublish", response_model=UnpublishResponse)
async def unpublish_site(
    site_id: str,
    session: AuthSession = Depends(get_current_session),
    manager: SiteLifecycleManager = Depends(get_site_manager),
) -> UnpublishResponse:
    """Take a site off the public collection and mark it draft."""
    await manager.unpublish(site_id, session.uid)
    return UnpublishResponse(success=True, site_id=site_id, status="draft")
