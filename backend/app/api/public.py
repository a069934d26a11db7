"""Public (unauthenticated) site endpoints."""
from html import escape

from fastapi import APIRouter, Depends, status
from fastapi.responses import HTMLResponse

from app.dependencies import get_site_manager
from app.schemas.site import PublicSite
from app.services.site_lifecycle import SiteLifecycleManager
from app.utils.exceptions import NotFoundError

router = APIRouter(tags=["public"])

NOT_FOUND_PAGE = """<!DOCTYPE html>
<html lang="en">
<head><meta charset="utf-8"><title>Site not found</title></head>
<body style="font-family: sans-serif; text-align: center; padding-top: 4rem;">
<h1>404</h1>
<p>Site not found or not published.</p>
</body>
</html>"""


@router.get("/api/public/sites/{site_id}", response_model=PublicSite)
async def get_public_site(
    site_id: str,
    manager: SiteLifecycleManager = Depends(get_site_manager),
) -> PublicSite:
    """Published site data. Draft and unpublished sites are 404."""
    return await manager.get_public_site(site_id)


@router.get("/s/{site_id}", response_class=HTMLResponse)
async def view_public_site(
    site_id: str,
    manager: SiteLifecycleManager = Depends(get_site_manager),
) -> HTMLResponse:
    """
    Serve a published site's document.

    The document comes from the public copy only, so unsaved or unpublished
    edits are never shown.
    """
    try:
        public_site = await manager.get_public_site(site_id)
    except NotFoundError:
        return HTMLResponse(NOT_FOUND_PAGE, status_code=status.HTTP_404_NOT_FOUND)

    headers = {
        # Generated pages pull Tailwind/FontAwesome from CDNs; keep them away from our origin
        "Content-Security-Policy": "sandbox allow-scripts allow-popups allow-forms",
        "X-Site-Title": escape(public_site.meta.seo_title or public_site.title),
    }
    return HTMLResponse(public_site.content, headers=headers)
