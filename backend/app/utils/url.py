"""URL utility functions."""
from urllib.parse import quote

from app.config import settings


def public_site_url(site_id: str) -> str:
    """
    Shareable link to a site's public page.

    Args:
        site_id: Site identifier

    Returns:
        Absolute URL of ``/s/{site_id}``
    """
    return f"{settings.public_base_url.rstrip('/')}/s/{quote(site_id, safe='')}"
