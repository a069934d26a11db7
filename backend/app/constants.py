"""Application-wide constants."""

# Site status values
class SiteStatus:
    """Site lifecycle status constants."""
    DRAFT = "draft"
    PUBLISHED = "published"


class ViewState:
    """Screens the view router can be on."""
    AUTH = "auth"
    DASHBOARD = "dashboard"
    BUILDER = "builder"
    PUBLIC = "public"


# Record store collections
USERS_COLLECTION = "users"
SITES_SUBCOLLECTION = "sites"
PUBLIC_SITES_COLLECTION = "publicSites"


def owner_sites_path(owner_uid: str) -> str:
    """Collection path holding an owner's private site records."""
    return f"{USERS_COLLECTION}/{owner_uid}/{SITES_SUBCOLLECTION}"


# Prompt defaults shown in a fresh builder
DEFAULT_PROMPT = {
    "title": "",
    "businessType": "",
    "targetAudience": "General Public",
    "colorTheme": "Modern Blue and White",
    "features": "Hero, About Us, Services, Testimonials, Contact",
    "ctaText": "Get Started Now",
}

SITE_ID_LENGTH = 20  # Same shape as hosted document-store auto IDs
