"""Schemas for sites, their public copies and generated pages."""
from datetime import datetime
from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, Field

from app.constants import DEFAULT_PROMPT, SiteStatus


class SitePrompt(BaseModel):
    """Structured description of the landing page the user wants."""
    title: str = Field(DEFAULT_PROMPT["title"], description="Business / site name")
    business_type: str = Field(DEFAULT_PROMPT["businessType"], alias="businessType")
    target_audience: str = Field(DEFAULT_PROMPT["targetAudience"], alias="targetAudience")
    color_theme: str = Field(DEFAULT_PROMPT["colorTheme"], alias="colorTheme")
    features: str = Field(DEFAULT_PROMPT["features"], description="Requested sections")
    cta_text: str = Field(DEFAULT_PROMPT["ctaText"], alias="ctaText")

    class Config:
        populate_by_name = True


class SeoMeta(BaseModel):
    """Search-engine metadata for a page."""
    seo_title: str = Field("", alias="seoTitle")
    seo_description: str = Field("", alias="seoDescription")

    class Config:
        populate_by_name = True


class GeneratedPage(BaseModel):
    """Output of the content generator."""
    content: str
    seo_title: str = Field("", alias="seoTitle")
    seo_description: str = Field("", alias="seoDescription")

    class Config:
        populate_by_name = True

    @property
    def meta(self) -> SeoMeta:
        return SeoMeta(seo_title=self.seo_title, seo_description=self.seo_description)


class Site(BaseModel):
    """An owner's landing page project, draft or published.

    ``site_id`` is None until the first save mints one.
    """
    site_id: Optional[str] = Field(None, alias="siteId")
    owner_uid: str = Field(..., alias="ownerUid")
    title: str = ""
    prompt: SitePrompt = Field(default_factory=SitePrompt)
    content: str = Field("", alias="html")
    meta: SeoMeta = Field(default_factory=SeoMeta)
    status: Literal["draft", "published"] = SiteStatus.DRAFT
    created_at: Optional[datetime] = Field(None, alias="createdAt")
    updated_at: Optional[datetime] = Field(None, alias="updatedAt")
    published_at: Optional[datetime] = Field(None, alias="publishedAt")

    class Config:
        populate_by_name = True

    @property
    def is_published(self) -> bool:
        return self.status == SiteStatus.PUBLISHED

    @classmethod
    def from_record(cls, data: Dict[str, Any]) -> "Site":
        """Build a site from a stored owner-scoped record."""
        return cls.model_validate(data)


class PublicSite(BaseModel):
    """Denormalized, publicly readable copy of a published site."""
    site_id: str = Field(..., alias="siteId")
    owner_uid: str = Field(..., alias="ownerUid")
    title: str = ""
    content: str = Field("", alias="html")
    meta: SeoMeta = Field(default_factory=SeoMeta)
    published_at: Optional[datetime] = Field(None, alias="publishedAt")
    status: Literal["published"] = SiteStatus.PUBLISHED

    class Config:
        populate_by_name = True

    @classmethod
    def from_record(cls, data: Dict[str, Any]) -> "PublicSite":
        """Build a public site from a stored public record."""
        return cls.model_validate(data)


class SaveSiteRequest(BaseModel):
    """Request schema for POST /api/sites/save."""
    site_id: Optional[str] = Field(None, alias="siteId", description="Omit for a site never saved")
    title: Optional[str] = Field(None, description="Defaults to the prompt title")
    prompt: SitePrompt
    content: str = Field(..., alias="html")
    meta: SeoMeta = Field(default_factory=SeoMeta)
    publish: bool = False

    class Config:
        populate_by_name = True


class UnpublishResponse(BaseModel):
    """Response schema for POST /api/sites/{site_id}/unpublish."""
    success: bool
    site_id: str = Field(..., alias="siteId")
    status: str

    class Config:
        populate_by_name = True


class SiteResponse(Site):
    """Site as returned to the builder, with its public link once published."""
    public_url: Optional[str] = Field(None, alias="publicUrl")

    @classmethod
    def from_site(cls, site: Site, public_url: Optional[str] = None) -> "SiteResponse":
        data = site.model_dump()
        data["public_url"] = public_url if site.is_published else None
        return cls(**data)
