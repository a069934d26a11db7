"""Site lifecycle: create, generate, save, publish and unpublish landing pages.

Each site lives in two places:

- ``users/{uid}/sites/{siteId}``: the owner's private record, draft or published.
- ``publicSites/{siteId}``: a denormalized copy that exists only while the site
  is published. Its presence is the only thing that makes a site publicly visible.

The store has no cross-record transactions, so multi-record operations are
ordered to fail toward "not publicly visible":

- publish writes the owner record first, then the public record;
- unpublish deletes the public record first, then marks the owner record draft.

Neither operation rolls back on partial failure. Both writes are idempotent
(merge-write, delete-if-exists), so the caller can simply retry.
"""
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from app.constants import PUBLIC_SITES_COLLECTION, SiteStatus, owner_sites_path
from app.schemas.site import GeneratedPage, PublicSite, Site, SitePrompt
from app.services.document_store import DESCENDING, DocumentStore
from app.services.generator import ContentGenerator
from app.utils.exceptions import (
    DocumentStoreError,
    GenerationFailed,
    NotFoundError,
    SaveFailed,
    UnpublishFailed,
)
from app.utils.ids import generate_site_id
from app.utils.logger import logger
from app.utils.serialization import serialize_datetime, utcnow


class SiteLifecycleManager:
    """Owns every state change of a site and keeps its public copy consistent."""

    def __init__(
        self,
        store: DocumentStore,
        generator: Optional[ContentGenerator] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.store = store
        self.generator = generator
        self.clock = clock

    def _now(self, previous: Optional[datetime] = None) -> datetime:
        """Current time, never earlier than ``previous`` so updatedAt cannot go backwards."""
        now = self.clock()
        if previous is not None and previous > now:
            return previous
        return now

    async def _get_owned(self, owner_uid: str, site_id: str) -> Dict[str, Any]:
        try:
            data = await self.store.get(owner_sites_path(owner_uid), site_id)
        except NotFoundError:
            raise NotFoundError("Site", site_id)

        if data.get("ownerUid") != owner_uid:
            raise NotFoundError("Site", site_id)
        return data

    async def _check_public_owner(self, site: Site) -> None:
        """Refuse to publish over a public copy that belongs to another owner."""
        try:
            existing = await self.store.get(PUBLIC_SITES_COLLECTION, site.site_id)
        except NotFoundError:
            return
        except DocumentStoreError as e:
            raise SaveFailed(f"Failed to save site {site.site_id}", stage="owner", site=site) from e

        if existing.get("ownerUid") != site.owner_uid:
            logger.warning(f"[SITES] {site.owner_uid} tried to publish over site {site.site_id}")
            raise NotFoundError("Site", site.site_id)

    async def _get_stored(self, site: Site) -> Optional[Site]:
        """The owner record as currently stored, or None before the first write."""
        try:
            data = await self.store.get(owner_sites_path(site.owner_uid), site.site_id)
        except NotFoundError:
            return None
        except DocumentStoreError as e:
            logger.error(f"[SITES] Owner read failed for site {site.site_id}: {e}", exc_info=True)
            raise SaveFailed(f"Failed to save site {site.site_id}", stage="owner", site=site) from e
        return Site.from_record(data)

    def new_site(self, owner_uid: str) -> Site:
        """An unsaved draft with a fresh identifier and the default prompt."""
        return Site(
            site_id=generate_site_id(),
            owner_uid=owner_uid,
            prompt=SitePrompt(),
            status=SiteStatus.DRAFT,
        )

    async def create_or_load(self, owner_uid: str, site_id: Optional[str] = None) -> Site:
        """
        Load one of the owner's sites, or start a new one.

        Nothing is written for a new site until its first save.

        Args:
            owner_uid: Identity that owns the site
            site_id: Existing site to load, or None for a new site

        Returns:
            The site

        Raises:
            NotFoundError: If the site is absent or owned by someone else
        """
        if site_id is None:
            return self.new_site(owner_uid)

        data = await self._get_owned(owner_uid, site_id)
        return Site.from_record(data)

    async def generate(self, prompt: SitePrompt) -> GeneratedPage:
        """
        Ask the content generator for a page. Persists nothing.

        Raises:
            GenerationFailed: On any generator error or empty output
        """
        if self.generator is None:
            raise GenerationFailed("No content generator configured")

        try:
            page = await self.generator.generate(prompt)
        except GenerationFailed:
            raise
        except Exception as e:
            logger.error(f"[SITES] Generation failed for \"{prompt.title}\": {e}", exc_info=True)
            raise GenerationFailed(f"Generation failed: {e}") from e

        if not page.content.strip():
            raise GenerationFailed("Generator returned an empty document")
        return page

    async def save(self, site: Site, publish: bool = False) -> Site:
        """
        Persist the site and, when ``publish`` is set, push it to the public collection.

        The stored owner record decides the current status, so a stale copy can
        neither republish an unpublished site nor demote a published one. A plain
        save never moves a published site back to draft, and never touches the
        public copy: published content only changes on an explicit publish.

        Args:
            site: In-memory site; updated in place with its id, status and timestamps
            publish: Also write the public copy

        Returns:
            The same site, updated

        Raises:
            SaveFailed: ``stage="owner"`` if the owner record could not be read or written,
                ``stage="public"`` if the owner record was written but the public copy was not
            NotFoundError: If publishing would overwrite another owner's public copy
        """
        if not site.site_id:
            site.site_id = generate_site_id()

        site_id = site.site_id
        stored = await self._get_stored(site)
        first_write = stored is None

        # Status and creation time come from the stored record, not the caller's copy
        if publish:
            status = SiteStatus.PUBLISHED
        elif stored is not None and stored.is_published:
            status = SiteStatus.PUBLISHED
        else:
            status = SiteStatus.DRAFT

        previous = site.updated_at
        if stored is not None and stored.updated_at is not None:
            previous = max(previous, stored.updated_at) if previous else stored.updated_at
        now = self._now(previous)

        if publish:
            await self._check_public_owner(site)

        meta = site.meta.model_dump(by_alias=True)

        fields: Dict[str, Any] = {
            "siteId": site_id,
            "ownerUid": site.owner_uid,
            "title": site.title,
            "prompt": site.prompt.model_dump(by_alias=True),
            "html": site.content,
            "meta": meta,
            "status": status,
            "updatedAt": serialize_datetime(now),
        }
        if first_write:
            fields["createdAt"] = serialize_datetime(now)
        if publish:
            fields["publishedAt"] = serialize_datetime(now)

        try:
            await self.store.set(owner_sites_path(site.owner_uid), site_id, fields, merge=True)
        except Exception as e:
            logger.error(f"[SITES] Owner write failed for site {site_id}: {e}", exc_info=True)
            raise SaveFailed(f"Failed to save site {site_id}", stage="owner", site=site) from e

        site.status = status
        site.updated_at = now
        if first_write:
            site.created_at = now
        else:
            site.created_at = stored.created_at
            site.published_at = stored.published_at
        if publish:
            site.published_at = now
            public_fields = {
                "siteId": site_id,
                "ownerUid": site.owner_uid,
                "title": site.title,
                "html": site.content,
                "meta": meta,
                "status": SiteStatus.PUBLISHED,
                "publishedAt": serialize_datetime(now),
            }
            try:
                await self.store.set(PUBLIC_SITES_COLLECTION, site_id, public_fields, merge=False)
            except Exception as e:
                logger.error(
                    f"[SITES] Public write failed for site {site_id} after owner write: {e}",
                    exc_info=True,
                )
                raise SaveFailed(
                    f"Site {site_id} saved but not published",
                    stage="public",
                    site=site,
                ) from e
            logger.info(f"[SITES] Published site {site_id} for {site.owner_uid}")
        else:
            logger.info(f"[SITES] Saved site {site_id} ({status}) for {site.owner_uid}")

        return site

    async def unpublish(self, site_id: str, owner_uid: str) -> None:
        """
        Remove the public copy and mark the site draft.

        Safe to repeat: a second call deletes nothing and leaves the site draft.

        Raises:
            NotFoundError: If the site is absent or owned by someone else
            UnpublishFailed: ``stage="public"`` if the public copy could not be removed,
                ``stage="owner"`` if it was removed but the status update failed
        """
        try:
            data = await self._get_owned(owner_uid, site_id)
        except DocumentStoreError as e:
            raise UnpublishFailed(f"Failed to unpublish site {site_id}", stage="public") from e

        previous = Site.from_record(data).updated_at

        try:
            await self.store.delete(PUBLIC_SITES_COLLECTION, site_id)
        except Exception as e:
            logger.error(f"[SITES] Public delete failed for site {site_id}: {e}", exc_info=True)
            raise UnpublishFailed(f"Failed to unpublish site {site_id}", stage="public") from e

        try:
            await self.store.set(
                owner_sites_path(owner_uid),
                site_id,
                {"status": SiteStatus.DRAFT, "updatedAt": serialize_datetime(self._now(previous))},
                merge=True,
            )
        except Exception as e:
            logger.error(
                f"[SITES] Status update failed for site {site_id} after public delete: {e}",
                exc_info=True,
            )
            raise UnpublishFailed(
                f"Site {site_id} is no longer public but is still marked published",
                stage="owner",
            ) from e

        logger.info(f"[SITES] Unpublished site {site_id} for {owner_uid}")

    async def list_sites(self, owner_uid: str) -> List[Site]:
        """The owner's sites, most recently updated first."""
        records = await self.store.list(owner_sites_path(owner_uid), order_by="updatedAt", direction=DESCENDING)
        return [Site.from_record(record) for record in records]

    async def get_public_site(self, site_id: str) -> PublicSite:
        """
        Fetch a published site for public viewing.

        Raises:
            NotFoundError: If there is no public copy or it is not marked published
        """
        try:
            data = await self.store.get(PUBLIC_SITES_COLLECTION, site_id)
        except NotFoundError:
            raise NotFoundError("Site", site_id)

        if data.get("status") != SiteStatus.PUBLISHED:
            raise NotFoundError("Site", site_id)
        return PublicSite.from_record(data)
