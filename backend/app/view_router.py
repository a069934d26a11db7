"""Session-driven screen routing for a builder client."""
from typing import Optional

from app.constants import ViewState
from app.schemas.auth import UserProfile
from app.schemas.site import PublicSite, Site
from app.services.identity import AuthSession, IdentityProvider
from app.services.profile_service import ProfileService
from app.services.site_lifecycle import SiteLifecycleManager
from app.utils.exceptions import NotFoundError
from app.utils.logger import logger


class ViewRouter:
    """Tracks which screen a client is on and the session that screen runs under.

    The session is owned here: set when the identity provider reports a
    sign-in, cleared on sign-out. Every navigation bumps an epoch, and results
    of loads started under an older epoch are dropped instead of overwriting
    newer state.
    """

    def __init__(
        self,
        identity: IdentityProvider,
        profiles: ProfileService,
        sites: SiteLifecycleManager,
    ):
        self.profiles = profiles
        self.sites = sites
        self.state = ViewState.AUTH
        self.session: Optional[AuthSession] = None
        self.profile: Optional[UserProfile] = None
        self.site_id: Optional[str] = None
        self.site: Optional[Site] = None
        self.public_site: Optional[PublicSite] = None
        self._epoch = 0
        self._unsubscribe = identity.on_session_change(self.handle_session_change)

    @property
    def authenticated(self) -> bool:
        return self.session is not None

    def _advance(self) -> int:
        self._epoch += 1
        return self._epoch

    def _clear_builder(self) -> None:
        self.site_id = None
        self.site = None

    async def handle_session_change(self, session: Optional[AuthSession]) -> None:
        epoch = self._advance()

        if session is None:
            logger.debug("[ROUTER] Session cleared")
            self.session = None
            self.profile = None
            self._clear_builder()
            if self.state != ViewState.PUBLIC:
                self.state = ViewState.AUTH
            return

        self.session = session
        if self.state == ViewState.AUTH:
            self.state = ViewState.DASHBOARD

        profile = await self.profiles.get_profile(session.uid)
        if profile is not None:
            await self.profiles.touch_last_seen(session.uid)
        else:
            profile = self.profiles.fallback_profile(session)

        if epoch == self._epoch:
            self.profile = profile

    def create(self) -> Optional[Site]:
        """Open the builder on a new, unsaved site."""
        self._advance()
        if not self.authenticated:
            self.state = ViewState.AUTH
            return None

        self.state = ViewState.BUILDER
        self.site = self.sites.new_site(self.session.uid)
        self.site_id = self.site.site_id
        return self.site

    async def edit(self, site_id: str) -> Optional[Site]:
        """
        Open the builder on an existing site.

        Returns:
            The loaded site, or None if the user navigated elsewhere before it arrived

        Raises:
            NotFoundError: If the site is absent or not owned by the session user
        """
        epoch = self._advance()
        if not self.authenticated:
            self.state = ViewState.AUTH
            return None

        self.state = ViewState.BUILDER
        self.site_id = site_id
        self.site = None

        site = await self.sites.create_or_load(self.session.uid, site_id)
        if epoch != self._epoch:
            logger.debug(f"[ROUTER] Dropping stale load of site {site_id}")
            return None
        self.site = site
        return site

    def back(self) -> None:
        """Leave the builder for the dashboard."""
        self._advance()
        self._clear_builder()
        self.public_site = None
        self.state = ViewState.DASHBOARD if self.authenticated else ViewState.AUTH

    async def open_public(self, site_id: str) -> Optional[PublicSite]:
        """
        Show a published site. Works without a session.

        Returns:
            The public site, or None if it is not published (the not-found view)
        """
        epoch = self._advance()
        self.state = ViewState.PUBLIC
        self._clear_builder()
        self.public_site = None

        try:
            public_site = await self.sites.get_public_site(site_id)
        except NotFoundError:
            public_site = None

        if epoch != self._epoch:
            return None
        self.public_site = public_site
        return public_site

    def close(self) -> None:
        """Stop listening for session changes."""
        self._unsubscribe()
