"""User profile records in the users collection."""
from datetime import datetime
from typing import Callable, Optional

from app.constants import USERS_COLLECTION
from app.schemas.auth import UserProfile
from app.services.document_store import DocumentStore
from app.services.identity import AuthSession, IdentityProvider
from app.utils.exceptions import NotFoundError
from app.utils.logger import logger
from app.utils.serialization import serialize_datetime, utcnow


class ProfileService:
    """Reads and writes ``users/{uid}`` profile records.

    Reading a profile never writes. Refreshing ``lastSeen`` is the separate
    ``touch_last_seen`` call.
    """

    def __init__(
        self,
        store: DocumentStore,
        identity: IdentityProvider,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.store = store
        self.identity = identity
        self.clock = clock

    async def create_profile(self, session: AuthSession, display_name: Optional[str] = None) -> UserProfile:
        """Write the profile record for a freshly signed-up identity."""
        now = serialize_datetime(self.clock())
        fields = {
            "uid": session.uid,
            "email": session.email,
            "displayName": display_name if display_name is not None else session.display_name,
            "photoURL": session.photo_url,
            "createdAt": now,
            "lastSeen": now,
        }
        await self.store.set(USERS_COLLECTION, session.uid, fields)
        logger.info(f"[PROFILE] Created profile for {session.uid}")
        return UserProfile.model_validate(fields)

    async def get_profile(self, uid: str) -> Optional[UserProfile]:
        """The stored profile, or None if there is none."""
        try:
            data = await self.store.get(USERS_COLLECTION, uid)
        except NotFoundError:
            return None
        return UserProfile.model_validate(data)

    async def touch_last_seen(self, uid: str) -> bool:
        """
        Refresh ``lastSeen`` on an existing profile.

        Returns:
            False if the user has no profile record (nothing is written)
        """
        try:
            await self.store.get(USERS_COLLECTION, uid)
        except NotFoundError:
            return False

        await self.store.set(
            USERS_COLLECTION,
            uid,
            {"lastSeen": serialize_datetime(self.clock())},
            merge=True,
        )
        return True

    def fallback_profile(self, session: AuthSession) -> UserProfile:
        """In-memory profile for a signed-in user whose record is missing."""
        now = self.clock()
        return UserProfile(
            uid=session.uid,
            email=session.email,
            display_name=session.display_name,
            photo_url=session.photo_url,
            created_at=now,
            last_seen=now,
        )

    async def update_display_name(self, session: AuthSession, name: str) -> None:
        """Rename the user at the identity provider, then on the profile record."""
        await self.identity.update_display_name(name, access_token=session.access_token)
        session.display_name = name
        await self.store.set(USERS_COLLECTION, session.uid, {"displayName": name}, merge=True)
        logger.info(f"[PROFILE] Updated display name for {session.uid}")
