"""
Unit tests for ProfileService.
"""
import pytest

from app.constants import USERS_COLLECTION
from app.services.identity import AuthSession
from app.utils.exceptions import AuthError


@pytest.fixture
def session(identity) -> AuthSession:
    return identity.register("ada@example.com", display_name="Ada")


class TestCreateProfile:
    """Test profile creation on sign-up."""

    @pytest.mark.asyncio
    async def test_writes_profile_record(self, profiles, store, session):
        profile = await profiles.create_profile(session)

        record = await store.get(USERS_COLLECTION, session.uid)
        assert record["uid"] == session.uid
        assert record["email"] == "ada@example.com"
        assert record["displayName"] == "Ada"
        assert record["photoURL"] is None
        assert record["createdAt"] == record["lastSeen"]
        assert profile.display_name == "Ada"

    @pytest.mark.asyncio
    async def test_explicit_display_name_wins(self, profiles, store, session):
        await profiles.create_profile(session, display_name="Countess")

        assert (await store.get(USERS_COLLECTION, session.uid))["displayName"] == "Countess"


class TestReadAndTouch:
    """Test profile reads and lastSeen refresh."""

    @pytest.mark.asyncio
    async def test_get_missing_profile(self, profiles):
        assert await profiles.get_profile("nobody") is None

    @pytest.mark.asyncio
    async def test_get_does_not_write(self, profiles, store, session):
        await profiles.create_profile(session)
        before = await store.get(USERS_COLLECTION, session.uid)

        profile = await profiles.get_profile(session.uid)

        assert profile.uid == session.uid
        assert await store.get(USERS_COLLECTION, session.uid) == before

    @pytest.mark.asyncio
    async def test_touch_advances_last_seen_only(self, profiles, store, session):
        await profiles.create_profile(session)
        before = await store.get(USERS_COLLECTION, session.uid)

        assert await profiles.touch_last_seen(session.uid) is True

        after = await store.get(USERS_COLLECTION, session.uid)
        assert after["lastSeen"] > before["lastSeen"]
        assert after["createdAt"] == before["createdAt"]
        assert after["displayName"] == before["displayName"]

    @pytest.mark.asyncio
    async def test_touch_without_profile_writes_nothing(self, profiles, store):
        assert await profiles.touch_last_seen("ghost") is False
        assert await store.list(USERS_COLLECTION) == []

    def test_fallback_profile(self, profiles, session):
        profile = profiles.fallback_profile(session)

        assert profile.uid == session.uid
        assert profile.display_name == "Ada"
        assert profile.created_at == profile.last_seen


class TestUpdateDisplayName:
    """Test renaming a user."""

    @pytest.mark.asyncio
    async def test_updates_provider_and_record(self, profiles, store, identity, session):
        await profiles.create_profile(session)

        await profiles.update_display_name(session, "Countess Ada")

        assert (await store.get(USERS_COLLECTION, session.uid))["displayName"] == "Countess Ada"
        assert (await identity.get_user(session.access_token)).display_name == "Countess Ada"
        assert session.display_name == "Countess Ada"

    @pytest.mark.asyncio
    async def test_provider_failure_leaves_record_alone(self, profiles, store, session):
        await profiles.create_profile(session)
        session.access_token = "revoked"

        with pytest.raises(AuthError):
            await profiles.update_display_name(session, "Nope")

        assert (await store.get(USERS_COLLECTION, session.uid))["displayName"] == "Ada"
