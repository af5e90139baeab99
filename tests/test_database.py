"""Store contract tests, run against every configured backend."""

import asyncio
import uuid
import pytest
from datetime import datetime, timedelta, timezone

from linfy.database.base import DuplicateKeyError
from linfy.database.models import ApiKey, Link, User


def make_user(email="ada@example.com", name="Ada"):
    return User(
        id=uuid.uuid4().hex,
        email=email,
        password_hash="x",
        name=name,
        created_at=datetime.now(timezone.utc),
    )


def make_link(user_id, url="https://example.com", code=None, created_at=None):
    code = code or uuid.uuid4().hex[:8]
    created_at = created_at or datetime.now(timezone.utc)
    return Link(
        id=uuid.uuid4().hex,
        original_url=url,
        url_code=code,
        short_url=f"http://testserver/{code}",
        qr_code="data:image/png;base64,",
        created_at=created_at,
        last_accessed=created_at,
        user_id=user_id,
    )


def make_api_key():
    return ApiKey(key_id=uuid.uuid4().hex, key=uuid.uuid4().hex, created_at=datetime.now(timezone.utc))


@pytest.mark.asyncio
class TestUsers:
    """Test user persistence."""

    async def test_duplicate_email(self, test_db):
        await test_db.create_user(make_user())

        with pytest.raises(DuplicateKeyError) as exc_info:
            await test_db.create_user(make_user(name="Other"))
        assert exc_info.value.field == "email"

    async def test_update_missing_user(self, test_db):
        assert await test_db.update_user("missing", name="Nobody") is None

    async def test_update_email_to_taken(self, test_db):
        await test_db.create_user(make_user())
        bob = await test_db.create_user(make_user(email="bob@example.com", name="Bob"))

        with pytest.raises(DuplicateKeyError) as exc_info:
            await test_db.update_user(bob.id, email="ada@example.com")
        assert exc_info.value.field == "email"
        assert (await test_db.get_user_by_id(bob.id)).email == "bob@example.com"


@pytest.mark.asyncio
class TestApiKeyStore:
    """Test API key persistence."""

    async def test_cap(self, test_db):
        user = await test_db.create_user(make_user())
        for _ in range(2):
            assert await test_db.add_api_key(user.id, make_api_key(), max_keys=2)

        assert await test_db.add_api_key(user.id, make_api_key(), max_keys=2) is None
        assert len(await test_db.list_api_keys(user.id)) == 2

    async def test_duplicate_key_value(self, test_db):
        ada = await test_db.create_user(make_user())
        bob = await test_db.create_user(make_user(email="bob@example.com", name="Bob"))
        api_key = make_api_key()
        await test_db.add_api_key(ada.id, api_key, max_keys=5)

        clone = ApiKey(key_id=uuid.uuid4().hex, key=api_key.key, created_at=api_key.created_at)
        with pytest.raises(DuplicateKeyError) as exc_info:
            await test_db.add_api_key(bob.id, clone, max_keys=5)
        assert exc_info.value.field == "api_key"

    async def test_use_stamps_last_used(self, test_db):
        user = await test_db.create_user(make_user())
        api_key = make_api_key()
        await test_db.add_api_key(user.id, api_key, max_keys=5)
        used_at = datetime.now(timezone.utc)

        assert await test_db.use_api_key(api_key.key, used_at) == user.id
        assert await test_db.use_api_key("unknown", used_at) is None
        assert (await test_db.list_api_keys(user.id))[0].last_used is not None

    async def test_delete(self, test_db):
        user = await test_db.create_user(make_user())
        api_key = make_api_key()
        await test_db.add_api_key(user.id, api_key, max_keys=5)

        assert await test_db.delete_api_key(user.id, api_key.key_id)
        assert not await test_db.delete_api_key(user.id, api_key.key_id)
        assert await test_db.use_api_key(api_key.key, datetime.now(timezone.utc)) is None


@pytest.mark.asyncio
class TestLinks:
    """Test link persistence."""

    async def test_duplicate_owner_url(self, test_db):
        user = await test_db.create_user(make_user())
        await test_db.create_link(make_link(user.id))

        with pytest.raises(DuplicateKeyError) as exc_info:
            await test_db.create_link(make_link(user.id))
        assert exc_info.value.field == "owner_url"

    async def test_duplicate_code(self, test_db):
        user = await test_db.create_user(make_user())
        await test_db.create_link(make_link(user.id, code="abcd1234"))

        with pytest.raises(DuplicateKeyError) as exc_info:
            await test_db.create_link(make_link(user.id, url="https://example.com/2", code="abcd1234"))
        assert exc_info.value.field == "url_code"

    async def test_lookup_by_owner_url(self, test_db):
        user = await test_db.create_user(make_user())
        link = await test_db.create_link(make_link(user.id))

        found = await test_db.get_link_by_owner_url(user.id, "https://example.com")

        assert found.url_code == link.url_code
        assert await test_db.get_link_by_owner_url(user.id, "https://example.com/") is None

    async def test_increment_unknown(self, test_db):
        assert await test_db.increment_clicks("missing1", datetime.now(timezone.utc)) is None

    async def test_concurrent_increments(self, test_db):
        user = await test_db.create_user(make_user())
        link = await test_db.create_link(make_link(user.id))
        n = 20

        await asyncio.gather(
            *[test_db.increment_clicks(link.url_code, datetime.now(timezone.utc)) for _ in range(n)]
        )

        assert (await test_db.get_link_by_code(link.url_code)).clicks == n

    async def test_list_newest_first(self, test_db):
        user = await test_db.create_user(make_user())
        start = datetime.now(timezone.utc)
        for i in range(3):
            await test_db.create_link(
                make_link(user.id, url=f"https://example.com/{i}", created_at=start + timedelta(seconds=i))
            )

        links = await test_db.list_links_by_owner(user.id)

        assert [link.original_url for link in links] == [f"https://example.com/{i}" for i in (2, 1, 0)]

    async def test_statistics(self, test_db):
        assert await test_db.get_statistics() == {"total_users": 0, "total_links": 0, "total_clicks": 0}

        user = await test_db.create_user(make_user())
        link = await test_db.create_link(make_link(user.id))
        await test_db.increment_clicks(link.url_code, datetime.now(timezone.utc))

        assert await test_db.get_statistics() == {"total_users": 1, "total_links": 1, "total_clicks": 1}
