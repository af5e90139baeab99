"""Tests for credential primitives and request authentication."""

import pytest
from datetime import datetime, timedelta, timezone

import jwt

from linfy.auth import SessionTokenIssuer
from linfy.errors import AuthenticationError


@pytest.mark.asyncio
class TestPasswordHasher:
    """Test bcrypt hashing."""

    async def test_hash_and_verify(self, hasher):
        password_hash = await hasher.hash("secret1")

        assert password_hash != "secret1"
        assert await hasher.verify("secret1", password_hash)
        assert not await hasher.verify("secret2", password_hash)

    async def test_salted(self, hasher):
        assert await hasher.hash("secret1") != await hasher.hash("secret1")

    async def test_verify_overlong_or_malformed(self, hasher):
        password_hash = await hasher.hash("secret1")

        assert not await hasher.verify("x" * 100, password_hash)
        assert not await hasher.verify("secret1", "not-a-bcrypt-hash")


class TestSessionTokens:
    """Test session token issue and verification."""

    def test_round_trip(self, tokens):
        token = tokens.issue("user-1")

        assert tokens.verify(token) == "user-1"

    def test_claims(self, tokens):
        issued_at = datetime.now(timezone.utc).replace(microsecond=0)
        token = tokens.issue("user-1", issued_at=issued_at)

        claims = jwt.decode(token, tokens.secret, algorithms=["HS256"])
        assert claims["sub"] == "user-1"
        assert claims["exp"] - claims["iat"] == 7 * 24 * 60 * 60

    def test_expired(self, tokens):
        token = tokens.issue("user-1", issued_at=datetime.now(timezone.utc) - timedelta(days=8))

        with pytest.raises(AuthenticationError) as exc_info:
            tokens.verify(token)
        assert exc_info.value.message == "Invalid token"

    def test_wrong_secret(self, tokens):
        other = SessionTokenIssuer(secret="another-secret-that-is-long-enough-for-hs256")

        with pytest.raises(AuthenticationError):
            tokens.verify(other.issue("user-1"))

    def test_garbage(self, tokens):
        with pytest.raises(AuthenticationError):
            tokens.verify("not.a.token")

    def test_missing_subject(self, tokens):
        token = jwt.encode(
            {"exp": datetime.now(timezone.utc) + timedelta(hours=1)},
            tokens.secret,
            algorithm="HS256",
        )

        with pytest.raises(AuthenticationError):
            tokens.verify(token)


@pytest.mark.asyncio
class TestAuthenticator:
    """Test credential selection and resolution."""

    async def test_bearer_token(self, authenticator, tokens):
        user_id = await authenticator.authenticate(f"Bearer {tokens.issue('user-1')}", None)

        assert user_id == "user-1"

    async def test_scheme_case_insensitive(self, authenticator, tokens):
        user_id = await authenticator.authenticate(f"bearer {tokens.issue('user-1')}", None)

        assert user_id == "user-1"

    async def test_no_credentials(self, authenticator):
        with pytest.raises(AuthenticationError) as exc_info:
            await authenticator.authenticate(None, None)
        assert exc_info.value.message == "Authentication required"

    @pytest.mark.parametrize("header", ["Basic abc", "Bearer", "Bearer ", "Token abc", "Bearer a b"])
    async def test_malformed_authorization(self, authenticator, header):
        with pytest.raises(AuthenticationError) as exc_info:
            await authenticator.authenticate(header, None)
        assert exc_info.value.message == "Invalid token"

    async def test_authorization_wins_over_api_key(self, authenticator, accounts, user):
        api_key = await accounts.create_api_key(user["id"])

        # A bad Authorization header is not rescued by a valid API key
        with pytest.raises(AuthenticationError) as exc_info:
            await authenticator.authenticate("Bearer broken", api_key.key)
        assert exc_info.value.message == "Invalid token"

    async def test_api_key(self, authenticator, accounts, user):
        api_key = await accounts.create_api_key(user["id"])

        assert await authenticator.authenticate(None, api_key.key) == user["id"]

    async def test_api_key_stamps_last_used(self, authenticator, accounts, user):
        api_key = await accounts.create_api_key(user["id"])
        assert (await accounts.list_api_keys(user["id"]))[0].last_used is None

        await authenticator.authenticate(None, api_key.key)

        assert (await accounts.list_api_keys(user["id"]))[0].last_used is not None

    async def test_unknown_api_key(self, authenticator):
        with pytest.raises(AuthenticationError) as exc_info:
            await authenticator.authenticate(None, "f" * 64)
        assert exc_info.value.message == "Invalid API key"

    async def test_empty_api_key(self, authenticator):
        with pytest.raises(AuthenticationError) as exc_info:
            await authenticator.authenticate(None, "")
        assert exc_info.value.message == "Invalid API key"

    async def test_api_key_not_allowed(self, authenticator, accounts, user):
        api_key = await accounts.create_api_key(user["id"])

        with pytest.raises(AuthenticationError) as exc_info:
            await authenticator.authenticate(None, api_key.key, allow_api_key=False)
        assert exc_info.value.message == "Authentication required"

    async def test_revoked_api_key(self, authenticator, accounts, user):
        api_key = await accounts.create_api_key(user["id"])
        await accounts.revoke_api_key(user["id"], api_key.key_id)

        with pytest.raises(AuthenticationError):
            await authenticator.authenticate(None, api_key.key)
