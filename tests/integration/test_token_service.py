"""TokenService against a real (SQLite) database."""

from datetime import timedelta

import pytest

from collabnotes.core.exceptions import AuthenticationError, ValidationError
from collabnotes.core.models.types import utc_now
from collabnotes.core.repositories import CredentialRepository, UserRepository
from collabnotes.core.services.token_service import TokenService
from collabnotes.security import hash_password, sha256_hex, verify_password


@pytest.fixture
async def user(make_user):
    return await make_user("ann@example.com", "Ann")


@pytest.fixture
def tokens(test_session):
    return TokenService(test_session)


async def stored(test_session, user_id):
    return await UserRepository(test_session).get_by_id(user_id)


class TestSessionLifecycle:
    async def test_start_session_stores_only_a_digest(self, tokens, user, test_session):
        issued = await tokens.start_session(user.id)

        row = await stored(test_session, user.id)
        assert row.refresh_token_hash == sha256_hex(issued.refresh_token)
        assert row.refresh_token_hash != issued.refresh_token
        assert row.has_live_refresh_token

    async def test_new_session_invalidates_previous(self, tokens, user):
        first = await tokens.start_session(user.id)
        await tokens.start_session(user.id)

        with pytest.raises(AuthenticationError):
            await tokens.rotate(first.refresh_token)

    async def test_rotation_and_reuse(self, tokens, user, test_session):
        t1 = await tokens.start_session(user.id)
        t2 = await tokens.rotate(t1.refresh_token)
        assert t2.refresh_token != t1.refresh_token

        # presenting the rotated-away token kills the whole session
        with pytest.raises(AuthenticationError):
            await tokens.rotate(t1.refresh_token)
        assert (await stored(test_session, user.id)).refresh_token_hash is None

        with pytest.raises(AuthenticationError):
            await tokens.rotate(t2.refresh_token)

    async def test_conditional_swap_only_matches_current_hash(self, user, test_session):
        repo = CredentialRepository(test_session)
        await repo.store_refresh(user.id, sha256_hex("t1"), utc_now() + timedelta(days=1))

        assert await repo.rotate_refresh(user.id, sha256_hex("t1"), sha256_hex("t2"), utc_now())
        assert not await repo.rotate_refresh(user.id, sha256_hex("t1"), sha256_hex("t3"), utc_now())
        assert (await stored(test_session, user.id)).refresh_token_hash == sha256_hex("t2")

    async def test_lost_race_is_treated_as_reuse(self, tokens, user, test_session, monkeypatch):
        t1 = await tokens.start_session(user.id)

        async def lost(*args):
            # another request rotated the same token between our read and write
            return False

        monkeypatch.setattr(tokens.credential_repo, "rotate_refresh", lost)

        with pytest.raises(AuthenticationError):
            await tokens.rotate(t1.refresh_token)
        assert (await stored(test_session, user.id)).refresh_token_hash is None

    async def test_expired_stored_session(self, tokens, user, test_session):
        t1 = await tokens.start_session(user.id)
        await CredentialRepository(test_session).store_refresh(
            user.id, sha256_hex(t1.refresh_token), utc_now() - timedelta(seconds=1)
        )
        with pytest.raises(AuthenticationError):
            await tokens.rotate(t1.refresh_token)

    async def test_invalid_tokens(self, tokens):
        for presented in (None, "", "garbage"):
            with pytest.raises(AuthenticationError):
                await tokens.rotate(presented)

    async def test_revoke_ends_session(self, tokens, user, test_session):
        issued = await tokens.start_session(user.id)
        await tokens.revoke(user.id)

        assert (await stored(test_session, user.id)).refresh_token_hash is None
        with pytest.raises(AuthenticationError):
            await tokens.rotate(issued.refresh_token)

    async def test_revoke_presented_requires_live_token(self, tokens, user, test_session):
        t1 = await tokens.start_session(user.id)
        t2 = await tokens.rotate(t1.refresh_token)

        assert not await tokens.revoke_presented(t1.refresh_token)
        assert (await stored(test_session, user.id)).refresh_token_hash == sha256_hex(t2.refresh_token)
        assert not await tokens.revoke_presented("garbage")
        assert await tokens.revoke_presented(t2.refresh_token)
        assert (await stored(test_session, user.id)).refresh_token_hash is None


class TestPasswordReset:
    async def test_redeem_sets_password_and_ends_session(self, tokens, user, test_session):
        session_tokens = await tokens.start_session(user.id)
        raw = await tokens.issue_password_reset(user.id)

        await tokens.redeem_password_reset(user.id, raw, hash_password("N3w$ecret"))

        row = await stored(test_session, user.id)
        assert verify_password("N3w$ecret", row.password_hash)
        assert row.password_reset_token_hash is None
        assert row.refresh_token_hash is None
        with pytest.raises(AuthenticationError):
            await tokens.rotate(session_tokens.refresh_token)

    async def test_token_is_single_use(self, tokens, user):
        raw = await tokens.issue_password_reset(user.id)
        await tokens.redeem_password_reset(user.id, raw, hash_password("N3w$ecret"))
        with pytest.raises(ValidationError):
            await tokens.redeem_password_reset(user.id, raw, hash_password("An0ther$ecret"))

    async def test_wrong_token(self, tokens, user, test_session):
        await tokens.issue_password_reset(user.id)
        with pytest.raises(ValidationError):
            await tokens.redeem_password_reset(user.id, "0" * 64, hash_password("N3w$ecret"))
        # a wrong guess does not burn the real token
        assert (await stored(test_session, user.id)).password_reset_token_hash is not None

    async def test_expired_token_is_cleared(self, tokens, user, test_session):
        raw = await tokens.issue_password_reset(user.id)
        await CredentialRepository(test_session).store_password_reset(
            user.id, sha256_hex(raw), utc_now() - timedelta(minutes=1)
        )

        with pytest.raises(ValidationError) as exc:
            await tokens.redeem_password_reset(user.id, raw, hash_password("N3w$ecret"))
        assert exc.value.message == "Invalid or expired reset token"
        assert (await stored(test_session, user.id)).password_reset_token_hash is None
