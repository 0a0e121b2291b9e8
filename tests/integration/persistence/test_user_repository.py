"""Tests for the SQL user repository against SQLite."""

from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy import select

from idgate.domain.auth.model.value import ProviderKind, UserId
from idgate.domain.auth.service.identity import IdentityService
from idgate.domain.shared.error import AlreadyLinkedError
from idgate.infrastructure.auth.crypto import AesGcmTokenCipher, PlaintextTokenCipher
from idgate.infrastructure.persistence.repository.user import PostgresUserRepository
from idgate.infrastructure.persistence.tables import users_table
from tests.factories import github_profile, google_profile, make_user


@pytest.fixture
def repo(session) -> PostgresUserRepository:
    return PostgresUserRepository(session, PlaintextTokenCipher())


class TestRoundTrip:
    @pytest.mark.asyncio
    async def test_create_and_get(self, repo: PostgresUserRepository):
        expires = datetime(2030, 1, 1, tzinfo=UTC)
        user = make_user(
            github_id="1",
            github_username="octocat",
            email="a@x.com",
            emails=["a@x.com"],
            admin=True,
            github_access_token="gho_1",
            github_token_expires_at=expires,
        )

        await repo.create(user)
        loaded = await repo.get(user.id)

        assert loaded is not None
        assert loaded.github_id == "1"
        assert loaded.emails == ["a@x.com"]
        assert loaded.admin is True
        assert loaded.google_id == ""
        assert loaded.github_token_expires_at == expires
        assert loaded.created_at.tzinfo is not None

    @pytest.mark.asyncio
    async def test_get_missing_returns_none(self, repo: PostgresUserRepository):
        assert await repo.get(UserId.generate()) is None

    @pytest.mark.asyncio
    async def test_unset_provider_ids_are_null(self, repo: PostgresUserRepository, session):
        await repo.create(make_user(github_id="1"))
        await repo.create(make_user(github_id="2"))

        rows = (await session.execute(select(users_table.c.google_id))).all()
        assert [row.google_id for row in rows] == [None, None]

    @pytest.mark.asyncio
    async def test_update_and_delete(self, repo: PostgresUserRepository):
        user = make_user(github_id="1")
        await repo.create(user)

        user.name = "Mona"
        user.touch()
        await repo.update(user)
        assert (await repo.get(user.id)).name == "Mona"

        assert await repo.delete(user.id) is True
        assert await repo.delete(user.id) is False


class TestLookups:
    @pytest.mark.asyncio
    async def test_find_by_provider_id(self, repo: PostgresUserRepository):
        user = make_user(github_id="1", google_id="77")
        await repo.create(user)

        assert (await repo.find_by_provider_id(ProviderKind.GITHUB, "1")).id == user.id
        assert (await repo.find_by_provider_id(ProviderKind.GOOGLE, "77")).id == user.id
        assert await repo.find_by_provider_id(ProviderKind.GOOGLE, "1") is None
        assert await repo.find_by_provider_id(ProviderKind.GITHUB, "") is None

    @pytest.mark.asyncio
    async def test_find_by_email_checks_primary_then_set(self, repo: PostgresUserRepository):
        primary = make_user(github_id="1", email="a@x.com", emails=["a@x.com"])
        extra = make_user(github_id="2", email="c@x.com", emails=["c@x.com", "d@x.com"])
        await repo.create(primary)
        await repo.create(extra)

        assert (await repo.find_by_email(" A@X.com ")).id == primary.id
        assert (await repo.find_by_email("d@x.com")).id == extra.id
        assert await repo.find_by_email("nobody@x.com") is None
        assert await repo.find_by_email("") is None


class TestUniqueness:
    @pytest.mark.asyncio
    async def test_duplicate_provider_id_raises_already_linked(
        self, repo: PostgresUserRepository
    ):
        await repo.create(make_user(github_id="1"))

        with pytest.raises(AlreadyLinkedError):
            await repo.create(make_user(github_id="1"))

    @pytest.mark.asyncio
    async def test_session_usable_after_violation(self, repo: PostgresUserRepository):
        first = make_user(google_id="77")
        await repo.create(first)
        other = make_user(github_id="2")
        await repo.create(other)

        other.google_id = "77"
        with pytest.raises(AlreadyLinkedError):
            await repo.update(other)

        assert (await repo.get(other.id)).google_id == ""
        assert (await repo.get(first.id)).google_id == "77"


class TestMerge:
    @pytest.mark.asyncio
    async def test_merge_moves_provider_ids_to_older_user(self, repo: PostgresUserRepository):
        older = make_user(age_minutes=60, google_id="77", email="b@x.com", emails=["b@x.com"])
        newer = make_user(github_id="1", email="a@x.com", emails=["a@x.com"])
        await repo.create(older)
        await repo.create(newer)

        survivor = await IdentityService(_users=repo).merge(newer.id, older.id)

        assert survivor.id == older.id
        assert await repo.get(newer.id) is None
        stored = await repo.get(older.id)
        assert stored.github_id == "1"
        assert stored.google_id == "77"
        assert sorted(stored.emails) == ["a@x.com", "b@x.com"]

    @pytest.mark.asyncio
    async def test_failed_write_rolls_back_the_transaction(self, repo: PostgresUserRepository):
        user = make_user(github_id="1")
        await repo.create(user)

        with pytest.raises(AlreadyLinkedError):
            async with repo.transaction():
                assert await repo.delete(user.id) is True
                await repo.create(make_user(github_id="2"))
                await repo.create(make_user(github_id="2"))

        assert await repo.get(user.id) is not None
        assert await repo.find_by_provider_id(ProviderKind.GITHUB, "2") is None


class TestTokenEncryption:
    @pytest.mark.asyncio
    async def test_tokens_are_encrypted_at_rest(self, session):
        repo = PostgresUserRepository(session, AesGcmTokenCipher("k" * 32))
        user = make_user(
            github_id="1",
            github_access_token="gho_secret",
            github_token_expires_at=datetime.now(UTC) + timedelta(hours=1),
        )
        await repo.create(user)

        stored = (await session.execute(select(users_table.c.github_access_token))).scalar_one()
        assert stored != "gho_secret"
        assert (await repo.get(user.id)).github_access_token == "gho_secret"

    @pytest.mark.asyncio
    async def test_profile_updates_keep_latest_token(self, repo: PostgresUserRepository):
        identities = IdentityService(_users=repo)

        user = await identities.find_or_create(github_profile(access_token="gho_1"))
        await identities.find_or_create(github_profile(access_token="gho_2"))
        await identities.link(user.id, google_profile(access_token="ya29"))

        stored = await repo.get(user.id)
        assert stored.github_access_token == "gho_2"
        assert stored.google_access_token == "ya29"
