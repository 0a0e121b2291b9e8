"""Unit tests for WhitelistService."""

import pytest

from idgate.domain.auth.service.whitelist import WhitelistService, split_emails
from tests.factories import make_user, make_whitelist_repo


def make_service(emails: set[str] | None = None) -> WhitelistService:
    return WhitelistService(_repo=make_whitelist_repo(emails))


class TestSplitEmails:
    def test_comma_separated_string(self):
        assert split_emails(" A@x.com, b@x.com ,,") == ["a@x.com", "b@x.com"]

    def test_list_entries_are_split_too(self):
        assert split_emails(["a@x.com,b@x.com", "C@x.com"]) == ["a@x.com", "b@x.com", "c@x.com"]


class TestIsAuthorized:
    @pytest.mark.asyncio
    async def test_lookup_is_normalized(self):
        service = make_service({"a@x.com"})

        assert await service.is_authorized("  A@X.COM ") is True

    @pytest.mark.asyncio
    async def test_empty_email_is_never_authorized(self):
        service = make_service({""})

        assert await service.is_authorized("") is False
        assert await service.is_authorized(None) is False

    @pytest.mark.asyncio
    async def test_user_authorized_by_any_known_email(self):
        service = make_service({"b@x.com"})

        assert await service.is_user_authorized(make_user(emails=["a@x.com", "b@x.com"]))
        assert not await service.is_user_authorized(make_user(emails=["c@x.com"]))


class TestAdd:
    @pytest.mark.asyncio
    async def test_reports_added_and_skipped(self):
        service = make_service({"old@x.com"})

        change = await service.add("new@x.com, OLD@x.com, not-an-email")

        assert change.added == ["new@x.com"]
        assert change.skipped == ["old@x.com", "not-an-email"]

    @pytest.mark.asyncio
    async def test_invalid_entry_does_not_block_batch(self):
        service = make_service()

        change = await service.add(["a b@x.com", "ok@x.com"])

        assert change.added == ["ok@x.com"]
        assert change.skipped == ["a b@x.com"]


class TestRemove:
    @pytest.mark.asyncio
    async def test_reports_removed_and_not_found(self):
        repo = make_whitelist_repo({"a@x.com"})
        service = WhitelistService(_repo=repo)

        removal = await service.remove(["A@x.com", "missing@x.com"])

        assert removal.removed == ["a@x.com"]
        assert removal.not_found == ["missing@x.com"]
        assert repo.present == set()
