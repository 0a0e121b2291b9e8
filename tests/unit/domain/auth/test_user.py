"""Unit tests for the User aggregate and the merge rules."""

from datetime import UTC, datetime

import pytest

from idgate.domain.auth.model.user import User, merge_users, order_for_merge, union_emails
from idgate.domain.auth.model.value import UserId
from idgate.domain.shared.error import AlreadyLinkedError
from tests.factories import github_profile, google_profile, make_user


class TestFromProfile:
    def test_github_profile_seeds_identity_fields(self):
        user = User.from_profile(
            github_profile(provider_id="42", email=" A@X.com ", name="Ann", access_token="gho_1")
        )

        assert user.github_id == "42"
        assert user.github_username == "octocat"
        assert user.email == "a@x.com"
        assert user.emails == ["a@x.com"]
        assert user.name == "Ann"
        assert user.github_access_token == "gho_1"
        assert user.google_id == ""

    def test_google_profile_sets_google_email(self):
        user = User.from_profile(google_profile(provider_id="g-9", email="B@x.com"))

        assert user.google_id == "g-9"
        assert user.google_email == "b@x.com"
        assert user.email == "b@x.com"

    def test_profile_without_email_leaves_set_empty(self):
        user = User.from_profile(github_profile(email=""))

        assert user.emails == []
        assert user.email == ""


class TestAttach:
    def test_attaching_different_id_for_same_provider_raises(self):
        user = User.from_profile(github_profile(provider_id="1"))

        with pytest.raises(AlreadyLinkedError):
            user.attach(github_profile(provider_id="2"))

    def test_attaching_second_provider_keeps_primary_email(self):
        user = User.from_profile(github_profile(email="a@x.com"))

        user.attach(google_profile(email="b@x.com"))

        assert user.email == "a@x.com"
        assert user.emails == ["a@x.com", "b@x.com"]
        assert user.google_email == "b@x.com"


class TestKnownEmails:
    def test_email_set_wins_over_primary(self):
        user = make_user(email="primary@x.com", emails=["a@x.com"])

        assert user.known_emails() == ["a@x.com"]

    def test_primary_is_fallback_when_set_empty(self):
        user = make_user(email="primary@x.com")

        assert user.known_emails() == ["primary@x.com"]

    def test_unmerged_google_email_is_included(self):
        user = make_user(emails=["a@x.com"], google_email="g@x.com")

        assert user.known_emails() == ["a@x.com", "g@x.com"]

    def test_no_email_at_all(self):
        assert make_user().known_emails() == []


class TestUnionEmails:
    def test_dedupes_case_insensitively_and_keeps_order(self):
        assert union_emails(["A@x.com", "b@x.com"], ["a@X.com", "", "c@x.com"]) == [
            "a@x.com",
            "b@x.com",
            "c@x.com",
        ]


class TestOrderForMerge:
    def test_older_account_is_primary_regardless_of_argument_order(self):
        older = make_user(age_minutes=10)
        newer = make_user(age_minutes=1)

        assert order_for_merge(newer, older) == (older, newer)
        assert order_for_merge(older, newer) == (older, newer)

    def test_equal_timestamps_fall_back_to_id(self):
        created = datetime(2024, 1, 1, tzinfo=UTC)
        a = User(id=UserId.parse("00000000-0000-4000-8000-000000000001"), created_at=created)
        b = User(id=UserId.parse("00000000-0000-4000-8000-000000000002"), created_at=created)

        assert order_for_merge(b, a) == (a, b)


class TestMergeUsers:
    def test_copies_missing_provider_identity_with_its_fields(self):
        primary = make_user(github_id="1", github_username="octo", emails=["a@x.com"])
        secondary = make_user(
            google_id="g-1",
            google_email="b@x.com",
            google_access_token="ya29",
            emails=["b@x.com"],
        )

        merged = merge_users(primary, secondary)

        assert merged.id == primary.id
        assert merged.github_id == "1"
        assert merged.google_id == "g-1"
        assert merged.google_email == "b@x.com"
        assert merged.google_access_token == "ya29"
        assert merged.emails == ["a@x.com", "b@x.com"]

    def test_primary_values_are_never_overwritten(self):
        primary = make_user(github_id="1", name="Primary", avatar_url="p.png")
        secondary = make_user(github_id="2", name="Secondary", avatar_url="s.png")

        merged = merge_users(primary, secondary)

        assert merged.github_id == "1"
        assert merged.name == "Primary"
        assert merged.avatar_url == "p.png"

    def test_empty_primary_fields_are_filled(self):
        primary = make_user(github_id="1")
        secondary = make_user(google_id="g", email="b@x.com", name="Bee", avatar_url="b.png")

        merged = merge_users(primary, secondary)

        assert merged.email == "b@x.com"
        assert merged.name == "Bee"
        assert merged.avatar_url == "b.png"

    def test_admin_survives_from_either_side(self):
        assert merge_users(make_user(), make_user(admin=True)).admin is True
        assert merge_users(make_user(admin=True), make_user()).admin is True

    def test_does_not_mutate_inputs(self):
        primary = make_user(emails=["a@x.com"])
        secondary = make_user(emails=["b@x.com"])

        merge_users(primary, secondary)

        assert primary.emails == ["a@x.com"]
