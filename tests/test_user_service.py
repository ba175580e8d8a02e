"""
Tests for the user directory.

This module tests:
- Registration and authentication
- Profile visibility rules
- Skill list edits
- Discovery filters
"""

import pytest
from pydantic import ValidationError

from skill_swap_api.app.core.exceptions import ConflictError, ForbiddenError, NotFoundError
from skill_swap_api.app.schemas.user import ProfileUpdate, SkillKind, UserRegister
from skill_swap_api.app.services.user_service import UserService
from tests.helpers import PASSWORD, make_user


class TestAccounts:
    @pytest.mark.asyncio
    async def test_register_and_authenticate(self):
        user = await UserService.create_user(
            UserRegister(name="  Alice ", email="Alice@Example.com", password=PASSWORD)
        )

        assert user.name == "Alice"
        assert user.email == "alice@example.com"
        assert user.rating == 0.0
        assert user.total_ratings == 0
        assert user.is_public is True

        assert (await UserService.authenticate("ALICE@example.com", PASSWORD)).id == user.id
        assert await UserService.authenticate("alice@example.com", "wrong-password") is None
        assert await UserService.authenticate("nobody@example.com", PASSWORD) is None

    @pytest.mark.asyncio
    async def test_duplicate_email_is_refused(self):
        await make_user("Alice")

        with pytest.raises(ConflictError):
            await UserService.create_user(
                UserRegister(name="Other", email="alice@example.com", password=PASSWORD)
            )


class TestProfiles:
    @pytest.mark.asyncio
    async def test_public_profile_hides_private_fields(self):
        alice = await make_user("Alice", skills_offered=["guitar"])
        bob = await make_user("Bob")

        profile = await UserService.get_profile(alice["user_id"], bob)

        assert profile.name == "Alice"
        assert profile.skills_offered == ["guitar"]
        dumped = profile.model_dump()
        assert "email" not in dumped
        assert "password" not in dumped
        assert "is_banned" not in dumped

    @pytest.mark.asyncio
    async def test_private_profile_visible_to_owner_only(self):
        alice = await make_user("Alice", is_public=False)
        bob = await make_user("Bob")

        with pytest.raises(ForbiddenError):
            await UserService.get_profile(alice["user_id"], bob)
        assert (await UserService.get_profile(alice["user_id"], alice)).id == alice["user_id"]

    @pytest.mark.asyncio
    async def test_banned_and_missing_profiles_are_not_found(self):
        banned = await make_user("Mallory", is_banned=True)
        bob = await make_user("Bob")

        with pytest.raises(NotFoundError):
            await UserService.get_profile(banned["user_id"], bob)
        with pytest.raises(NotFoundError):
            await UserService.get_profile(12345, bob)

    @pytest.mark.asyncio
    async def test_update_profile_changes_only_given_fields(self):
        alice = await make_user("Alice", skills_offered=["guitar"])

        updated = await UserService.update_profile(
            alice,
            ProfileUpdate(location=" Berlin ", is_public=False, skills_wanted=["piano", " piano ", ""]),
        )

        assert updated.location == "Berlin"
        assert updated.is_public is False
        assert updated.skills_wanted == ["piano"]
        assert updated.skills_offered == ["guitar"]
        assert updated.name == "Alice"


class TestSkills:
    @pytest.mark.asyncio
    async def test_add_skill_is_idempotent(self):
        alice = await make_user("Alice")

        assert await UserService.add_skill(alice, SkillKind.OFFERED, "guitar") == ["guitar"]
        assert await UserService.add_skill(alice, SkillKind.OFFERED, "guitar") == ["guitar"]
        assert await UserService.add_skill(alice, SkillKind.OFFERED, "cooking") == ["guitar", "cooking"]

        user = await UserService.get_user_by_id(alice["user_id"])
        assert user.skills_offered == ["guitar", "cooking"]
        assert user.skills_wanted == []

    @pytest.mark.asyncio
    async def test_remove_skill_is_exact_match(self):
        alice = await make_user("Alice", skills_wanted=["Piano", "piano lessons"])

        assert await UserService.remove_skill(alice, SkillKind.WANTED, "piano") == [
            "Piano",
            "piano lessons",
        ]
        assert await UserService.remove_skill(alice, SkillKind.WANTED, "Piano") == ["piano lessons"]


class TestDiscover:
    @pytest.mark.asyncio
    async def test_excludes_self_private_and_banned(self):
        alice = await make_user("Alice")
        bob = await make_user("Bob", skills_offered=["guitar"])
        await make_user("Carol", skills_offered=["guitar"], is_public=False)
        await make_user("Mallory", skills_offered=["guitar"], is_banned=True)

        found = await UserService.discover(alice)

        assert [u.id for u in found] == [bob["user_id"]]

    @pytest.mark.asyncio
    async def test_skill_filter_matches_either_list_case_insensitively(self):
        alice = await make_user("Alice")
        bob = await make_user("Bob", skills_offered=["Guitar"])
        carol = await make_user("Carol", skills_wanted=["bass guitar"])
        await make_user("Dave", skills_offered=["cooking"])

        found = await UserService.discover(alice, skill="guitar")

        assert [u.id for u in found] == [bob["user_id"], carol["user_id"]]

    @pytest.mark.asyncio
    async def test_search_matches_names_and_wins_over_skill(self):
        alice = await make_user("Alice")
        await make_user("Bob", skills_offered=["guitar"])
        dana = await make_user("Dana", skills_offered=["cooking"])

        found = await UserService.discover(alice, skill="guitar", search="dan")

        assert [u.id for u in found] == [dana["user_id"]]

    @pytest.mark.asyncio
    async def test_wildcards_in_filter_are_literal(self):
        alice = await make_user("Alice")
        await make_user("Bob", skills_offered=["guitar"])
        percent = await make_user("Percy", skills_offered=["100% focus"])

        found = await UserService.discover(alice, skill="%")

        assert [u.id for u in found] == [percent["user_id"]]

    @pytest.mark.asyncio
    async def test_limit_caps_results(self):
        alice = await make_user("Alice")
        for index in range(5):
            await make_user(f"User{index}", skills_offered=["chess"])

        found = await UserService.discover(alice, skill="chess", limit=3)

        assert len(found) == 3

    @pytest.mark.asyncio
    async def test_matching_folds_non_ascii_case(self):
        alice = await make_user("Alice")
        baker = await make_user("Baker", skills_offered=["Éclair baking"])
        zoe = await make_user("Zoe")
        await UserService.update_profile(zoe, ProfileUpdate(name="Zoë"))

        assert [u.id for u in await UserService.discover(alice, skill="éCLAIR")] == [baker["user_id"]]
        assert [u.id for u in await UserService.discover(alice, search="ZOË")] == [zoe["user_id"]]


class TestProfileValidation:
    def test_name_length_is_checked_after_stripping(self):
        with pytest.raises(ValidationError):
            ProfileUpdate(name=" a ")
        assert ProfileUpdate(name="  Al  ").name == "Al"

    @pytest.mark.asyncio
    async def test_update_ignores_rating_and_moderation_fields(self):
        alice = await make_user("Alice")

        updated = await UserService.update_profile(
            alice,
            ProfileUpdate.model_validate(
                {
                    "location": "Oslo",
                    "rating": 5,
                    "total_ratings": 9,
                    "is_admin": True,
                    "is_banned": True,
                }
            ),
        )

        assert updated.location == "Oslo"
        assert updated.rating == 0.0
        assert updated.total_ratings == 0
        assert updated.is_admin is False
        assert updated.is_banned is False
