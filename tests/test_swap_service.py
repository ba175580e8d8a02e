"""
Tests for the swap request lifecycle.

This module tests:
- Creation guards (self request, missing/banned target, duplicates)
- Who may accept, reject, cancel and complete
- That every transition is refused from the wrong state
"""

import sqlite3

import pytest
from pydantic import ValidationError

from skill_swap_api.app.core.db import get_connection
from skill_swap_api.app.core.exceptions import (
    ConflictError,
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
    ValidationFailed,
)
from skill_swap_api.app.schemas.swap import SwapRequestCreate, SwapStatus
from skill_swap_api.app.services.swap_service import SwapService
from tests.helpers import make_swap, make_user


def _payload(target_id: int) -> SwapRequestCreate:
    return SwapRequestCreate(
        target_user_id=target_id,
        message="teach me guitar",
        skills_offered=["cooking"],
        skills_requested=["guitar"],
    )


class TestCreateSwapRequest:
    """Test cases for SwapService.create."""

    @pytest.mark.asyncio
    async def test_create_starts_pending(self):
        alice = await make_user("Alice")
        bob = await make_user("Bob")

        swap = await SwapService.create(alice, _payload(bob["user_id"]))

        assert swap.status == SwapStatus.PENDING
        assert swap.requester_id == alice["user_id"]
        assert swap.target_id == bob["user_id"]
        assert swap.requester_name == "Alice"
        assert swap.target_name == "Bob"
        assert swap.skills_offered == ["cooking"]
        assert swap.skills_requested == ["guitar"]
        assert swap.completed_at is None

    @pytest.mark.asyncio
    async def test_cannot_request_self(self):
        alice = await make_user("Alice")

        with pytest.raises(ValidationFailed, match="yourself"):
            await SwapService.create(alice, _payload(alice["user_id"]))

    @pytest.mark.asyncio
    async def test_missing_target_is_not_found(self):
        alice = await make_user("Alice")

        with pytest.raises(NotFoundError):
            await SwapService.create(alice, _payload(9999))

    @pytest.mark.asyncio
    async def test_banned_target_is_not_found(self):
        alice = await make_user("Alice")
        banned = await make_user("Mallory", is_banned=True)

        with pytest.raises(NotFoundError):
            await SwapService.create(alice, _payload(banned["user_id"]))

    @pytest.mark.asyncio
    async def test_second_pending_request_same_direction_is_refused(self):
        alice = await make_user("Alice")
        bob = await make_user("Bob")
        await SwapService.create(alice, _payload(bob["user_id"]))

        with pytest.raises(ConflictError):
            await SwapService.create(alice, _payload(bob["user_id"]))

    @pytest.mark.asyncio
    async def test_duplicate_check_is_directional(self):
        alice = await make_user("Alice")
        bob = await make_user("Bob")
        await SwapService.create(alice, _payload(bob["user_id"]))

        reverse = await SwapService.create(bob, _payload(alice["user_id"]))

        assert reverse.status == SwapStatus.PENDING
        assert reverse.requester_id == bob["user_id"]

    @pytest.mark.asyncio
    async def test_new_request_allowed_once_previous_is_no_longer_pending(self):
        alice = await make_user("Alice")
        bob = await make_user("Bob")
        await make_swap(alice, bob, status="rejected")

        swap = await SwapService.create(alice, _payload(bob["user_id"]))

        assert swap.status == SwapStatus.PENDING


class TestTransitions:
    """Test cases for accept/reject/cancel/complete."""

    @pytest.mark.asyncio
    async def test_happy_path_to_completed(self):
        alice = await make_user("Alice")
        bob = await make_user("Bob")
        swap = await make_swap(alice, bob)

        accepted = await SwapService.accept(swap.id, bob)
        assert accepted.status == SwapStatus.ACCEPTED
        assert accepted.completed_at is None

        completed = await SwapService.complete(swap.id, alice)
        assert completed.status == SwapStatus.COMPLETED
        assert completed.completed_at is not None

    @pytest.mark.asyncio
    async def test_either_participant_may_complete(self):
        alice = await make_user("Alice")
        bob = await make_user("Bob")
        swap = await make_swap(alice, bob, status="accepted")

        completed = await SwapService.complete(swap.id, bob)

        assert completed.status == SwapStatus.COMPLETED

    @pytest.mark.asyncio
    async def test_only_target_may_accept_or_reject(self):
        alice = await make_user("Alice")
        bob = await make_user("Bob")
        swap = await make_swap(alice, bob)

        with pytest.raises(ForbiddenError):
            await SwapService.accept(swap.id, alice)
        with pytest.raises(ForbiddenError):
            await SwapService.reject(swap.id, alice)

        rejected = await SwapService.reject(swap.id, bob)
        assert rejected.status == SwapStatus.REJECTED

    @pytest.mark.asyncio
    async def test_only_requester_may_cancel(self):
        alice = await make_user("Alice")
        bob = await make_user("Bob")
        swap = await make_swap(alice, bob)

        with pytest.raises(ForbiddenError):
            await SwapService.cancel(swap.id, bob)

        cancelled = await SwapService.cancel(swap.id, alice)
        assert cancelled.status == SwapStatus.CANCELLED

    @pytest.mark.asyncio
    async def test_outsider_cannot_complete(self):
        alice = await make_user("Alice")
        bob = await make_user("Bob")
        carol = await make_user("Carol")
        swap = await make_swap(alice, bob, status="accepted")

        with pytest.raises(ForbiddenError):
            await SwapService.complete(swap.id, carol)

    @pytest.mark.asyncio
    async def test_pending_cannot_be_completed_directly(self):
        alice = await make_user("Alice")
        bob = await make_user("Bob")
        swap = await make_swap(alice, bob)

        with pytest.raises(InvalidStateError):
            await SwapService.complete(swap.id, alice)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("state", ["accepted", "rejected", "cancelled", "completed"])
    async def test_pending_only_transitions_refused_outside_pending(self, state):
        alice = await make_user("Alice")
        bob = await make_user("Bob")
        swap = await make_swap(alice, bob, status=state)

        with pytest.raises(InvalidStateError):
            await SwapService.accept(swap.id, bob)
        with pytest.raises(InvalidStateError):
            await SwapService.reject(swap.id, bob)
        with pytest.raises(InvalidStateError):
            await SwapService.cancel(swap.id, alice)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("state", ["pending", "rejected", "cancelled", "completed"])
    async def test_complete_refused_outside_accepted(self, state):
        alice = await make_user("Alice")
        bob = await make_user("Bob")
        swap = await make_swap(alice, bob, status=state)

        with pytest.raises(InvalidStateError):
            await SwapService.complete(swap.id, alice)

    @pytest.mark.asyncio
    async def test_unknown_swap_is_not_found(self):
        alice = await make_user("Alice")

        for action in (SwapService.accept, SwapService.reject, SwapService.cancel, SwapService.complete):
            with pytest.raises(NotFoundError):
                await action(4242, alice)


class TestQueries:
    @pytest.mark.asyncio
    async def test_list_for_user_includes_sent_and_received(self):
        alice = await make_user("Alice")
        bob = await make_user("Bob")
        carol = await make_user("Carol")
        sent = await make_swap(alice, bob)
        received = await make_swap(carol, alice, status="accepted")
        await make_swap(bob, carol)

        swaps = await SwapService.list_for_user(alice)

        assert {s.id for s in swaps} == {sent.id, received.id}
        assert swaps[0].id == received.id

        accepted_only = await SwapService.list_for_user(alice, status=SwapStatus.ACCEPTED)
        assert [s.id for s in accepted_only] == [received.id]

    @pytest.mark.asyncio
    async def test_get_restricted_to_participants_and_admins(self):
        alice = await make_user("Alice")
        bob = await make_user("Bob")
        carol = await make_user("Carol")
        admin = await make_user("Admin", is_admin=True)
        swap = await make_swap(alice, bob)

        assert (await SwapService.get(swap.id, bob)).id == swap.id
        assert (await SwapService.get(swap.id, admin)).id == swap.id
        with pytest.raises(ForbiddenError):
            await SwapService.get(swap.id, carol)


class TestPendingPairUniqueness:
    @pytest.mark.asyncio
    async def test_index_rejects_second_pending_row(self):
        alice = await make_user("Alice")
        bob = await make_user("Bob")
        await make_swap(alice, bob)

        conn = get_connection()
        try:
            with pytest.raises(sqlite3.IntegrityError):
                conn.execute(
                    "INSERT INTO swap_requests (requester_id, target_id, message) VALUES (?, ?, ?)",
                    (alice["user_id"], bob["user_id"], "again"),
                )
            conn.execute(
                "INSERT INTO swap_requests (requester_id, target_id, message, status) VALUES (?, ?, ?, ?)",
                (alice["user_id"], bob["user_id"], "old", "rejected"),
            )
        finally:
            conn.rollback()
            conn.close()

    @pytest.mark.asyncio
    async def test_concurrent_insert_after_check_is_a_conflict(self, monkeypatch):
        alice = await make_user("Alice")
        bob = await make_user("Bob")

        def lose_race(cursor, requester_id, target_id):
            cursor.execute(
                "INSERT INTO swap_requests (requester_id, target_id, message) VALUES (?, ?, ?)",
                (requester_id, target_id, "sent from another tab"),
            )
            return None

        monkeypatch.setattr(SwapService, "_pending_request_id", staticmethod(lose_race))

        with pytest.raises(ConflictError):
            await SwapService.create(alice, _payload(bob["user_id"]))


class TestMessageValidation:
    def test_length_is_checked_after_stripping(self):
        padded = "  " + "x" * 500 + "  "

        assert SwapRequestCreate(
            target_user_id=2, message=padded, skills_offered=[], skills_requested=[]
        ).message == "x" * 500
        with pytest.raises(ValidationError):
            SwapRequestCreate(target_user_id=2, message="   ", skills_offered=[], skills_requested=[])
        with pytest.raises(ValidationError):
            SwapRequestCreate(
                target_user_id=2, message="x" * 501, skills_offered=[], skills_requested=[]
            )
