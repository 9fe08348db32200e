"""Unit tests for in-memory store implementations."""

import pytest

from skillswap.errors import ProfileNotFound, StoreUnavailable
from skillswap.models.match import ConnectionDecision, MatchCandidate, MutualMatch
from skillswap.models.profile import Profile, Rating
from skillswap.stores.base import guarded_store_call, matches_public_query
from skillswap.stores.memory import (
    InMemoryChatProvisioner,
    InMemoryDecisionStore,
    InMemoryMutualMatchStore,
    InMemoryProfileStore,
)


def test_matches_public_query_filters():
    """Test the shared public-query predicate."""
    teacher = Profile(user_id="a", profile_created=True, skills_teach=["Python", "Go"])
    private = Profile(
        user_id="b", profile_created=True, visibility="private", skills_teach=["Python"]
    )
    unfinished = Profile(user_id="c", skills_teach=["Python"])

    assert matches_public_query(teacher) is True
    assert matches_public_query(teacher, ["python"]) is True
    assert matches_public_query(teacher, ["Rust"]) is False
    assert matches_public_query(private) is False
    assert matches_public_query(unfinished) is False


class TestGuardedStoreCall:
    """Test cases for guarded_store_call error mapping."""

    @pytest.mark.asyncio
    async def test_returns_value(self):
        async def call():
            return 42

        assert await guarded_store_call("Reading", call()) == 42

    @pytest.mark.asyncio
    async def test_wraps_foreign_errors(self):
        async def call():
            raise ConnectionError("socket closed")

        with pytest.raises(StoreUnavailable, match="Reading failed: socket closed"):
            await guarded_store_call("Reading", call())

    @pytest.mark.asyncio
    async def test_passes_domain_errors_through(self):
        async def call():
            raise ProfileNotFound("u-1")

        with pytest.raises(ProfileNotFound):
            await guarded_store_call("Reading", call())


class TestInMemoryProfileStore:
    """Test cases for InMemoryProfileStore."""

    @pytest.mark.asyncio
    async def test_get_missing_profile(self):
        store = InMemoryProfileStore()

        assert await store.get_profile("nobody") is None

    @pytest.mark.asyncio
    async def test_returned_profiles_are_copies(self):
        store = InMemoryProfileStore([Profile(user_id="a", skills_teach=["Python"])])

        profile = await store.get_profile("a")
        profile.skills_teach.append("Go")

        stored = await store.get_profile("a")
        assert stored.skills_teach == ["Python"]

    @pytest.mark.asyncio
    async def test_query_public_with_skill_filter(self):
        store = InMemoryProfileStore(
            [
                Profile(user_id="a", profile_created=True, skills_teach=["Python"]),
                Profile(user_id="b", profile_created=True, skills_teach=["Guitar"]),
                Profile(user_id="c", skills_teach=["Python"]),
            ]
        )

        everyone = await store.query_public()
        teachers = await store.query_public(teaches_any=["python"])

        assert {p.user_id for p in everyone} == {"a", "b"}
        assert [p.user_id for p in teachers] == ["a"]

    @pytest.mark.asyncio
    async def test_snapshot_replaced(self):
        store = InMemoryProfileStore()

        await store.put_matches("a", [MatchCandidate(candidate_id="b", score=10)])
        await store.put_matches("a", [MatchCandidate(candidate_id="c", score=5)])

        matches = await store.get_matches("a")
        assert [m.candidate_id for m in matches] == ["c"]
        assert await store.get_matches("nobody") == []

    @pytest.mark.asyncio
    async def test_add_rating_recomputes_honor(self):
        store = InMemoryProfileStore([Profile(user_id="a")])

        await store.add_rating("a", Rating(rated_by="b", rating=5))
        profile = await store.add_rating("a", Rating(rated_by="c", rating=4))

        assert profile.honor_score == 90
        stored = await store.get_profile("a")
        assert stored.honor_score == 90
        assert len(stored.ratings) == 2

    @pytest.mark.asyncio
    async def test_add_rating_unknown_user(self):
        store = InMemoryProfileStore()

        with pytest.raises(ProfileNotFound):
            await store.add_rating("ghost", Rating(rated_by="b", rating=5))


class TestInMemoryDecisionAndMutualStores:
    """Test cases for decision and mutual match stores."""

    @pytest.mark.asyncio
    async def test_missing_decision_is_empty(self):
        store = InMemoryDecisionStore()

        decision = await store.get_decision("a")

        assert decision.user_id == "a"
        assert decision.accepted_matches == []
        assert decision.rejected_matches == []

    @pytest.mark.asyncio
    async def test_decision_round_trip(self):
        store = InMemoryDecisionStore()
        decision = ConnectionDecision(user_id="a")
        decision.accept("b")

        await store.put_decision(decision)

        assert (await store.get_decision("a")).accepted_matches == ["b"]

    @pytest.mark.asyncio
    async def test_mutual_match_keyed_by_pair(self):
        store = InMemoryMutualMatchStore()

        await store.put_mutual_match(MutualMatch.for_pair("b", "a"))

        assert (await store.get_mutual_match("a_b")).users == ("a", "b")
        assert await store.get_mutual_match("a_c") is None


class TestInMemoryChatProvisioner:
    """Test cases for InMemoryChatProvisioner idempotence."""

    @pytest.mark.asyncio
    async def test_same_channel_for_either_order(self):
        chat = InMemoryChatProvisioner()

        first = await chat.ensure_channel("b", "a")
        second = await chat.ensure_channel("a", "b")

        assert first == second == "a_b"
        assert len(chat.channels) == 1
        assert len(chat.calls) == 2
