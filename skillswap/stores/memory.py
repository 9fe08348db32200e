"""In-memory store implementations.

Dict-backed stores for tests, demos and single-process use. Records are
copied on the way in and out so callers never share mutable state with the
store.
"""

from typing import Iterable, Optional

from skillswap.models.match import (
    ConnectionDecision,
    MatchCandidate,
    MutualMatch,
    pair_key_for,
)
from skillswap.models.profile import Profile
from skillswap.stores.base import (
    ChatProvisioner,
    DecisionStore,
    MutualMatchStore,
    ProfileStore,
    matches_public_query,
)


class InMemoryProfileStore(ProfileStore):
    def __init__(self, profiles: Optional[Iterable[Profile]] = None):
        self.profiles: dict[str, Profile] = {}
        self.snapshots: dict[str, list[MatchCandidate]] = {}
        for profile in profiles or []:
            self.profiles[profile.user_id] = profile.model_copy(deep=True)

    async def get_profile(self, user_id: str) -> Optional[Profile]:
        profile = self.profiles.get(user_id)
        return profile.model_copy(deep=True) if profile else None

    async def save_profile(self, profile: Profile) -> None:
        self.profiles[profile.user_id] = profile.model_copy(deep=True)

    async def query_public(
        self, teaches_any: Optional[Iterable[str]] = None
    ) -> list[Profile]:
        skills = list(teaches_any) if teaches_any is not None else None
        return [
            profile.model_copy(deep=True)
            for profile in self.profiles.values()
            if matches_public_query(profile, skills)
        ]

    async def put_matches(self, user_id: str, matches: list[MatchCandidate]) -> None:
        self.snapshots[user_id] = [m.model_copy(deep=True) for m in matches]

    async def get_matches(self, user_id: str) -> list[MatchCandidate]:
        return [m.model_copy(deep=True) for m in self.snapshots.get(user_id, [])]


class InMemoryDecisionStore(DecisionStore):
    def __init__(self) -> None:
        self.decisions: dict[str, ConnectionDecision] = {}

    async def get_decision(self, user_id: str) -> ConnectionDecision:
        decision = self.decisions.get(user_id)
        if decision is None:
            return ConnectionDecision(user_id=user_id)
        return decision.model_copy(deep=True)

    async def put_decision(self, decision: ConnectionDecision) -> None:
        self.decisions[decision.user_id] = decision.model_copy(deep=True)


class InMemoryMutualMatchStore(MutualMatchStore):
    def __init__(self) -> None:
        self.mutual_matches: dict[str, MutualMatch] = {}

    async def get_mutual_match(self, pair_key: str) -> Optional[MutualMatch]:
        match = self.mutual_matches.get(pair_key)
        return match.model_copy(deep=True) if match else None

    async def put_mutual_match(self, mutual_match: MutualMatch) -> None:
        self.mutual_matches[mutual_match.pair_key] = mutual_match.model_copy(deep=True)


class InMemoryChatProvisioner(ChatProvisioner):
    """Records every provisioning request; channel ids are canonical pair keys."""

    def __init__(self) -> None:
        self.channels: dict[str, tuple[str, str]] = {}
        self.calls: list[tuple[str, str]] = []

    async def ensure_channel(self, user_a: str, user_b: str) -> str:
        self.calls.append((user_a, user_b))
        channel_id = pair_key_for(user_a, user_b)
        if channel_id not in self.channels:
            self.channels[channel_id] = tuple(sorted((user_a, user_b)))  # type: ignore[assignment]
        return channel_id
