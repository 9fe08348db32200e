"""
Store Interfaces

Narrow async contracts between the matching core and its backing services.
Implementations must raise StoreUnavailable for any failed read or write;
the core never retries.
"""

from abc import ABC, abstractmethod
from typing import Awaitable, Iterable, Optional, TypeVar

from skillswap.errors import ProfileNotFound, SkillSwapError, StoreUnavailable
from skillswap.matching.reputation import compute_honor_score
from skillswap.models.config import HonorConfig
from skillswap.models.match import ConnectionDecision, MatchCandidate, MutualMatch
from skillswap.models.profile import Profile, Rating

T = TypeVar("T")


async def guarded_store_call(operation: str, call: Awaitable[T]) -> T:
    """Await a store call, reporting any failure as StoreUnavailable.

    Args:
        operation: Short description used in the error message
        call: Awaitable returned by a store method

    Raises:
        StoreUnavailable: If the call raises anything other than a SkillSwapError
    """
    try:
        return await call
    except SkillSwapError:
        raise
    except Exception as e:
        raise StoreUnavailable(f"{operation} failed: {e}") from e


def matches_public_query(
    profile: Profile, teaches_any: Optional[Iterable[str]] = None
) -> bool:
    """Shared predicate behind ProfileStore.query_public.

    Args:
        profile: Profile to test
        teaches_any: Optional skill names; when given, the profile must teach
            at least one of them (case-insensitive exact name)

    Returns:
        True if the profile is matchable and passes the skill filter
    """
    if not profile.is_matchable:
        return False
    if teaches_any is None:
        return True
    wanted = {skill.strip().lower() for skill in teaches_any if skill.strip()}
    taught = {skill.strip().lower() for skill in profile.skills_teach}
    return bool(wanted & taught)


class ProfileStore(ABC):
    """Profiles plus each user's current match snapshot."""

    @abstractmethod
    async def get_profile(self, user_id: str) -> Optional[Profile]:
        """Return the profile, or None if it does not exist."""

    @abstractmethod
    async def save_profile(self, profile: Profile) -> None:
        """Create or replace a profile."""

    @abstractmethod
    async def query_public(
        self, teaches_any: Optional[Iterable[str]] = None
    ) -> list[Profile]:
        """Return matchable profiles, optionally only those teaching one of teaches_any."""

    @abstractmethod
    async def put_matches(self, user_id: str, matches: list[MatchCandidate]) -> None:
        """Replace the user's match snapshot."""

    @abstractmethod
    async def get_matches(self, user_id: str) -> list[MatchCandidate]:
        """Return the user's match snapshot, empty if none was stored."""

    async def add_rating(
        self, user_id: str, rating: Rating, config: Optional[HonorConfig] = None
    ) -> Profile:
        """Append a rating and recompute the user's honor score.

        Raises:
            ProfileNotFound: If the rated user has no profile
            StoreUnavailable: If the read or write fails
        """
        profile = await self.get_profile(user_id)
        if profile is None:
            raise ProfileNotFound(user_id)

        profile.ratings.append(rating)
        profile.honor_score = compute_honor_score(profile.ratings, config)
        await self.save_profile(profile)
        return profile


class DecisionStore(ABC):
    @abstractmethod
    async def get_decision(self, user_id: str) -> ConnectionDecision:
        """Return the user's decisions, or a fresh empty record if none exist."""

    @abstractmethod
    async def put_decision(self, decision: ConnectionDecision) -> None:
        """Replace the user's decision record."""


class MutualMatchStore(ABC):
    @abstractmethod
    async def get_mutual_match(self, pair_key: str) -> Optional[MutualMatch]:
        """Return the mutual match for a canonical pair key, or None."""

    @abstractmethod
    async def put_mutual_match(self, mutual_match: MutualMatch) -> None:
        """Create or replace a mutual match record."""


class ChatProvisioner(ABC):
    @abstractmethod
    async def ensure_channel(self, user_a: str, user_b: str) -> str:
        """Return the chat channel id for the pair, creating it only if absent."""
