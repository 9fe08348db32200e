"""
Match Coordinator Module

Top-level orchestration over the matching core. Owns the decisions the core
deliberately leaves to its caller: substituting sample matches when ranking
fails or comes back empty, keeping sample candidates away from the stores,
and refreshing many users' snapshots in batches.
"""

import asyncio
import uuid
from pathlib import Path
from typing import Optional, TypeVar

from pydantic import BaseModel, Field

from skillswap.errors import ProfileNotFound, SkillSwapError, StoreUnavailable
from skillswap.matching.compatibility import ScoringPolicy, get_policy
from skillswap.matching.connections import ConnectionStateMachine, validate_pair
from skillswap.matching.ranking import MatchRankingEngine
from skillswap.matching.sample_supply import SampleSupply
from skillswap.models.config import MatchingParams
from skillswap.models.match import DecisionState, MatchCandidate
from skillswap.models.profile import Profile, Rating
from skillswap.stores.base import (
    ChatProvisioner,
    DecisionStore,
    MutualMatchStore,
    ProfileStore,
    guarded_store_call,
)
from skillswap.stores.jsonl import (
    JsonlChatProvisioner,
    JsonlDecisionStore,
    JsonlMutualMatchStore,
    JsonlProfileStore,
)
from skillswap.utils.logger import configure_logging, get_logger
from skillswap.utils.progress_tracker import ProgressTracker

T = TypeVar("T")


def divide_into_batches(items: list[T], batch_size: int) -> list[list[T]]:
    """
    Split items into consecutive batches of at most batch_size.

    Raises:
        ValueError: If batch_size <= 0

    Example:
        >>> divide_into_batches(["u1", "u2", "u3"], 2)
        [['u1', 'u2'], ['u3']]
    """
    if batch_size <= 0:
        raise ValueError("batch_size must be greater than 0")

    return [items[i : i + batch_size] for i in range(0, len(items), batch_size)]


class ConnectionOutcome(BaseModel):
    """Result of a user responding to a candidate."""

    candidate_id: str
    state: DecisionState
    mutual: bool = False
    simulated: bool = False


class RefreshResult(BaseModel):
    """Per-user outcome of a bulk snapshot refresh."""

    match_counts: dict[str, int] = Field(default_factory=dict)
    failed: list[str] = Field(default_factory=list)


class MatchCoordinator:
    """
    Wires stores, ranking engine, connection state machine and sample supply.

    Every public method is a coroutine; one coordinator may serve concurrent
    requests since it holds no per-request state.
    """

    def __init__(
        self,
        profile_store: ProfileStore,
        decision_store: DecisionStore,
        mutual_store: MutualMatchStore,
        chat_provisioner: ChatProvisioner,
        params: Optional[MatchingParams] = None,
        sample_supply: Optional[SampleSupply] = None,
        correlation_id: Optional[str] = None,
        progress_tracker: Optional[ProgressTracker] = None,
    ):
        """
        Initialize the coordinator.

        Args:
            profile_store: Profile and match snapshot store
            decision_store: Accept/reject decision store
            mutual_store: Mutual match store
            chat_provisioner: Chat channel provisioning collaborator
            params: Matching configuration (defaults used when None)
            sample_supply: Fallback candidate source
            correlation_id: Correlation ID for logging (auto-generated if None)
            progress_tracker: Progress display for bulk refreshes
        """
        self.params = params or MatchingParams()

        if correlation_id is None:
            correlation_id = str(uuid.uuid4())
        self.correlation_id = correlation_id

        self.profile_store = profile_store
        self.engine = MatchRankingEngine(
            profile_store, params=self.params, correlation_id=correlation_id
        )
        self.connections = ConnectionStateMachine(
            decision_store,
            mutual_store,
            chat_provisioner,
            correlation_id=correlation_id,
        )
        self.sample_supply = sample_supply or SampleSupply(self.params)
        self.progress_tracker = progress_tracker or ProgressTracker()

        self.logger = get_logger(
            correlation_id=correlation_id,
            phase="coordinator",
            component="match_coordinator",
        )

    @classmethod
    def from_config(
        cls,
        config_path: str | Path = "config/matching_params.json",
        store_dir: str = "data",
        correlation_id: Optional[str] = None,
    ) -> "MatchCoordinator":
        """
        Build a coordinator over JSONL stores from a config file.

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config validation fails
        """
        params = MatchingParams.load(config_path)
        configure_logging(log_file=params.log_file, log_level=params.log_level)

        coordinator = cls(
            profile_store=JsonlProfileStore(store_dir),
            decision_store=JsonlDecisionStore(store_dir),
            mutual_store=JsonlMutualMatchStore(store_dir),
            chat_provisioner=JsonlChatProvisioner(store_dir),
            params=params,
            correlation_id=correlation_id,
        )
        coordinator.logger.info(
            "Match coordinator initialized",
            config_path=str(config_path),
            store_dir=store_dir,
        )
        return coordinator

    def resolve_policy(self, policy: str | ScoringPolicy) -> ScoringPolicy:
        if isinstance(policy, ScoringPolicy):
            return policy
        return get_policy(policy, self.params)

    async def register(self, user_id: str, display_name: str = "") -> Profile:
        """
        Write the initial sign-up profile for a user.

        The starting honor score comes from params.honor.default_honor_score.

        Raises:
            StoreUnavailable: If the write fails
        """
        profile = Profile.register(user_id, display_name, honor=self.params.honor)
        await guarded_store_call(
            "Saving profile", self.profile_store.save_profile(profile)
        )
        self.logger.info(
            "Profile registered", user_id=user_id, honor_score=profile.honor_score
        )
        return profile

    async def add_rating(self, user_id: str, rating: Rating) -> Profile:
        """
        Record a rating for user_id and recompute their honor score with params.honor.

        Raises:
            ProfileNotFound: If the rated user has no profile
            StoreUnavailable: If the read or write fails
        """
        profile = await guarded_store_call(
            "Recording rating",
            self.profile_store.add_rating(user_id, rating, self.params.honor),
        )
        self.logger.info(
            "Rating recorded",
            user_id=user_id,
            rated_by=rating.rated_by,
            honor_score=profile.honor_score,
        )
        return profile

    async def find_matches(
        self, user_id: str, policy: str | ScoringPolicy = "strict"
    ) -> list[MatchCandidate]:
        """
        Ranked matches for a user, or sample candidates if there are none.

        Falls back to the sample supply when the requester has no profile,
        when a store is unavailable, or when ranking finds nobody.

        Args:
            user_id: Requesting user
            policy: "strict", "lenient" or a ScoringPolicy instance

        Returns:
            Non-empty list of candidates
        """
        scoring_policy = self.resolve_policy(policy)

        try:
            matches = await self.engine.find_matches(user_id, scoring_policy)
        except ProfileNotFound:
            return self._fallback(user_id, reason="profile_not_found")
        except StoreUnavailable as e:
            self.logger.error("Ranking failed", user_id=user_id, error=str(e))
            return self._fallback(user_id, reason="store_unavailable")

        if not matches:
            return self._fallback(user_id, reason="no_matches")

        return matches

    async def respond(
        self, user_id: str, candidate: MatchCandidate, accept: bool
    ) -> ConnectionOutcome:
        """
        Accept or reject a candidate on behalf of user_id.

        Sample candidates are answered locally: nothing is written and the
        pair never becomes mutual.

        Raises:
            InvalidDecisionTransition: If user_id or the candidate id is missing or equal
            StoreUnavailable: If a store read or write fails
        """
        state = DecisionState.ACCEPTED if accept else DecisionState.REJECTED

        if candidate.is_sample:
            validate_pair(user_id, candidate.candidate_id)
            self.logger.warning(
                "Simulated response to sample candidate",
                user_id=user_id,
                candidate_id=candidate.candidate_id,
                state=state.value,
            )
            return ConnectionOutcome(
                candidate_id=candidate.candidate_id, state=state, simulated=True
            )

        if accept:
            mutual = await self.connections.accept(user_id, candidate.candidate_id)
        else:
            await self.connections.reject(user_id, candidate.candidate_id)
            mutual = False

        return ConnectionOutcome(
            candidate_id=candidate.candidate_id, state=state, mutual=mutual
        )

    async def refresh_matches(
        self, user_ids: list[str], policy: str | ScoringPolicy = "strict"
    ) -> RefreshResult:
        """
        Recompute match snapshots for many users, one batch at a time.

        Users inside a batch are ranked concurrently. A user whose ranking
        raises a SkillSwapError is recorded as failed and the run continues;
        any other exception aborts the run.

        Returns:
            RefreshResult with match counts per refreshed user and failed ids
        """
        scoring_policy = self.resolve_policy(policy)
        batch_size = self.params.batch.refresh_batch_size
        batches = divide_into_batches(user_ids, batch_size)
        result = RefreshResult()

        self.logger.info(
            "Starting match refresh",
            total_users=len(user_ids),
            batch_size=batch_size,
            total_batches=len(batches),
            policy=scoring_policy.name,
        )

        self.progress_tracker.start("Refreshing matches", total_users=len(user_ids))
        try:
            for batch_num, batch in enumerate(batches, start=1):
                self.progress_tracker.update_batch(batch_num, len(batches))

                outcomes = await asyncio.gather(
                    *(self.engine.find_matches(uid, scoring_policy) for uid in batch),
                    return_exceptions=True,
                )

                for uid, outcome in zip(batch, outcomes):
                    if isinstance(outcome, SkillSwapError):
                        self.logger.error(
                            "Match refresh failed", user_id=uid, error=str(outcome)
                        )
                        result.failed.append(uid)
                    elif isinstance(outcome, BaseException):
                        raise outcome
                    else:
                        result.match_counts[uid] = len(outcome)

                self.progress_tracker.advance(len(batch))
        finally:
            self.progress_tracker.finish(failed=len(result.failed))

        self.logger.info(
            "Match refresh complete",
            refreshed=len(result.match_counts),
            failed=len(result.failed),
        )
        return result

    def _fallback(self, user_id: str, reason: str) -> list[MatchCandidate]:
        samples = self.sample_supply.sample_matches()
        self.logger.warning(
            "Falling back to sample matches",
            user_id=user_id,
            reason=reason,
            sample_count=len(samples),
        )
        return samples
