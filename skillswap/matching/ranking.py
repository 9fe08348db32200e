"""Match Ranking Engine.

Loads the requester and a candidate pool, scores every candidate with the
selected policy, deduplicates, sorts and replaces the user's match snapshot.

The engine never fabricates candidates: an empty pool yields an empty list
and store failures propagate. Substituting sample matches is the caller's
decision (see MatchCoordinator).
"""

from datetime import datetime, timezone
from typing import Optional

from skillswap.errors import ProfileNotFound
from skillswap.matching.compatibility import (
    CandidateRetrieval,
    ScoringPolicy,
    StrictPolicy,
    unique_skills,
)
from skillswap.matching.reputation import honor_rating
from skillswap.models.config import MatchingParams
from skillswap.models.match import CandidateSource, MatchCandidate
from skillswap.models.profile import Profile
from skillswap.stores.base import ProfileStore, guarded_store_call
from skillswap.utils.deduplication import deduplicate_candidates
from skillswap.utils.logger import get_logger


class MatchRankingEngine:
    """Ranks candidate profiles for a requesting user."""

    def __init__(
        self,
        profile_store: ProfileStore,
        params: Optional[MatchingParams] = None,
        correlation_id: Optional[str] = None,
    ):
        """
        Initialize the ranking engine.

        Args:
            profile_store: Source of profiles and sink for match snapshots
            params: Matching configuration (defaults used when None)
            correlation_id: Correlation ID for logging
        """
        self.profile_store = profile_store
        self.params = params or MatchingParams()
        self.logger = get_logger(
            correlation_id=correlation_id,
            phase="ranking",
            component="match_ranking_engine",
        )

    async def find_matches(
        self, user_id: str, policy: Optional[ScoringPolicy] = None
    ) -> list[MatchCandidate]:
        """
        Compute, persist and return the ranked match list for a user.

        Args:
            user_id: Requesting user
            policy: Scoring policy (StrictPolicy when None)

        Returns:
            Candidates sorted by score descending, ties in discovery order.
            Empty when nobody qualifies.

        Raises:
            ProfileNotFound: If the requester has no profile
            StoreUnavailable: If any store read or write fails
        """
        policy = policy or StrictPolicy(self.params)

        requester = await guarded_store_call(
            "Loading requester profile", self.profile_store.get_profile(user_id)
        )
        if requester is None:
            self.logger.warning("Requester profile not found", user_id=user_id)
            raise ProfileNotFound(user_id)

        pool = await self._load_pool(requester, policy)
        now = datetime.now(timezone.utc)

        scored: list[MatchCandidate] = []
        for candidate, via_skill in pool:
            if candidate.user_id == requester.user_id or not candidate.is_matchable:
                continue

            score = policy.score(requester, candidate)
            if not policy.is_viable(score):
                self.logger.debug(
                    "Candidate below floor",
                    candidate_id=candidate.user_id,
                    score=score,
                )
                continue

            scored.append(
                self._build_candidate(requester, candidate, policy, score, via_skill, now)
            )

        ranked = deduplicate_candidates(scored)
        # sorted() is stable, so equal scores keep discovery order
        ranked = sorted(ranked, key=lambda c: c.score, reverse=True)

        await guarded_store_call(
            "Storing match snapshot", self.profile_store.put_matches(user_id, ranked)
        )

        self.logger.info(
            "Ranking complete",
            user_id=user_id,
            policy=policy.name,
            pool_size=len(pool),
            match_count=len(ranked),
            top_score=ranked[0].score if ranked else None,
        )
        return ranked

    async def get_stored_matches(self, user_id: str) -> list[MatchCandidate]:
        """Return the user's last persisted match snapshot."""
        return await guarded_store_call(
            "Loading match snapshot", self.profile_store.get_matches(user_id)
        )

    async def _load_pool(
        self, requester: Profile, policy: ScoringPolicy
    ) -> list[tuple[Profile, Optional[str]]]:
        """
        Build the candidate pool for a policy.

        ALL_PUBLIC reads every public profile once. TEACHES_WANTED queries once
        per wanted skill, so a candidate teaching two wanted skills is
        discovered twice and tagged with the skill that found it.

        Returns:
            (candidate, discovering skill or None) pairs in discovery order
        """
        if policy.retrieval == CandidateRetrieval.ALL_PUBLIC:
            profiles = await guarded_store_call(
                "Querying public profiles", self.profile_store.query_public()
            )
            return [(profile, None) for profile in profiles]

        pool: list[tuple[Profile, Optional[str]]] = []
        for skill in unique_skills(requester.skills_learn):
            profiles = await guarded_store_call(
                f"Querying teachers of {skill}",
                self.profile_store.query_public(teaches_any=[skill]),
            )
            pool.extend((profile, skill) for profile in profiles)

        if not requester.skills_learn:
            self.logger.info("Requester has no skills to learn", user_id=requester.user_id)

        return pool

    def _build_candidate(
        self,
        requester: Profile,
        candidate: Profile,
        policy: ScoringPolicy,
        score: int,
        via_skill: Optional[str],
        timestamp: datetime,
    ) -> MatchCandidate:
        return MatchCandidate(
            candidate_id=candidate.user_id,
            display_name=candidate.display_name,
            score=score,
            reason=policy.reason(requester, candidate, via_skill),
            timestamp=timestamp,
            source=CandidateSource.REAL,
            skills_teach=list(candidate.skills_teach),
            skills_learn=list(candidate.skills_learn),
            experience_level=candidate.experience_level,
            nationality=candidate.nationality,
            honor_rating=honor_rating(candidate.honor_score, self.params.reputation),
        )
