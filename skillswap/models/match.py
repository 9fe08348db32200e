"""
Match and Connection Data Models

Ranked candidates, per-user match snapshots, connection decisions and the
mutual-match record that unlocks chat for a pair.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from skillswap.models.profile import ExperienceLevel


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CandidateSource(str, Enum):
    """Where a candidate came from; sample candidates are never persisted against."""

    REAL = "real"
    SAMPLE = "sample"


class HonorRating(str, Enum):
    POOR = "Poor"
    MODERATE = "Moderate"
    HIGH = "High"
    EXCELLENT = "Excellent"


class DecisionState(str, Enum):
    """State of one directed (actor, target) edge. UNDECIDED is never stored."""

    UNDECIDED = "undecided"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class MutualMatchStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


def _escape_user_id(user_id: str) -> str:
    return user_id.replace("\\", "\\\\").replace("_", "\\_")


def pair_key_for(user_a: str, user_b: str) -> str:
    """Canonical key for an unordered user pair.

    The sorted ids are joined by "_". Backslashes and underscores inside an
    id are backslash-escaped first, so ("a_b", "c") and ("a", "b_c") get
    different keys while plain ids keep the "alice_bob" form.
    """
    first, second = sorted((user_a, user_b))
    return f"{_escape_user_id(first)}_{_escape_user_id(second)}"


class MatchCandidate(BaseModel):
    """A scored candidate in a user's ranked match list.

    Attributes:
        candidate_id: User id of the candidate
        display_name: Candidate's display name
        score: Compatibility score under the policy that produced it
        reason: Human-readable explanation built from the matched facts
        timestamp: When the candidate was scored
        source: REAL for store-backed users, SAMPLE for fallback placeholders
        honor_rating: Reputation band of the candidate
    """

    candidate_id: str
    display_name: str = ""
    score: int = Field(..., ge=0)
    reason: str = ""
    timestamp: datetime = Field(default_factory=_utcnow)
    source: CandidateSource = CandidateSource.REAL
    skills_teach: list[str] = Field(default_factory=list)
    skills_learn: list[str] = Field(default_factory=list)
    experience_level: ExperienceLevel = ExperienceLevel.BEGINNER
    nationality: Optional[str] = None
    honor_rating: HonorRating = HonorRating.MODERATE

    @property
    def is_sample(self) -> bool:
        return self.source == CandidateSource.SAMPLE


class MatchSnapshot(BaseModel):
    """The most recent ranked list for a user. Replaced wholesale on each run."""

    user_id: str
    matches: list[MatchCandidate] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)


class ConnectionDecision(BaseModel):
    """One user's current accept/reject decisions.

    The two lists behave as sets and are disjoint: a target lives in at most
    one of them, and the latest action for a target wins.
    """

    user_id: str
    accepted_matches: list[str] = Field(default_factory=list)
    rejected_matches: list[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    def accept(self, target_id: str) -> None:
        if target_id in self.rejected_matches:
            self.rejected_matches.remove(target_id)
        if target_id not in self.accepted_matches:
            self.accepted_matches.append(target_id)
        self.updated_at = _utcnow()

    def reject(self, target_id: str) -> None:
        if target_id in self.accepted_matches:
            self.accepted_matches.remove(target_id)
        if target_id not in self.rejected_matches:
            self.rejected_matches.append(target_id)
        self.updated_at = _utcnow()

    def state_for(self, target_id: str) -> DecisionState:
        if target_id in self.accepted_matches:
            return DecisionState.ACCEPTED
        if target_id in self.rejected_matches:
            return DecisionState.REJECTED
        return DecisionState.UNDECIDED


class MutualMatch(BaseModel):
    """A pair of users who accepted each other.

    Membership never changes once created; only status and channel id do.
    """

    pair_key: str
    users: tuple[str, str]
    status: MutualMatchStatus = MutualMatchStatus.ACTIVE
    channel_id: Optional[str] = None
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    @field_validator("users")
    @classmethod
    def validate_sorted_pair(cls, v: tuple[str, str]) -> tuple[str, str]:
        """Store the pair in canonical (sorted) order."""
        if v[0] == v[1]:
            raise ValueError("A mutual match needs two distinct users")
        return tuple(sorted(v))  # type: ignore[return-value]

    @classmethod
    def for_pair(cls, user_a: str, user_b: str) -> "MutualMatch":
        return cls(pair_key=pair_key_for(user_a, user_b), users=(user_a, user_b))

    def deactivate(self) -> None:
        self.status = MutualMatchStatus.INACTIVE
        self.updated_at = _utcnow()
