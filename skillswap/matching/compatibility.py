"""Skill compatibility scoring.

Two scoring policies share one fuzzy skill-matching primitive:

- StrictPolicy scores every public profile on complementary skills, shared
  languages, nationality, experience level and the candidate's reputation,
  and drops candidates that do not score above zero.
- LenientPolicy scores only profiles that teach something the requester
  wants, awarding flat points per complementary skill plus bonuses for a
  two-way exchange and overlapping availability, with no floor.

Fuzzy matching is loose and must stay that way: "Java" matches "JavaScript".
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Iterable, Optional

from skillswap.matching.reputation import reputation_bonus
from skillswap.models.config import MatchingParams
from skillswap.models.profile import Profile


class CandidateRetrieval(str, Enum):
    """How the ranking engine builds the candidate pool for a policy."""

    ALL_PUBLIC = "all_public"
    TEACHES_WANTED = "teaches_wanted"


def normalize_skill(skill: str) -> str:
    return skill.strip().lower()


def skills_match(skill_a: str, skill_b: str) -> bool:
    """Case-insensitive equality or substring containment in either direction.

    Args:
        skill_a: First skill name
        skill_b: Second skill name

    Returns:
        True if the normalized names are equal or one contains the other.
        Blank names never match.
    """
    a = normalize_skill(skill_a)
    b = normalize_skill(skill_b)
    if not a or not b:
        return False
    return a == b or a in b or b in a


def unique_skills(skills: Iterable[str]) -> list[str]:
    """Drop case-insensitive duplicates, keeping first spelling and order."""
    seen: set[str] = set()
    result: list[str] = []
    for skill in skills:
        key = normalize_skill(skill)
        if key and key not in seen:
            seen.add(key)
            result.append(skill)
    return result


def complementary_skills(teach: Iterable[str], learn: Iterable[str]) -> list[str]:
    """Teach skills that fuzzy-match a learn skill, one entry per matching pair.

    Args:
        teach: Skills one user can teach
        learn: Skills the other user wants to learn

    Returns:
        The teach-side skill name for every (teach, learn) pair that matches,
        in teach order. A teach skill matching two learn skills appears twice.
    """
    learn_skills = unique_skills(learn)
    matched: list[str] = []
    for teach_skill in unique_skills(teach):
        for learn_skill in learn_skills:
            if skills_match(teach_skill, learn_skill):
                matched.append(teach_skill)
    return matched


def common_languages(a: Profile, b: Profile) -> list[str]:
    """Languages both profiles speak, in a's order and spelling."""
    other = {lang.strip().lower() for lang in b.languages}
    return [
        lang for lang in unique_skills(a.languages) if lang.strip().lower() in other
    ]


def shared_nationality(a: Profile, b: Profile) -> Optional[str]:
    """The nationality both profiles report, or None if either is blank or they differ."""
    if not a.nationality or not b.nationality:
        return None
    if a.nationality.strip().lower() != b.nationality.strip().lower():
        return None
    return a.nationality.strip() or None


def _join(items: Iterable[str]) -> str:
    return ", ".join(unique_skills(items))


class ScoringPolicy(ABC):
    """Named scoring strategy selected explicitly by the caller."""

    name: str = ""
    enforces_floor: bool = False
    retrieval: CandidateRetrieval = CandidateRetrieval.ALL_PUBLIC

    def __init__(self, params: Optional[MatchingParams] = None):
        self.params = params or MatchingParams()

    @abstractmethod
    def score(self, requester: Profile, candidate: Profile) -> int:
        """Score a candidate for the requester. Never raises."""

    @abstractmethod
    def reason(
        self, requester: Profile, candidate: Profile, via_skill: Optional[str] = None
    ) -> str:
        """Human-readable explanation of why the candidate was matched."""

    def is_viable(self, score: int) -> bool:
        """Whether a scored candidate may appear in ranked output."""
        if self.enforces_floor:
            return score > 0
        return True

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


class StrictPolicy(ScoringPolicy):
    """Full compatibility score with reputation bonus and a positive-score floor."""

    name = "strict"
    enforces_floor = True
    retrieval = CandidateRetrieval.ALL_PUBLIC

    def compatibility(self, a: Profile, b: Profile) -> int:
        """Symmetric part of the strict score (everything but reputation)."""
        weights = self.params.scoring
        score = 0

        score += len(complementary_skills(a.skills_teach, b.skills_learn)) * weights.skill_match_points
        score += len(complementary_skills(b.skills_teach, a.skills_learn)) * weights.skill_match_points
        score += len(common_languages(a, b)) * weights.language_points

        if shared_nationality(a, b):
            score += weights.nationality_points

        if a.experience_level == b.experience_level:
            score += weights.experience_points

        return score

    def score(self, requester: Profile, candidate: Profile) -> int:
        return self.compatibility(requester, candidate) + reputation_bonus(
            candidate.honor_score, self.params.reputation
        )

    def reason(
        self, requester: Profile, candidate: Profile, via_skill: Optional[str] = None
    ) -> str:
        parts: list[str] = []
        name = candidate.display_name or candidate.user_id

        you_teach = complementary_skills(requester.skills_teach, candidate.skills_learn)
        they_teach = complementary_skills(candidate.skills_teach, requester.skills_learn)
        languages = common_languages(requester, candidate)
        nationality = shared_nationality(requester, candidate)

        if you_teach:
            parts.append(f"You can teach {_join(you_teach)}.")
        if they_teach:
            parts.append(f"{name} can teach you {_join(they_teach)}.")
        if languages:
            parts.append(f"You both speak {_join(languages)}.")
        if nationality:
            parts.append(f"You're both from {nationality}.")

        return " ".join(parts).strip()


class LenientPolicy(ScoringPolicy):
    """Flat skill-pair scoring for candidates who teach what the requester wants."""

    name = "lenient"
    enforces_floor = False
    retrieval = CandidateRetrieval.TEACHES_WANTED

    def score(self, requester: Profile, candidate: Profile) -> int:
        weights = self.params.scoring

        they_teach = complementary_skills(candidate.skills_teach, requester.skills_learn)
        you_teach = complementary_skills(requester.skills_teach, candidate.skills_learn)

        score = (len(they_teach) + len(you_teach)) * weights.skill_match_points

        if they_teach and you_teach:
            score += weights.mutual_exchange_bonus

        if requester.availability is not None and candidate.availability is not None:
            if requester.availability.overlaps(candidate.availability):
                score += weights.availability_bonus

        return score

    def reason(
        self, requester: Profile, candidate: Profile, via_skill: Optional[str] = None
    ) -> str:
        name = candidate.display_name or candidate.user_id
        skill = via_skill
        if not skill:
            they_teach = complementary_skills(candidate.skills_teach, requester.skills_learn)
            skill = they_teach[0] if they_teach else None
        if not skill:
            return f"{name} is open to a skill exchange"
        return f"{name} can teach you {skill}"


POLICIES: dict[str, type[ScoringPolicy]] = {
    StrictPolicy.name: StrictPolicy,
    LenientPolicy.name: LenientPolicy,
}


def get_policy(name: str, params: Optional[MatchingParams] = None) -> ScoringPolicy:
    """Resolve a policy by name ("strict" or "lenient").

    Raises:
        ValueError: If the name is not a known policy
    """
    try:
        policy_class = POLICIES[name.lower()]
    except KeyError:
        raise ValueError(
            f"Unknown scoring policy: {name}. Must be one of: {', '.join(POLICIES)}"
        ) from None
    return policy_class(params)
