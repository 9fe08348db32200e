"""Fallback sample candidates.

Placeholder candidates shown when a user has no real matches, so the match
list is never empty. They are tagged CandidateSource.SAMPLE and their ids
carry a reserved prefix; nothing that persists connection state may treat
them as real users.
"""

import random
from datetime import datetime, timezone
from typing import Optional

from skillswap.models.config import MatchingParams
from skillswap.models.match import CandidateSource, HonorRating, MatchCandidate
from skillswap.models.profile import ExperienceLevel, Profile

SAMPLE_ID_PREFIX = "sample-user-"


def _sample_profiles(prefix: str) -> list[Profile]:
    return [
        Profile(
            user_id=f"{prefix}1",
            display_name="Alex Johnson",
            bio="Software engineer with 5 years of experience. I love teaching "
            "programming concepts and learning about design.",
            locality="San Francisco, CA",
            skills_teach=["JavaScript", "React", "Node.js"],
            skills_learn=["UI/UX Design", "Graphic Design", "Public Speaking"],
            experience_level=ExperienceLevel.EXPERT,
            availability="Weekends, Evenings",
            profile_created=True,
        ),
        Profile(
            user_id=f"{prefix}2",
            display_name="Maria Rodriguez",
            bio="UI/UX designer passionate about creating beautiful interfaces. "
            "I'd love to teach design principles and learn coding.",
            locality="New York, NY",
            skills_teach=["UI/UX Design", "Figma", "Adobe XD"],
            skills_learn=["JavaScript", "React", "Frontend Development"],
            experience_level=ExperienceLevel.INTERMEDIATE,
            availability="Weekdays, Mornings",
            profile_created=True,
        ),
        Profile(
            user_id=f"{prefix}3",
            display_name="James Wilson",
            bio="Professional photographer with 10 years of experience. I can "
            "teach photography and photo editing, and I want to learn web development.",
            locality="Chicago, IL",
            skills_teach=["Photography", "Photoshop", "Lightroom"],
            skills_learn=["HTML", "CSS", "JavaScript"],
            experience_level=ExperienceLevel.EXPERT,
            availability="Weekends, Afternoons",
            profile_created=True,
        ),
    ]


def is_sample_id(user_id: str, prefix: str = SAMPLE_ID_PREFIX) -> bool:
    """Recognize sample users by id when only the id is at hand."""
    return user_id.startswith(prefix)


class SampleSupply:
    """Produces the fixed list of sample candidates with randomized scores."""

    def __init__(
        self,
        params: Optional[MatchingParams] = None,
        rng: Optional[random.Random] = None,
    ):
        """
        Args:
            params: Matching configuration (score band and id prefix)
            rng: Random source; pass a seeded Random for reproducible output
        """
        self.params = params or MatchingParams()
        self.rng = rng or random.Random()
        self.profiles = _sample_profiles(self.params.sample_supply.id_prefix)

    def is_sample_id(self, user_id: str) -> bool:
        return is_sample_id(user_id, self.params.sample_supply.id_prefix)

    def sample_matches(self) -> list[MatchCandidate]:
        """
        Return every sample profile as a candidate, in pool order.

        Each gets a score drawn uniformly from the configured band (70-99 by
        default) and a reason naming one of its teachable skills at random.
        """
        config = self.params.sample_supply
        now = datetime.now(timezone.utc)

        candidates: list[MatchCandidate] = []
        for profile in self.profiles:
            skill = self.rng.choice(profile.skills_teach)
            candidates.append(
                MatchCandidate(
                    candidate_id=profile.user_id,
                    display_name=profile.display_name,
                    score=self.rng.randint(config.min_score, config.max_score),
                    reason=f"{profile.display_name} can teach you {skill}",
                    timestamp=now,
                    source=CandidateSource.SAMPLE,
                    skills_teach=list(profile.skills_teach),
                    skills_learn=list(profile.skills_learn),
                    experience_level=profile.experience_level,
                    honor_rating=HonorRating.MODERATE,
                )
            )
        return candidates
