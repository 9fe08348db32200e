"""Honor score recomputation and reputation bands."""

from typing import Optional, Sequence

from skillswap.models.config import HonorConfig, ReputationConfig
from skillswap.models.match import HonorRating
from skillswap.models.profile import Rating


def compute_honor_score(
    ratings: Sequence[Rating], config: Optional[HonorConfig] = None
) -> int:
    """Recompute an honor score as the average rating times the multiplier.

    Args:
        ratings: All ratings received by the user
        config: Honor constants (defaults: multiplier 20, default rating 2.5)

    Returns:
        Integer honor score clamped to 0-100. With no ratings the default
        rating is used, so a fresh profile scores 50.
    """
    config = config or HonorConfig()

    if ratings:
        average = sum(r.rating for r in ratings) / len(ratings)
    else:
        average = config.default_rating

    score = round(average * config.rating_multiplier)
    return max(0, min(100, score))


def honor_rating(
    honor_score: Optional[int], config: Optional[ReputationConfig] = None
) -> HonorRating:
    """Map an honor score to its display band. Missing or zero scores read as Moderate."""
    config = config or ReputationConfig()

    if not honor_score:
        return HonorRating.MODERATE
    if honor_score >= config.excellent_threshold:
        return HonorRating.EXCELLENT
    if honor_score >= config.high_threshold:
        return HonorRating.HIGH
    if honor_score >= config.moderate_threshold:
        return HonorRating.MODERATE
    return HonorRating.POOR


def reputation_bonus(
    honor_score: Optional[int], config: Optional[ReputationConfig] = None
) -> int:
    """Points a candidate's honor score adds to a strict match score."""
    config = config or ReputationConfig()

    if not honor_score:
        return 0
    if honor_score >= config.excellent_threshold:
        return config.excellent_bonus
    if honor_score >= config.high_threshold:
        return config.high_bonus
    if honor_score >= config.moderate_threshold:
        return config.moderate_bonus
    return 0
