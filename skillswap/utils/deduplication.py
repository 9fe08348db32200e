"""Candidate deduplication for ranked match lists.

A candidate can be discovered more than once, e.g. once per wanted skill
under the lenient policy. Each candidate must appear exactly once in ranked
output with the highest score it reached.
"""

from skillswap.models.match import MatchCandidate
from skillswap.utils.logger import get_logger


def deduplicate_candidates(candidates: list[MatchCandidate]) -> list[MatchCandidate]:
    """Collapse repeated candidate ids, keeping the highest-scoring entry.

    The surviving entry keeps the position of the candidate's first discovery,
    so a later stable sort still breaks ties by discovery order. On equal
    scores the first-discovered entry (and its reason text) wins.

    Args:
        candidates: Scored candidates in discovery order

    Returns:
        List of unique candidates in first-discovery order
    """
    logger = get_logger(
        correlation_id="deduplication",
        phase="ranking",
        component="candidate_deduplication",
    )

    best: dict[str, MatchCandidate] = {}
    order: list[str] = []

    for candidate in candidates:
        existing = best.get(candidate.candidate_id)
        if existing is None:
            best[candidate.candidate_id] = candidate
            order.append(candidate.candidate_id)
            continue

        logger.debug(
            "Duplicate candidate found",
            candidate_id=candidate.candidate_id,
            kept_score=max(existing.score, candidate.score),
        )
        if candidate.score > existing.score:
            best[candidate.candidate_id] = candidate

    unique = [best[candidate_id] for candidate_id in order]

    if len(unique) != len(candidates):
        logger.debug(
            "Deduplication complete",
            original_count=len(candidates),
            unique_count=len(unique),
            duplicates_removed=len(candidates) - len(unique),
        )

    return unique
