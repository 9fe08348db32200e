"""
Error Types

Exceptions raised by the matching core. Scoring never raises; the ranking
engine and connection state machine propagate store failures to the caller,
and only the coordinator decides to substitute sample output.
"""


class SkillSwapError(Exception):
    """Base class for all matching-core errors."""

    pass


class ProfileNotFound(SkillSwapError):
    """Raised when the requesting user's profile does not exist."""

    def __init__(self, user_id: str):
        self.user_id = user_id
        super().__init__(f"Profile not found: {user_id}")


class StoreUnavailable(SkillSwapError):
    """Raised when a read or write against a backing store fails."""

    pass


class InvalidDecisionTransition(SkillSwapError):
    """Raised for a decision action without an actor or target, or aimed at oneself."""

    pass


class MutualMatchNotFound(SkillSwapError):
    """Raised when a status change targets a pair that never became mutual."""

    def __init__(self, pair_key: str):
        self.pair_key = pair_key
        super().__init__(f"No mutual match for pair: {pair_key}")
