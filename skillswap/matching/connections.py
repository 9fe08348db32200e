"""Connection State Machine.

Each directed pair (actor, target) is UNDECIDED, ACCEPTED or REJECTED. Only
an explicit actor action moves an edge, and the latest action wins: a
rejected target can be accepted again later.

After every accept the pair is checked for mutuality. The first time both
edges are ACCEPTED the pair gets a chat channel and a MutualMatch record.
Both side effects are check-then-create, so replaying the check, or two
users accepting each other at the same moment, never duplicates them.
No locks, transactions or retries are used.
"""

import asyncio
from typing import Optional

from skillswap.errors import InvalidDecisionTransition, MutualMatchNotFound
from skillswap.models.match import (
    DecisionState,
    MutualMatch,
    pair_key_for,
)
from skillswap.stores.base import (
    ChatProvisioner,
    DecisionStore,
    MutualMatchStore,
    guarded_store_call,
)
from skillswap.utils.logger import get_logger


def validate_pair(actor: str, target: str) -> None:
    """Reject decision actions without an actor or target, or aimed at oneself.

    Raises:
        InvalidDecisionTransition: On a malformed action
    """
    if not actor or not actor.strip():
        raise InvalidDecisionTransition("Decision requires an actor")
    if not target or not target.strip():
        raise InvalidDecisionTransition("Decision requires a target")
    if actor == target:
        raise InvalidDecisionTransition(f"User {actor} cannot decide on themselves")


class ConnectionStateMachine:
    """Records accept/reject decisions and promotes mutual accepts to matches."""

    def __init__(
        self,
        decision_store: DecisionStore,
        mutual_store: MutualMatchStore,
        chat_provisioner: ChatProvisioner,
        correlation_id: Optional[str] = None,
    ):
        self.decision_store = decision_store
        self.mutual_store = mutual_store
        self.chat_provisioner = chat_provisioner
        self.logger = get_logger(
            correlation_id=correlation_id,
            phase="connections",
            component="connection_state_machine",
        )

    async def accept(self, actor: str, target: str) -> bool:
        """
        Record that actor accepts target, then check the pair for mutuality.

        Args:
            actor: User taking the action
            target: User being accepted

        Returns:
            True if the pair is mutual after this accept

        Raises:
            InvalidDecisionTransition: If actor or target is missing or equal
            StoreUnavailable: If a store read or write fails
        """
        validate_pair(actor, target)

        decision = await guarded_store_call(
            "Loading decisions", self.decision_store.get_decision(actor)
        )
        previous = decision.state_for(target)
        decision.accept(target)
        await guarded_store_call(
            "Storing decisions", self.decision_store.put_decision(decision)
        )

        self.logger.info(
            "Match accepted",
            actor=actor,
            target=target,
            previous_state=previous.value,
        )
        return await self.check_mutual(actor, target)

    async def reject(self, actor: str, target: str) -> None:
        """
        Record that actor rejects target.

        Raises:
            InvalidDecisionTransition: If actor or target is missing or equal
            StoreUnavailable: If a store read or write fails
        """
        validate_pair(actor, target)

        decision = await guarded_store_call(
            "Loading decisions", self.decision_store.get_decision(actor)
        )
        previous = decision.state_for(target)
        decision.reject(target)
        await guarded_store_call(
            "Storing decisions", self.decision_store.put_decision(decision)
        )

        self.logger.info(
            "Match rejected",
            actor=actor,
            target=target,
            previous_state=previous.value,
        )

    async def decision(self, actor: str, target: str) -> DecisionState:
        """Current state of the directed edge actor -> target."""
        record = await guarded_store_call(
            "Loading decisions", self.decision_store.get_decision(actor)
        )
        return record.state_for(target)

    async def is_mutual(self, user_a: str, user_b: str) -> bool:
        """True iff both users have accepted each other. Read-only."""
        decision_a, decision_b = await asyncio.gather(
            guarded_store_call("Loading decisions", self.decision_store.get_decision(user_a)),
            guarded_store_call("Loading decisions", self.decision_store.get_decision(user_b)),
        )
        return (
            decision_a.state_for(user_b) == DecisionState.ACCEPTED
            and decision_b.state_for(user_a) == DecisionState.ACCEPTED
        )

    async def check_mutual(self, user_a: str, user_b: str) -> bool:
        """
        Check mutuality and, on first detection, create the match and chat channel.

        Returns:
            True if the pair is mutual
        """
        if not await self.is_mutual(user_a, user_b):
            return False

        await self._ensure_mutual_match(user_a, user_b)
        return True

    async def get_mutual_match(self, user_a: str, user_b: str) -> Optional[MutualMatch]:
        return await guarded_store_call(
            "Loading mutual match",
            self.mutual_store.get_mutual_match(pair_key_for(user_a, user_b)),
        )

    async def get_mutual_matches(self, user_id: str) -> list[str]:
        """
        List users that user_id accepted and who accepted user_id back.

        Returns:
            Partner ids in the order user_id accepted them
        """
        decision = await guarded_store_call(
            "Loading decisions", self.decision_store.get_decision(user_id)
        )
        partners = list(decision.accepted_matches)
        if not partners:
            return []

        partner_decisions = await asyncio.gather(
            *(
                guarded_store_call(
                    "Loading decisions", self.decision_store.get_decision(partner)
                )
                for partner in partners
            )
        )
        return [
            partner
            for partner, partner_decision in zip(partners, partner_decisions)
            if partner_decision.state_for(user_id) == DecisionState.ACCEPTED
        ]

    async def deactivate_mutual_match(self, user_a: str, user_b: str) -> MutualMatch:
        """
        Move a mutual match from active to inactive. Membership is unchanged.

        Raises:
            MutualMatchNotFound: If the pair never became mutual
        """
        pair_key = pair_key_for(user_a, user_b)
        mutual_match = await guarded_store_call(
            "Loading mutual match", self.mutual_store.get_mutual_match(pair_key)
        )
        if mutual_match is None:
            raise MutualMatchNotFound(pair_key)

        mutual_match.deactivate()
        await guarded_store_call(
            "Storing mutual match", self.mutual_store.put_mutual_match(mutual_match)
        )
        self.logger.info("Mutual match deactivated", pair_key=pair_key)
        return mutual_match

    async def _ensure_mutual_match(
        self, user_a: str, user_b: str
    ) -> tuple[MutualMatch, bool]:
        """
        Create the pair's MutualMatch and chat channel unless the match exists.

        The channel is provisioned before the match record is written. If the
        record write fails, the next check finds no record and provisions again,
        which the idempotent provisioner absorbs.

        Returns:
            (mutual match, True if created by this call)
        """
        pair_key = pair_key_for(user_a, user_b)
        existing = await guarded_store_call(
            "Loading mutual match", self.mutual_store.get_mutual_match(pair_key)
        )
        if existing is not None:
            self.logger.debug("Mutual match already exists", pair_key=pair_key)
            return existing, False

        channel_id = await guarded_store_call(
            "Provisioning chat channel",
            self.chat_provisioner.ensure_channel(user_a, user_b),
        )

        mutual_match = MutualMatch.for_pair(user_a, user_b)
        mutual_match.channel_id = channel_id
        await guarded_store_call(
            "Storing mutual match", self.mutual_store.put_mutual_match(mutual_match)
        )

        self.logger.info(
            "Mutual match created",
            pair_key=pair_key,
            channel_id=channel_id,
        )
        return mutual_match, True
