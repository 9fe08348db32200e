"""
JSONL Store Module

File-backed stores that keep each collection in one JSONL file under a
store directory. Every write rewrites the whole collection; concurrent
writers are last-writer-wins.

Example Usage:
    from skillswap.stores.jsonl import JsonlProfileStore, JsonlDecisionStore

    profiles = JsonlProfileStore(store_dir="data")
    await profiles.save_profile(profile)
    public = await profiles.query_public(teaches_any={"Python"})

    decisions = JsonlDecisionStore(store_dir="data")
    record = await decisions.get_decision("u-42")

Layout:
    data/profiles.jsonl        one Profile per line
    data/match_snapshots.jsonl one MatchSnapshot per line
    data/decisions.jsonl       one ConnectionDecision per line
    data/mutual_matches.jsonl  one MutualMatch per line
    data/chats.jsonl           one chat channel per line
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, Optional

import jsonlines
from pydantic import BaseModel, ValidationError

from skillswap.errors import StoreUnavailable
from skillswap.models.match import (
    ConnectionDecision,
    MatchCandidate,
    MatchSnapshot,
    MutualMatch,
    pair_key_for,
)
from skillswap.models.profile import Profile
from skillswap.stores.base import (
    ChatProvisioner,
    DecisionStore,
    MutualMatchStore,
    ProfileStore,
    matches_public_query,
)
from skillswap.utils.logger import get_logger


class JsonlCollection:
    """One JSONL file holding records keyed by a single field."""

    def __init__(self, store_dir: str, filename: str, key_field: str):
        """
        Initialize collection.

        Args:
            store_dir: Directory path for store files (created if missing)
            filename: JSONL file name inside store_dir
            key_field: Record field used as the unique key
        """
        self.store_dir = Path(store_dir)
        self.store_dir.mkdir(parents=True, exist_ok=True)
        self.path = self.store_dir / filename
        self.key_field = key_field
        self.logger = get_logger(
            correlation_id="jsonl-store", phase="storage", component=filename
        )

    def load_records(self) -> dict[str, dict[str, Any]]:
        """
        Load all records keyed by key_field.

        Returns:
            Mapping of key to raw record. Later lines override earlier ones if
            keys collide. Empty when the file does not exist yet.

        Raises:
            StoreUnavailable: If the file cannot be read or is corrupted
        """
        if not self.path.exists():
            return {}

        records: dict[str, dict[str, Any]] = {}
        try:
            with jsonlines.open(self.path) as reader:
                for record in reader:
                    records[str(record[self.key_field])] = record
        except (jsonlines.InvalidLineError, KeyError, TypeError) as e:
            raise StoreUnavailable(f"Corrupted store file {self.path}: {e}") from e
        except OSError as e:
            raise StoreUnavailable(f"Failed to read store file {self.path}: {e}") from e

        return records

    def save_records(self, records: dict[str, dict[str, Any]]) -> None:
        """
        Rewrite the collection file with the given records.

        Raises:
            StoreUnavailable: If the file cannot be written
        """
        try:
            with jsonlines.open(self.path, mode="w") as writer:
                for record in records.values():
                    writer.write(record)
        except OSError as e:
            raise StoreUnavailable(
                f"Failed to write store file {self.path}: {e}"
            ) from e

        self.logger.debug("Store file written", path=str(self.path), records=len(records))

    def upsert(self, key: str, item: BaseModel) -> None:
        records = self.load_records()
        records[key] = item.model_dump(mode="json")
        self.save_records(records)

    def parse(self, model: type[BaseModel], record: dict[str, Any]) -> Any:
        """Validate a raw record, surfacing schema drift as a store failure."""
        try:
            return model.model_validate(record)
        except ValidationError as e:
            raise StoreUnavailable(
                f"Invalid {model.__name__} record in {self.path}: {e}"
            ) from e


class JsonlProfileStore(ProfileStore):
    def __init__(self, store_dir: str = "data"):
        self.profiles = JsonlCollection(store_dir, "profiles.jsonl", "user_id")
        self.snapshots = JsonlCollection(store_dir, "match_snapshots.jsonl", "user_id")

    async def get_profile(self, user_id: str) -> Optional[Profile]:
        record = self.profiles.load_records().get(user_id)
        if record is None:
            return None
        return self.profiles.parse(Profile, record)

    async def save_profile(self, profile: Profile) -> None:
        self.profiles.upsert(profile.user_id, profile)

    async def query_public(
        self, teaches_any: Optional[Iterable[str]] = None
    ) -> list[Profile]:
        skills = list(teaches_any) if teaches_any is not None else None
        profiles = [
            self.profiles.parse(Profile, record)
            for record in self.profiles.load_records().values()
        ]
        return [p for p in profiles if matches_public_query(p, skills)]

    async def put_matches(self, user_id: str, matches: list[MatchCandidate]) -> None:
        records = self.snapshots.load_records()
        now = datetime.now(timezone.utc)

        existing = records.get(user_id)
        if existing is not None:
            snapshot = self.snapshots.parse(MatchSnapshot, existing)
            snapshot.matches = list(matches)
            snapshot.updated_at = now
        else:
            snapshot = MatchSnapshot(
                user_id=user_id, matches=list(matches), created_at=now, updated_at=now
            )

        records[user_id] = snapshot.model_dump(mode="json")
        self.snapshots.save_records(records)

    async def get_matches(self, user_id: str) -> list[MatchCandidate]:
        record = self.snapshots.load_records().get(user_id)
        if record is None:
            return []
        return self.snapshots.parse(MatchSnapshot, record).matches


class JsonlDecisionStore(DecisionStore):
    def __init__(self, store_dir: str = "data"):
        self.decisions = JsonlCollection(store_dir, "decisions.jsonl", "user_id")

    async def get_decision(self, user_id: str) -> ConnectionDecision:
        record = self.decisions.load_records().get(user_id)
        if record is None:
            return ConnectionDecision(user_id=user_id)
        return self.decisions.parse(ConnectionDecision, record)

    async def put_decision(self, decision: ConnectionDecision) -> None:
        self.decisions.upsert(decision.user_id, decision)


class JsonlMutualMatchStore(MutualMatchStore):
    def __init__(self, store_dir: str = "data"):
        self.mutual_matches = JsonlCollection(
            store_dir, "mutual_matches.jsonl", "pair_key"
        )

    async def get_mutual_match(self, pair_key: str) -> Optional[MutualMatch]:
        record = self.mutual_matches.load_records().get(pair_key)
        if record is None:
            return None
        return self.mutual_matches.parse(MutualMatch, record)

    async def put_mutual_match(self, mutual_match: MutualMatch) -> None:
        self.mutual_matches.upsert(mutual_match.pair_key, mutual_match)


class ChatChannel(BaseModel):
    channel_id: str
    participants: list[str]
    created_at: datetime


class JsonlChatProvisioner(ChatProvisioner):
    """Creates chat channel records keyed by the canonical pair key."""

    def __init__(self, store_dir: str = "data"):
        self.chats = JsonlCollection(store_dir, "chats.jsonl", "channel_id")

    async def ensure_channel(self, user_a: str, user_b: str) -> str:
        channel_id = pair_key_for(user_a, user_b)
        records = self.chats.load_records()

        if channel_id not in records:
            channel = ChatChannel(
                channel_id=channel_id,
                participants=sorted((user_a, user_b)),
                created_at=datetime.now(timezone.utc),
            )
            records[channel_id] = channel.model_dump(mode="json")
            self.chats.save_records(records)
            self.chats.logger.info("Chat channel created", channel_id=channel_id)

        return channel_id
