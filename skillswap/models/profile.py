"""
User Profile Data Models

Profile documents as the matching core sees them, plus the availability
variant and the ratings that feed a profile's honor score.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator

from skillswap.models.config import HonorConfig


class ExperienceLevel(str, Enum):
    """Self-reported experience level."""

    BEGINNER = "Beginner"
    INTERMEDIATE = "Intermediate"
    EXPERT = "Expert"


class Visibility(str, Enum):
    """Whether a profile may be shown to other users."""

    PUBLIC = "public"
    PRIVATE = "private"


class Weekday(str, Enum):
    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class FreeTextAvailability(BaseModel):
    """Availability written as free text, e.g. "Weekends, Evenings"."""

    kind: Literal["free_text"] = "free_text"
    text: str = ""

    def tokens(self) -> set[str]:
        """Comma-separated parts of the text, trimmed and lowercased."""
        return {part.strip().lower() for part in self.text.split(",") if part.strip()}

    def overlaps(self, other: "AvailabilityVariant") -> bool:
        if not isinstance(other, FreeTextAvailability):
            return False
        return bool(self.tokens() & other.tokens())


class ScheduleAvailability(BaseModel):
    """Availability as a weekday to time-slot mapping."""

    kind: Literal["schedule"] = "schedule"
    slots: dict[Weekday, set[str]] = Field(default_factory=dict)

    @field_validator("slots", mode="before")
    @classmethod
    def normalize_slots(cls, v: Any) -> Any:
        """Lowercase weekday keys and slot names so "Monday"/"monday" compare equal."""
        if not isinstance(v, dict):
            return v
        normalized: dict[str, set[str]] = {}
        for day, slots in v.items():
            key = day.value if isinstance(day, Weekday) else str(day).strip().lower()
            normalized[key] = {str(slot).strip().lower() for slot in (slots or [])}
        return normalized

    def overlaps(self, other: "AvailabilityVariant") -> bool:
        if not isinstance(other, ScheduleAvailability):
            return False
        for day, slots in self.slots.items():
            if slots & other.slots.get(day, set()):
                return True
        return False


AvailabilityVariant = Union[FreeTextAvailability, ScheduleAvailability]
Availability = Annotated[AvailabilityVariant, Field(discriminator="kind")]


class Rating(BaseModel):
    """A single rating left by another user after an exchange."""

    rated_by: str
    rating: int = Field(..., ge=1, le=5)
    feedback: Optional[str] = None
    timestamp: datetime = Field(default_factory=_utcnow)


class Profile(BaseModel):
    """Represents a user's skill-exchange profile.

    Attributes:
        user_id: Unique, stable user identifier
        display_name: Name shown to other users
        skills_teach: Skills the user can teach (treated as a set by scoring)
        skills_learn: Skills the user wants to learn
        experience_level: Self-reported level, compared for equality only
        languages: Spoken languages
        nationality: Optional nationality
        locality: Optional free-text location
        availability: Free text or weekday schedule, see Availability
        visibility: Only public profiles are matchable
        honor_score: Reputation 0-100 derived from ratings
        ratings: Ratings received so far
        profile_created: True once profile setup has been completed
    """

    user_id: str = Field(..., min_length=1)
    display_name: str = ""
    email: Optional[str] = None
    bio: Optional[str] = None
    skills_teach: list[str] = Field(default_factory=list)
    skills_learn: list[str] = Field(default_factory=list)
    experience_level: ExperienceLevel = ExperienceLevel.BEGINNER
    languages: list[str] = Field(default_factory=list)
    nationality: Optional[str] = None
    locality: Optional[str] = None
    availability: Optional[Availability] = None
    visibility: Visibility = Visibility.PUBLIC
    honor_score: int = Field(default=50, ge=0, le=100)
    ratings: list[Rating] = Field(default_factory=list)
    profile_created: bool = False
    created_at: datetime = Field(default_factory=_utcnow)

    @field_validator("skills_teach", "skills_learn", "languages", "ratings", mode="before")
    @classmethod
    def none_to_empty(cls, v: Any) -> Any:
        """Absent collections are stored as null by some clients."""
        return [] if v is None else v

    @field_validator("availability", mode="before")
    @classmethod
    def normalize_availability(cls, v: Any) -> Any:
        """Wrap raw availability shapes into the tagged variant.

        A plain string or a list of labels becomes free text; a mapping
        without a "kind" key is read as a weekday schedule.
        """
        if v is None or isinstance(v, BaseModel):
            return v
        if isinstance(v, str):
            return {"kind": "free_text", "text": v} if v.strip() else None
        if isinstance(v, (list, tuple)):
            text = ", ".join(str(item) for item in v)
            return {"kind": "free_text", "text": text} if text else None
        if isinstance(v, dict) and "kind" not in v:
            return {"kind": "schedule", "slots": v}
        return v

    @property
    def is_matchable(self) -> bool:
        """Only public, fully set-up profiles take part in matching."""
        return self.visibility == Visibility.PUBLIC and self.profile_created

    @classmethod
    def register(
        cls,
        user_id: str,
        display_name: str = "",
        honor: Optional[HonorConfig] = None,
    ) -> "Profile":
        """Create the initial profile written at sign-up.

        The starting honor score is honor.default_honor_score (50 by default).
        """
        honor = honor or HonorConfig()
        return cls(
            user_id=user_id,
            display_name=display_name,
            honor_score=honor.default_honor_score,
            profile_created=False,
        )

    def complete_setup(self) -> None:
        """Mark profile setup as finished, making the profile matchable if public."""
        self.profile_created = True
