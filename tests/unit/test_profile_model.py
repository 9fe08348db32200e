"""Unit tests for Profile model and availability variants."""

import pytest
from pydantic import ValidationError

from skillswap.models.config import HonorConfig
from skillswap.models.profile import (
    ExperienceLevel,
    FreeTextAvailability,
    Profile,
    ScheduleAvailability,
    Visibility,
    Weekday,
)


def test_profile_defaults():
    """Test Profile defaults for a freshly created record."""
    profile = Profile(user_id="u-1")

    assert profile.display_name == ""
    assert profile.skills_teach == []
    assert profile.skills_learn == []
    assert profile.languages == []
    assert profile.experience_level == ExperienceLevel.BEGINNER
    assert profile.visibility == Visibility.PUBLIC
    assert profile.honor_score == 50
    assert profile.profile_created is False
    assert profile.availability is None
    assert profile.nationality is None


def test_profile_null_collections_become_empty():
    """Test that null collections from the store validate to empty lists."""
    profile = Profile(user_id="u-1", skills_teach=None, skills_learn=None, languages=None)

    assert profile.skills_teach == []
    assert profile.skills_learn == []
    assert profile.languages == []


def test_profile_requires_user_id():
    """Test Profile validation fails without a user id."""
    with pytest.raises(ValidationError):
        Profile(user_id="")


def test_profile_honor_score_bounds():
    """Test honor score must stay within 0-100."""
    with pytest.raises(ValidationError):
        Profile(user_id="u-1", honor_score=101)
    with pytest.raises(ValidationError):
        Profile(user_id="u-1", honor_score=-1)


def test_is_matchable_requires_public_and_created():
    """Test only public, set-up profiles are matchable."""
    assert Profile(user_id="a", profile_created=True).is_matchable is True
    assert Profile(user_id="b", profile_created=False).is_matchable is False
    assert (
        Profile(user_id="c", profile_created=True, visibility="private").is_matchable
        is False
    )


def test_register_and_complete_setup():
    """Test registration lifecycle."""
    profile = Profile.register("u-9", display_name="Nia")

    assert profile.profile_created is False
    assert profile.honor_score == 50
    assert profile.is_matchable is False

    profile.complete_setup()

    assert profile.profile_created is True
    assert profile.is_matchable is True


class TestAvailability:
    """Test cases for availability normalization and overlap."""

    def test_string_becomes_free_text(self):
        profile = Profile(user_id="u-1", availability="Weekends, Evenings")

        assert isinstance(profile.availability, FreeTextAvailability)
        assert profile.availability.tokens() == {"weekends", "evenings"}

    def test_list_becomes_free_text(self):
        profile = Profile(user_id="u-1", availability=["Weekends", "Evenings"])

        assert isinstance(profile.availability, FreeTextAvailability)
        assert profile.availability.text == "Weekends, Evenings"

    def test_blank_string_is_none(self):
        profile = Profile(user_id="u-1", availability="   ")

        assert profile.availability is None

    def test_mapping_becomes_schedule(self):
        profile = Profile(
            user_id="u-1", availability={"Monday": ["Morning", "Evening"]}
        )

        assert isinstance(profile.availability, ScheduleAvailability)
        assert profile.availability.slots[Weekday.MONDAY] == {"morning", "evening"}

    def test_tagged_dict_is_respected(self):
        profile = Profile(
            user_id="u-1", availability={"kind": "free_text", "text": "Mornings"}
        )

        assert isinstance(profile.availability, FreeTextAvailability)

    def test_invalid_weekday_rejected(self):
        with pytest.raises(ValidationError):
            Profile(user_id="u-1", availability={"Funday": ["morning"]})

    def test_free_text_overlap_is_case_insensitive(self):
        a = FreeTextAvailability(text="Weekends, Evenings")
        b = FreeTextAvailability(text="evenings")
        c = FreeTextAvailability(text="Mornings")

        assert a.overlaps(b) is True
        assert a.overlaps(c) is False

    def test_schedule_overlap_needs_same_day_and_slot(self):
        a = ScheduleAvailability(slots={"monday": ["morning"], "friday": ["evening"]})
        b = ScheduleAvailability(slots={"friday": ["Evening"]})
        c = ScheduleAvailability(slots={"monday": ["evening"]})

        assert a.overlaps(b) is True
        assert a.overlaps(c) is False

    def test_mixed_variants_never_overlap(self):
        free_text = FreeTextAvailability(text="monday")
        schedule = ScheduleAvailability(slots={"monday": ["monday"]})

        assert free_text.overlaps(schedule) is False
        assert schedule.overlaps(free_text) is False


def test_register_takes_starting_score_from_honor_config():
    """Test the sign-up honor score follows the configured default."""
    profile = Profile.register("u-9", honor=HonorConfig(default_honor_score=35))

    assert profile.honor_score == 35
