"""Unit tests for skill matching primitives and scoring policies."""

import pytest

from skillswap.matching.compatibility import (
    CandidateRetrieval,
    LenientPolicy,
    StrictPolicy,
    common_languages,
    complementary_skills,
    get_policy,
    shared_nationality,
    skills_match,
    unique_skills,
)
from skillswap.models.config import MatchingParams, ScoringWeights
from skillswap.models.profile import ExperienceLevel, Profile


def make_profile(user_id: str, **kwargs) -> Profile:
    kwargs.setdefault("profile_created", True)
    return Profile(user_id=user_id, **kwargs)


@pytest.fixture
def guitarist():
    return make_profile(
        "ana",
        display_name="Ana",
        skills_teach=["Guitar"],
        skills_learn=["Python"],
        languages=["English", "Spanish"],
        nationality="Mexico",
        experience_level=ExperienceLevel.INTERMEDIATE,
        honor_score=90,
    )


@pytest.fixture
def pythonista():
    return make_profile(
        "bea",
        display_name="Bea",
        skills_teach=["Python"],
        skills_learn=["guitar"],
        languages=["english"],
        nationality="mexico",
        experience_level=ExperienceLevel.INTERMEDIATE,
        honor_score=85,
    )


class TestSkillsMatch:
    """Test cases for the fuzzy skill-matching primitive."""

    @pytest.mark.parametrize(
        "a,b",
        [
            ("Python", "python"),
            ("Java", "JavaScript"),
            ("JavaScript", "java"),
            ("  React ", "react"),
        ],
    )
    def test_matches(self, a, b):
        assert skills_match(a, b) is True

    @pytest.mark.parametrize("a,b", [("Python", "Guitar"), ("", "Python"), ("   ", "")])
    def test_non_matches(self, a, b):
        assert skills_match(a, b) is False

    def test_unique_skills_keeps_first_spelling(self):
        assert unique_skills(["Python", "python", "Go", " ", "PYTHON"]) == ["Python", "Go"]

    def test_complementary_counts_each_pair(self):
        # "Java" matches both "Java" and "JavaScript"
        assert complementary_skills(["Java", "Cooking"], ["JavaScript", "java"]) == [
            "Java",
            "Java",
        ]

    def test_complementary_ignores_duplicate_entries(self):
        assert complementary_skills(["Python", "python"], ["PYTHON"]) == ["Python"]


class TestProfileAffinity:
    """Test cases for language and nationality comparison."""

    def test_common_languages(self, guitarist, pythonista):
        assert common_languages(guitarist, pythonista) == ["English"]

    def test_shared_nationality_case_insensitive(self, guitarist, pythonista):
        assert shared_nationality(guitarist, pythonista) == "Mexico"

    def test_missing_nationality(self, guitarist):
        other = make_profile("x", nationality=None)

        assert shared_nationality(guitarist, other) is None
        assert shared_nationality(other, guitarist) is None


class TestStrictPolicy:
    """Test cases for StrictPolicy scoring and reasons."""

    def test_full_score(self, guitarist, pythonista):
        # Arrange
        policy = StrictPolicy()

        # Act / Assert: 10 + 10 skills, 2 language, 5 nationality, 3 experience
        assert policy.compatibility(guitarist, pythonista) == 30
        assert policy.score(guitarist, pythonista) == 35

    def test_compatibility_is_symmetric(self, guitarist, pythonista):
        policy = StrictPolicy()

        assert policy.compatibility(guitarist, pythonista) == policy.compatibility(
            pythonista, guitarist
        )

    def test_reputation_uses_candidate_honor(self, guitarist, pythonista):
        policy = StrictPolicy()
        pythonista.honor_score = 65

        assert policy.score(guitarist, pythonista) == 33
        assert policy.score(pythonista, guitarist) == 35

    def test_reason_lists_every_factor(self, guitarist, pythonista):
        reason = StrictPolicy().reason(guitarist, pythonista)

        assert reason == (
            "You can teach Guitar. Bea can teach you Python. "
            "You both speak English. You're both from Mexico."
        )

    def test_python_example(self):
        requester = make_profile("u-1", skills_learn=["Python"])
        candidate = make_profile(
            "u-2", display_name="Cody", skills_teach=["Python"], honor_score=0
        )
        policy = StrictPolicy()

        score = policy.score(requester, candidate)

        assert score >= 10
        assert "Python" in policy.reason(requester, candidate)

    def test_default_profiles_score_experience_and_reputation(self):
        a = make_profile("a")
        b = make_profile("b")
        policy = StrictPolicy()

        assert policy.compatibility(a, b) == 3
        assert policy.score(a, b) == 4

    def test_reason_empty_when_nothing_shared(self):
        a = make_profile("a", experience_level=ExperienceLevel.EXPERT)
        b = make_profile("b")

        assert StrictPolicy().reason(a, b) == ""

    def test_floor(self):
        policy = StrictPolicy()

        assert policy.enforces_floor is True
        assert policy.is_viable(0) is False
        assert policy.is_viable(1) is True
        assert policy.retrieval == CandidateRetrieval.ALL_PUBLIC

    def test_custom_weights(self, guitarist, pythonista):
        params = MatchingParams(scoring=ScoringWeights(skill_match_points=1))

        assert StrictPolicy(params).compatibility(guitarist, pythonista) == 12


class TestLenientPolicy:
    """Test cases for LenientPolicy scoring and reasons."""

    def test_two_way_exchange_with_overlap(self):
        requester = make_profile(
            "r", skills_teach=["Guitar"], skills_learn=["Python"], availability="Weekends"
        )
        candidate = make_profile(
            "c",
            skills_teach=["Python"],
            skills_learn=["Guitar"],
            availability="weekends, evenings",
        )

        # 10 + 10 skills, 20 two-way bonus, 15 availability
        assert LenientPolicy().score(requester, candidate) == 55

    def test_two_way_exchange_without_overlap(self):
        requester = make_profile(
            "r", skills_teach=["Guitar"], skills_learn=["Python"], availability="Weekends"
        )
        candidate = make_profile(
            "c", skills_teach=["Python"], skills_learn=["Guitar"], availability="Mornings"
        )

        assert LenientPolicy().score(requester, candidate) == 40

    def test_one_direction_only(self):
        requester = make_profile("r", skills_learn=["Python"])
        candidate = make_profile("c", skills_teach=["Python"])

        assert LenientPolicy().score(requester, candidate) == 10

    def test_zero_score_is_viable(self):
        policy = LenientPolicy()

        assert policy.enforces_floor is False
        assert policy.is_viable(0) is True
        assert policy.retrieval == CandidateRetrieval.TEACHES_WANTED

    def test_reason_uses_discovering_skill(self):
        requester = make_profile("r", skills_learn=["Python", "Go"])
        candidate = make_profile("c", display_name="Dev", skills_teach=["Python", "Go"])

        assert LenientPolicy().reason(requester, candidate, "Go") == "Dev can teach you Go"
        assert LenientPolicy().reason(requester, candidate) == "Dev can teach you Python"

    def test_reason_without_complementary_skill(self):
        requester = make_profile("r")
        candidate = make_profile("c")

        assert LenientPolicy().reason(requester, candidate) == "c is open to a skill exchange"


class TestGetPolicy:
    """Test cases for policy lookup by name."""

    def test_known_names(self):
        assert isinstance(get_policy("strict"), StrictPolicy)
        assert isinstance(get_policy("LENIENT"), LenientPolicy)

    def test_params_are_passed_through(self):
        params = MatchingParams(log_level="debug")

        assert get_policy("strict", params).params is params

    def test_unknown_name(self):
        with pytest.raises(ValueError, match="Unknown scoring policy"):
            get_policy("greedy")
