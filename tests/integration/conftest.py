"""
Integration Test Configuration

Provides fixtures for end-to-end runs over the JSONL stores.
When running in CI environment (CI=true), slow tests are automatically skipped.
"""

import os
import random

import pytest

from skillswap.coordinator import MatchCoordinator
from skillswap.matching.sample_supply import SampleSupply
from skillswap.models.config import BatchConfig, MatchingParams
from skillswap.stores.jsonl import (
    JsonlChatProvisioner,
    JsonlDecisionStore,
    JsonlMutualMatchStore,
    JsonlProfileStore,
)


@pytest.fixture
def is_ci_environment() -> bool:
    """
    Detect if tests are running in CI environment.

    Returns:
        True if CI environment variable is set to 'true'
    """
    return os.getenv("CI", "").lower() == "true"


@pytest.fixture(autouse=True)
def skip_slow_tests_in_ci(request, is_ci_environment):
    """Skip tests marked @pytest.mark.slow when running in CI."""
    if is_ci_environment and request.node.get_closest_marker("slow"):
        pytest.skip("Skipping slow test in CI environment")


@pytest.fixture
def store_dir(tmp_path) -> str:
    return str(tmp_path / "data")


@pytest.fixture
def jsonl_coordinator(store_dir) -> MatchCoordinator:
    """Coordinator over fresh JSONL stores with a seeded sample supply."""
    params = MatchingParams(batch=BatchConfig(refresh_batch_size=3))
    return MatchCoordinator(
        profile_store=JsonlProfileStore(store_dir),
        decision_store=JsonlDecisionStore(store_dir),
        mutual_store=JsonlMutualMatchStore(store_dir),
        chat_provisioner=JsonlChatProvisioner(store_dir),
        params=params,
        sample_supply=SampleSupply(params, rng=random.Random(11)),
        correlation_id="integration-test",
    )
