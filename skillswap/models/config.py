"""
Configuration Models

Pydantic models for matching configuration: scoring weights, reputation
thresholds, honor-score constants, sample supply and batch sizes.
"""

import json
from pathlib import Path
from pydantic import BaseModel, Field, ValidationInfo, field_validator


class ScoringWeights(BaseModel):
    """Points awarded by the scoring policies."""

    skill_match_points: int = Field(default=10, ge=0)
    language_points: int = Field(default=2, ge=0)
    nationality_points: int = Field(default=5, ge=0)
    experience_points: int = Field(default=3, ge=0)
    mutual_exchange_bonus: int = Field(default=20, ge=0)
    availability_bonus: int = Field(default=15, ge=0)


class ReputationConfig(BaseModel):
    """Honor-score bands and the bonus each band adds to a strict score."""

    excellent_threshold: int = Field(default=80, ge=0, le=100)
    high_threshold: int = Field(default=60, ge=0, le=100)
    moderate_threshold: int = Field(default=40, ge=0, le=100, validate_default=True)
    excellent_bonus: int = Field(default=5, ge=0)
    high_bonus: int = Field(default=3, ge=0)
    moderate_bonus: int = Field(default=1, ge=0)

    @field_validator("moderate_threshold")
    @classmethod
    def validate_threshold_ordering(cls, v: int, info: ValidationInfo) -> int:
        """Validate that thresholds are strictly descending.

        Validation: excellent > high > moderate
        """
        excellent = info.data.get("excellent_threshold", 80)
        high = info.data.get("high_threshold", 60)

        if high >= excellent:
            raise ValueError(
                f"high_threshold ({high}) must be less than "
                f"excellent_threshold ({excellent})"
            )
        if v >= high:
            raise ValueError(
                f"moderate_threshold ({v}) must be less than high_threshold ({high})"
            )

        return v


class HonorConfig(BaseModel):
    """Honor-score recomputation constants."""

    rating_multiplier: int = Field(default=20, gt=0)
    default_rating: float = Field(default=2.5, ge=0.0, le=5.0)
    default_honor_score: int = Field(default=50, ge=0, le=100)


class SampleSupplyConfig(BaseModel):
    """Fallback sample candidate configuration."""

    id_prefix: str = Field(default="sample-user-", min_length=1)
    min_score: int = Field(default=70, ge=0)
    max_score: int = Field(default=99, ge=0, validate_default=True)

    @field_validator("max_score")
    @classmethod
    def validate_score_band(cls, v: int, info: ValidationInfo) -> int:
        """Validate that the score band is not inverted."""
        low = info.data.get("min_score", 70)
        if v < low:
            raise ValueError(f"max_score ({v}) must be >= min_score ({low})")
        return v


class BatchConfig(BaseModel):
    """Batch configuration for bulk snapshot refreshes."""

    refresh_batch_size: int = Field(default=10, gt=0, lt=100)


class MatchingParams(BaseModel):
    """Matching configuration model."""

    scoring: ScoringWeights = Field(default_factory=ScoringWeights)
    reputation: ReputationConfig = Field(default_factory=ReputationConfig)
    honor: HonorConfig = Field(default_factory=HonorConfig)
    sample_supply: SampleSupplyConfig = Field(default_factory=SampleSupplyConfig)
    batch: BatchConfig = Field(default_factory=BatchConfig)
    log_level: str = Field(default="INFO")
    log_file: str = Field(default="logs/skillswap.log")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is valid."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of: {', '.join(valid_levels)}")
        return v.upper()

    @classmethod
    def load(cls, config_path: Path | str | None = None) -> "MatchingParams":
        """Load matching parameters from config file.

        Args:
            config_path: Path to matching_params.json (defaults to config/matching_params.json)

        Returns:
            MatchingParams: Validated configuration

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config validation fails
        """
        if config_path is None:
            config_path = Path("config/matching_params.json")
        else:
            config_path = Path(config_path)

        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}. "
                f"Copy {config_path.stem}.example.json to {config_path.name}"
            )

        with open(config_path, "r", encoding="utf-8") as f:
            config_data = json.load(f)

        return cls(**config_data)
