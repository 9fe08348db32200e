"""
Structured Logger Module

Configures structlog for JSON-formatted structured logging with correlation IDs.
Every matching component logs through this module so a single find-matches or
accept request can be traced across the engine, state machine and stores.

Example Usage:
    from skillswap.utils.logger import get_logger

    logger = get_logger(
        correlation_id="a1b2c3d4-e5f6-7890-abcd-ef1234567890",
        phase="ranking",
        component="match_ranking_engine"
    )

    logger.info("Ranking complete", user_id="u-42", match_count=12)
    logger.warning("Falling back to sample matches", reason="profile_not_found")
    logger.error("Snapshot write failed", error="disk full")

Log Levels:
    - DEBUG: Per-candidate scores, store reads/writes
    - INFO: Ranking results, decisions recorded, mutual matches created
    - WARNING: Fallback substitution, sample-candidate interactions
    - ERROR: Store failures surfaced to callers
    - CRITICAL: Unrecoverable failures requiring operator intervention
"""

import logging
import sys
import uuid
from pathlib import Path
from typing import Optional
import structlog
from structlog.types import BindableLogger, EventDict, WrappedLogger


def mask_sensitive(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """
    Processor to mask credentials and contact details in log output.

    Args:
        logger: Logger instance
        method_name: Logging method name
        event_dict: Event dictionary to process

    Returns:
        Event dictionary with sensitive values masked

    Masks:
        - password, token, secret, email, phone fields
        - Replaces values with "***MASKED***"
        - Uses word boundary matching to avoid false positives
    """
    sensitive_fields = {"password", "token", "secret", "email", "phone"}

    for key in list(event_dict.keys()):
        key_lower = key.lower()
        for sensitive in sensitive_fields:
            if (
                key_lower == sensitive
                or key_lower.endswith(f"_{sensitive}")
                or key_lower.endswith(f"-{sensitive}")
                or key_lower.startswith(f"{sensitive}_")
                or key_lower.startswith(f"{sensitive}-")
            ):
                event_dict[key] = "***MASKED***"
                break

    return event_dict


def configure_logging(
    log_file: str = "logs/skillswap.log", log_level: str = "INFO"
) -> None:
    """
    Configure structlog with JSON output and file logging.

    Args:
        log_file: Path to log file (default: "logs/skillswap.log")
        log_level: Logging level (default: "INFO")

    Log Format (JSON):
        {
            "timestamp": "2024-10-06T10:30:45Z",
            "level": "info",
            "correlation_id": "a1b2c3d4-...",
            "phase": "ranking",
            "component": "match_ranking_engine",
            "event": "Ranking complete",
            "match_count": 12
        }
    """
    log_path = Path(log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, log_level.upper()),
        handlers=[logging.FileHandler(log_file), logging.StreamHandler(sys.stdout)],
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            mask_sensitive,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(
    correlation_id: Optional[str] = None,
    phase: Optional[str] = None,
    component: Optional[str] = None,
) -> BindableLogger:
    """
    Get structured logger with bound context.

    Args:
        correlation_id: Correlation ID for request tracing (generates UUID if not provided)
        phase: Processing phase (e.g., "ranking", "connections", "fallback")
        component: Component name (e.g., "match_ranking_engine", "jsonl_store")

    Returns:
        BoundLogger with correlation_id, phase, and component bound to context
    """
    if correlation_id is None:
        correlation_id = str(uuid.uuid4())

    logger = structlog.get_logger()

    if correlation_id:
        logger = logger.bind(correlation_id=correlation_id)
    if phase:
        logger = logger.bind(phase=phase)
    if component:
        logger = logger.bind(component=component)

    return logger


# Initialize logging on module import with default settings
configure_logging()
