"""
Observability module for the rental rules engine.

Provides:
- Structured logging with JSON format and correlation IDs
- Submission correlation ID generation and propagation
- Prometheus metrics collection (validation, manifest compilation)

Usage:
    from rental_rules.core.observability import (
        configure_structured_logging,
        get_submission_id,
        set_submission_id,
        metrics,
    )
"""

import json
import logging
import uuid
from contextvars import ContextVar, Token
from datetime import UTC, datetime

from prometheus_client import CollectorRegistry, Counter, Histogram, generate_latest

# ============================================================================
# Context Variables for Submission Tracking
# ============================================================================

# Correlation ID - links all logs for a single validation call
_submission_id_ctx: ContextVar[str] = ContextVar("submission_id", default="")

# Wizard name - which wizard the submission belongs to
_wizard_ctx: ContextVar[str] = ContextVar("wizard", default="")


def generate_submission_id() -> str:
    """Generate a unique submission ID for correlation."""
    return str(uuid.uuid4())


def get_submission_id() -> str:
    """Get the current submission ID from context."""
    return _submission_id_ctx.get()


def set_submission_id(submission_id: str) -> Token[str]:
    """Set the submission ID for the current context."""
    return _submission_id_ctx.set(submission_id)


def reset_submission_id(token: Token[str]) -> None:
    """Restore the submission ID that was current before `set_submission_id`."""
    _submission_id_ctx.reset(token)


def get_wizard() -> str:
    """Get the current wizard name from context."""
    return _wizard_ctx.get()


def set_wizard(wizard: str) -> Token[str]:
    """Set the wizard name for the current context."""
    return _wizard_ctx.set(wizard)


def reset_wizard(token: Token[str]) -> None:
    """Restore the wizard name that was current before `set_wizard`."""
    _wizard_ctx.reset(token)


# ============================================================================
# Structured Logging Configuration
# ============================================================================

_RESERVED_RECORD_KEYS = frozenset(
    {
        "name",
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "taskName",
        "getMessage",
        "exc_info",
        "exc_text",
        "stack_info",
    }
)


class StructuredFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.

    Outputs logs as JSON with standard fields:
    - timestamp: ISO 8601 format
    - level: Log level
    - logger: Logger name
    - message: Log message
    - submission_id: Correlation ID (if available)
    - wizard: Wizard name (if available)
    - extra: Any additional context from logging.extra
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        submission_id = get_submission_id()
        if submission_id:
            log_entry["submission_id"] = submission_id

        wizard = get_wizard()
        if wizard:
            log_entry["wizard"] = wizard

        if record.exc_info:
            log_entry["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
            }

        log_entry["file"] = record.pathname
        log_entry["line"] = record.lineno
        log_entry["function"] = record.funcName

        # logger.info("msg", extra={"key": "value"}) lands on the record
        extra_keys = {
            k: v for k, v in record.__dict__.items() if k not in _RESERVED_RECORD_KEYS
        }
        if extra_keys:
            log_entry["extra"] = extra_keys

        return json.dumps(log_entry, default=str)


def configure_structured_logging(level: str = "INFO") -> None:
    """
    Configure root logger with structured JSON formatting.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    handler = logging.StreamHandler()
    handler.setFormatter(StructuredFormatter())
    root_logger.addHandler(handler)


# ============================================================================
# Prometheus Metrics
# ============================================================================

# Custom registry to avoid conflicts with the embedding application's metrics
_registry = CollectorRegistry()


class Metrics:
    """
    Centralized metrics collection for the engine.

    Metrics groups:
    - Validation: outcome counts, latency, per-kind field errors
    - Compiler: client manifest compilations
    """

    def __init__(self, registry: CollectorRegistry) -> None:
        self.registry = registry

        # -------------------------------------------------------------------
        # Validation Metrics
        # -------------------------------------------------------------------

        self.validations_total = Counter(
            "rental_rules_validations_total",
            "Total validation calls",
            ["mode", "outcome"],
            registry=self.registry,
        )

        # Validation is pure computation; buckets sit in the microsecond range
        self.validation_duration_seconds = Histogram(
            "rental_rules_validation_duration_seconds",
            "Validation latency in seconds",
            ["mode"],
            buckets=(0.0001, 0.0005, 0.001, 0.0025, 0.005, 0.01, 0.025, 0.05, 0.1),
            registry=self.registry,
        )

        self.field_errors_total = Counter(
            "rental_rules_field_errors_total",
            "Total field errors reported",
            ["kind"],
            registry=self.registry,
        )

        # -------------------------------------------------------------------
        # Compiler Metrics
        # -------------------------------------------------------------------

        self.manifest_compilations_total = Counter(
            "rental_rules_manifest_compilations_total",
            "Total client manifest compilations",
            ["status"],
            registry=self.registry,
        )


# Global metrics instance
metrics = Metrics(_registry)


def render_metrics() -> bytes:
    """Render the engine registry in Prometheus text exposition format."""
    return generate_latest(_registry)
