"""
Validation entry point for the HTTP layer.

One call takes a submission through Received -> Composed -> Evaluated ->
Valid | Invalid. The engine holds no per-call state; the caller decides
whether to persist on Valid or surface `field_errors` on Invalid.
"""

import logging
import time
from collections.abc import Collection, Mapping, Sequence
from typing import Any

from rental_rules.core.config import settings
from rental_rules.core.observability import (
    generate_submission_id,
    get_submission_id,
    metrics,
    reset_submission_id,
    set_submission_id,
)
from rental_rules.domain.enums import SaveMode, SubmissionState
from rental_rules.rules.composer import RuleComposer, rule_composer
from rental_rules.rules.context import ValidationContext, ValidationResult
from rental_rules.rules.evaluator import RuleSetEvaluator, rule_set_evaluator
from rental_rules.rules.model import RuleSet

logger = logging.getLogger(__name__)


class ValidationEngine:
    """Composes the effective RuleSet for a submission and evaluates it."""

    def __init__(
        self,
        composer: RuleComposer = rule_composer,
        evaluator: RuleSetEvaluator = rule_set_evaluator,
    ) -> None:
        self.composer = composer
        self.evaluator = evaluator

    def validate(
        self,
        fields: Mapping[str, Any],
        ctx: ValidationContext,
        step_rule_sets: Sequence[RuleSet],
        overlay: RuleSet | None = None,
        only: Collection[str] | None = None,
    ) -> ValidationResult:
        """
        Validate a submission.

        Args:
            fields: Submitted field name -> raw value
            ctx: Context snapshot; `ctx.mode` selects draft or strict composition
            step_rule_sets: Step rule sets in wizard order
            overlay: Context-wide rules merged last (step tracking)
            only: Evaluate only these fields (precognitive validation of
                  the fields a user has touched)

        Returns:
            ValidationResult; empty means Valid
        """
        # A caller-provided id is kept; a generated one is reset on return
        token = None if get_submission_id() else set_submission_id(generate_submission_id())
        try:
            return self._validate(fields, ctx, step_rule_sets, overlay, only)
        finally:
            if token is not None:
                reset_submission_id(token)

    def _validate(
        self,
        fields: Mapping[str, Any],
        ctx: ValidationContext,
        step_rule_sets: Sequence[RuleSet],
        overlay: RuleSet | None,
        only: Collection[str] | None,
    ) -> ValidationResult:
        start_time = time.perf_counter()
        mode = SaveMode(ctx.mode)
        self._transition(SubmissionState.RECEIVED, fields=len(fields), mode=mode.value)

        # Step 1: Compose the effective RuleSet
        rule_set = self.composer.compose(step_rule_sets, mode, overlay)
        self._transition(SubmissionState.COMPOSED, ruleset=rule_set.name, rules=len(rule_set))

        # Step 2: Evaluate field by field
        result = self.evaluator.evaluate(rule_set, fields, ctx, only=only)
        self._transition(SubmissionState.EVALUATED, errors=len(result.errors))

        # Step 3: Settle the outcome
        outcome = SubmissionState.VALID if result.is_valid else SubmissionState.INVALID
        duration = time.perf_counter() - start_time
        self._transition(outcome, duration_ms=round(duration * 1000, 3))

        if not result.is_valid:
            logger.info(
                "Submission invalid: %d error(s) on %s",
                len(result.errors),
                ", ".join(result.field_errors),
                extra={"mode": mode.value, "entity_type": ctx.entity_type.value},
            )

        _record_validation_metrics(mode, outcome, duration, result)
        return result

    def validate_rule_set(
        self,
        fields: Mapping[str, Any],
        ctx: ValidationContext,
        rule_set: RuleSet,
        only: Collection[str] | None = None,
    ) -> ValidationResult:
        """Validate against a single RuleSet, still relaxed in draft mode."""
        return self.validate(fields, ctx, [rule_set], only=only)

    @staticmethod
    def _transition(state: SubmissionState, **extra: Any) -> None:
        logger.debug("Submission %s", state.value, extra={"state": state.value, **extra})


def _record_validation_metrics(
    mode: SaveMode, outcome: SubmissionState, duration: float, result: ValidationResult
) -> None:
    """Record validation outcome, latency and per-kind field errors."""
    if not settings.observability_enabled:
        return

    metrics.validations_total.labels(mode=mode.value, outcome=outcome.value).inc()
    metrics.validation_duration_seconds.labels(mode=mode.value).observe(duration)
    for error in result.errors:
        metrics.field_errors_total.labels(kind=error.kind.value).inc()


validation_engine = ValidationEngine()
