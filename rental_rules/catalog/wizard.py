"""
Wizard definitions: ordered step rule sets plus a context-wide overlay.
"""

import logging
from collections.abc import Collection, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from rental_rules.core.errors import RuleSetConfigurationError
from rental_rules.core.observability import reset_wizard, set_wizard
from rental_rules.domain.enums import SaveMode
from rental_rules.rules.context import ValidationContext, ValidationResult
from rental_rules.rules.engine import ValidationEngine, validation_engine
from rental_rules.rules.model import RuleSet

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WizardStep:
    number: int
    key: str
    rule_set: RuleSet


class WizardDefinition:
    """
    A multi-step wizard.

    Steps are numbered from 1 in declaration order. Steps without rules
    (review pages) are simply not declared.
    """

    def __init__(
        self,
        name: str,
        steps: Sequence[tuple[str, RuleSet]],
        overlay: RuleSet | None = None,
    ) -> None:
        if not steps:
            raise RuleSetConfigurationError(f"Wizard '{name}' has no steps", details={"wizard": name})
        keys = [key for key, _ in steps]
        duplicates = sorted({k for k in keys if keys.count(k) > 1})
        if duplicates:
            raise RuleSetConfigurationError(
                f"Wizard '{name}' declares duplicate steps", details={"steps": duplicates}
            )
        self.name = name
        self.steps = tuple(
            WizardStep(number=i, key=key, rule_set=rule_set)
            for i, (key, rule_set) in enumerate(steps, start=1)
        )
        self.overlay = overlay

    def __repr__(self) -> str:
        return f"WizardDefinition(name={self.name!r}, steps={[s.key for s in self.steps]!r})"

    def step(self, number_or_key: int | str) -> WizardStep:
        for step in self.steps:
            if step.number == number_or_key or step.key == number_or_key:
                return step
        raise KeyError(number_or_key)

    def rule_sets(self, through_step: int | None = None) -> list[RuleSet]:
        """Step rule sets in order, optionally only up to and including a step."""
        return [
            s.rule_set for s in self.steps if through_step is None or s.number <= through_step
        ]

    def validate(
        self,
        fields: Mapping[str, Any],
        ctx: ValidationContext,
        step: int | str | None = None,
        only: Collection[str] | None = None,
        engine: ValidationEngine = validation_engine,
    ) -> ValidationResult:
        """
        Validate a submission against one step, or the whole wizard.

        Args:
            fields: Submitted field name -> raw value
            ctx: Context snapshot; `ctx.mode` selects draft or strict
            step: Step number or key; None validates every step (final submit)
            only: Evaluate only these fields
            engine: Validation engine to use
        """
        rule_sets = [self.step(step).rule_set] if step is not None else self.rule_sets()
        token = set_wizard(self.name)
        try:
            return engine.validate(fields, ctx, rule_sets, overlay=self.overlay, only=only)
        finally:
            reset_wizard(token)

    def max_valid_step(
        self,
        fields: Mapping[str, Any],
        ctx: ValidationContext,
        requested_step: int,
        engine: ValidationEngine = validation_engine,
    ) -> int:
        """
        Highest step reachable from step 1 with every step valid.

        Used when autosaving a draft: the stored progress never runs ahead of
        what actually validates strictly. Returns 0 when step 1 is invalid.
        """
        strict_ctx = ctx.with_mode(SaveMode.STRICT)
        max_step = 0
        for step in self.steps:
            if step.number > requested_step:
                break
            result = self.validate(fields, strict_ctx, step=step.number, engine=engine)
            if not result.is_valid:
                break
            max_step = step.number

        logger.debug(
            "Max valid step computed",
            extra={"wizard": self.name, "requested_step": requested_step, "max_valid_step": max_step},
        )
        return max_step
