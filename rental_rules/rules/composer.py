"""
Rule composition across wizard steps and save modes.

STRICT folds the step rule sets left to right with `RuleSet.merge`, so a
later step overrides an earlier one field by field. DRAFT keeps only the
base type of every field: autosaving partial work must never fail because
the wizard is incomplete. The overlay (step tracking and similar metadata)
is merged last in both modes.
"""

import logging
from collections.abc import Sequence

from rental_rules.domain.enums import DataType, SaveMode
from rental_rules.rules.model import FieldRule, RuleSet

logger = logging.getLogger(__name__)


def _draft_rule(rule: FieldRule) -> FieldRule:
    """Type-only copy of a rule; enums relax to strings."""
    draft_type = DataType.STRING if rule.type == DataType.ENUM else rule.type
    return FieldRule(
        field=rule.field,
        type=draft_type,
        label=rule.label,
        error_messages=rule.error_messages,
    )


class RuleComposer:
    """Builds the effective RuleSet for a submission. Stateless and deterministic."""

    def compose(
        self,
        step_rule_sets: Sequence[RuleSet],
        mode: SaveMode,
        overlay: RuleSet | None = None,
    ) -> RuleSet:
        """
        Compose step rule sets into one effective RuleSet.

        Args:
            step_rule_sets: Step rule sets in wizard order
            mode: DRAFT for autosave, STRICT for precognition and submission
            overlay: Context-wide rules applied last regardless of mode

        Returns:
            New RuleSet; inputs are never modified
        """
        folded = self.fold(step_rule_sets)

        if SaveMode(mode) == SaveMode.DRAFT:
            composed = RuleSet(f"draft:{folded.name}", (_draft_rule(r) for r in folded.rules))
        else:
            composed = folded

        if overlay is not None:
            composed = composed.merge(overlay)

        logger.debug(
            "Composed rule set",
            extra={
                "ruleset": composed.name,
                "mode": SaveMode(mode).value,
                "steps": len(step_rule_sets),
                "fields": len(composed),
            },
        )
        return composed

    def fold(self, step_rule_sets: Sequence[RuleSet]) -> RuleSet:
        """Left fold with merge; an empty sequence yields an empty set."""
        if not step_rule_sets:
            return RuleSet("empty")
        result = step_rule_sets[0]
        for rule_set in step_rule_sets[1:]:
            result = result.merge(rule_set)
        return result


rule_composer = RuleComposer()
