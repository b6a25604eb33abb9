"""
Conditional requiredness resolution.

A field is required when any of its clauses is satisfied by the context.
The first satisfied clause also decides the error kind: sibling-value
clauses report DEPENDENT_REQUIREMENT_UNMET, everything else REQUIRED.
"""

from rental_rules.domain.enums import ErrorKind
from rental_rules.rules.context import ValidationContext
from rental_rules.rules.model import (
    SIBLING_CLAUSES,
    Always,
    FieldRule,
    IfEmploymentStatus,
    IfEntityType,
    IfEquals,
    IfIn,
    Never,
    Requiredness,
)


class ConditionalRequirednessResolver:
    """Evaluates requiredness clauses against a ValidationContext. Stateless."""

    def is_required(self, rule: FieldRule, ctx: ValidationContext) -> bool:
        return self.satisfied_clause(rule, ctx) is not None

    def satisfied_clause(self, rule: FieldRule, ctx: ValidationContext) -> Requiredness | None:
        """First clause of the rule satisfied by the context, or None."""
        for clause in rule.requiredness:
            if self.clause_satisfied(clause, ctx):
                return clause
        return None

    def requirement_kind(self, rule: FieldRule, ctx: ValidationContext) -> ErrorKind | None:
        """Error kind reported for an empty value, or None when optional."""
        clause = self.satisfied_clause(rule, ctx)
        if clause is None:
            return None
        if isinstance(clause, SIBLING_CLAUSES):
            return ErrorKind.DEPENDENT_REQUIREMENT_UNMET
        return ErrorKind.REQUIRED

    def clause_satisfied(self, clause: Requiredness, ctx: ValidationContext) -> bool:
        if isinstance(clause, Always):
            return True
        if isinstance(clause, Never):
            return False
        if isinstance(clause, IfEquals):
            # Absent sibling is treated as not equal
            return ctx.sibling(clause.field) == clause.value
        if isinstance(clause, IfIn):
            return ctx.sibling(clause.field) in clause.values
        if isinstance(clause, IfEntityType):
            return ctx.entity_type in clause.types
        if isinstance(clause, IfEmploymentStatus):
            status = ctx.effective_employment_status()
            return (
                status is not None
                and status in clause.statuses
                and ctx.entity_type in clause.entity_types
            )
        raise TypeError(f"Unsupported requiredness clause: {type(clause).__name__}")


requiredness_resolver = ConditionalRequirednessResolver()
