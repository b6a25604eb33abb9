"""
Rule model, composition and evaluation.

Key Components:
- model: FieldRule, RuleSet and requiredness clauses
- requiredness: conditional requiredness resolution
- employment: employment-status branching table
- composer: draft / strict composition of step rule sets
- evaluator: field-by-field evaluation
- engine: validation entry point
"""

from rental_rules.rules.composer import RuleComposer
from rental_rules.rules.context import FieldError, ValidationContext, ValidationResult
from rental_rules.rules.employment import EmploymentBranchResolver
from rental_rules.rules.engine import ValidationEngine, validation_engine
from rental_rules.rules.evaluator import RuleSetEvaluator
from rental_rules.rules.model import (
    ALWAYS,
    NEVER,
    Always,
    FieldConstraints,
    FieldRule,
    IfEmploymentStatus,
    IfEntityType,
    IfEquals,
    IfIn,
    Never,
    RuleSet,
    field_rule,
    if_true,
)
from rental_rules.rules.requiredness import ConditionalRequirednessResolver

__all__ = [
    "ALWAYS",
    "NEVER",
    "Always",
    "ConditionalRequirednessResolver",
    "EmploymentBranchResolver",
    "FieldConstraints",
    "FieldError",
    "FieldRule",
    "IfEmploymentStatus",
    "IfEntityType",
    "IfEquals",
    "IfIn",
    "Never",
    "RuleComposer",
    "RuleSet",
    "RuleSetEvaluator",
    "ValidationContext",
    "ValidationEngine",
    "ValidationResult",
    "field_rule",
    "if_true",
    "validation_engine",
]
