"""
Validation rule composition and cross-locale format checking for the
rental application and property listing wizards.

Usage:
    from rental_rules import APPLICATION_WIZARD, ValidationContext

    ctx = ValidationContext.from_submission(fields, entity_type="tenant", mode="strict")
    result = APPLICATION_WIZARD.validate(fields, ctx, step="financial")
    if not result.is_valid:
        return 422, result.field_errors
"""

from rental_rules.catalog import APPLICATION_WIZARD, PROPERTY_WIZARD, WizardDefinition
from rental_rules.rules import RuleSet, ValidationContext, ValidationResult, validation_engine

__all__ = [
    "APPLICATION_WIZARD",
    "PROPERTY_WIZARD",
    "RuleSet",
    "ValidationContext",
    "ValidationResult",
    "WizardDefinition",
    "validation_engine",
]
