"""
Exceptions for the rental rules engine.

Malformed user input never raises: it becomes a ValidationResult entry.
These exceptions are reserved for programmer mistakes in rule definitions
and for manifest compilation, and are expected to surface at import or
composition time rather than during request validation.
"""

from typing import Any


class RentalRulesError(Exception):
    """Base exception for all rule engine errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class RuleSetConfigurationError(RentalRulesError):
    """
    Raised when a FieldRule or RuleSet is defined incorrectly.

    Examples:
    - Conditional clause referencing a field missing from the RuleSet
    - Duplicate field name inside one RuleSet
    - Enum field without enum values
    - Pattern that is not a valid regular expression
    - min greater than max
    """

    pass


class CompilationError(RentalRulesError):
    """
    Raised when a client manifest cannot be produced.

    Examples:
    - Wizard without steps
    - Pattern that cannot be expressed for the client form layer
    """

    pass
