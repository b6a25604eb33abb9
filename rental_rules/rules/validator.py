"""
RuleSet reference validation.

Runs once when a RuleSet is constructed and checks that every field a rule
reads during evaluation is declared in the same set:
- IfEquals / IfIn clauses point at a sibling field of the set
- IfEquals / IfIn values are legal for an enum sibling
- format_source and enum_depends_on point at a sibling field
- enum_map keys are legal values of the field they depend on

A failure here is a programmer mistake in a rule definition. It surfaces at
import or composition time, never while validating a submission.
"""

from collections.abc import Mapping
from typing import Any

from rental_rules.core.errors import RuleSetConfigurationError

_SIBLING_CLAUSE_KINDS = ("if_equals", "if_in")


def validate_rule_set(name: str, rules: Mapping[str, Any]) -> None:
    """
    Validate the sibling references of every rule in a RuleSet.

    Args:
        name: RuleSet name (for error reporting)
        rules: Mapping of field name -> FieldRule

    Raises:
        RuleSetConfigurationError: If a rule references a field outside the set,
                                   or an enum sibling with an impossible value
    """
    for field, rule in rules.items():
        path = f"{name}.{field}"
        for i, clause in enumerate(rule.requiredness):
            if clause.kind in _SIBLING_CLAUSE_KINDS:
                _validate_sibling_clause(clause, rules, f"{path}.requiredness[{i}]")

        constraints = rule.constraints
        if constraints.format_source is not None:
            _require_sibling(
                constraints.format_source, rules, f"{path}.constraints.format_source"
            )
        if constraints.enum_depends_on is not None:
            _require_sibling(
                constraints.enum_depends_on, rules, f"{path}.constraints.enum_depends_on"
            )
            _validate_enum_map_keys(
                constraints.enum_map, rules[constraints.enum_depends_on], path
            )


def _require_sibling(field: str, rules: Mapping[str, Any], path: str) -> None:
    if field not in rules:
        raise RuleSetConfigurationError(
            f"Reference to unknown field '{field}' at {path}",
            details={"path": path, "field": field, "known_fields": sorted(rules)},
        )


def _validate_sibling_clause(clause: Any, rules: Mapping[str, Any], path: str) -> None:
    """
    Validate an IfEquals / IfIn clause.

    The referenced sibling must exist. When the sibling is an enum with a
    fixed value list, every compared value must be one of those values,
    otherwise the clause could never be satisfied.
    """
    _require_sibling(clause.field, rules, f"{path}.field")

    sibling = rules[clause.field]
    allowed = sibling.constraints.enum_values
    if not allowed:
        return

    compared = [clause.value] if clause.kind == "if_equals" else sorted(clause.values)
    unknown = [v for v in compared if v not in allowed]
    if unknown:
        raise RuleSetConfigurationError(
            f"Clause at {path} compares '{clause.field}' with values outside its enum",
            details={"path": path, "values": unknown, "allowed": list(allowed)},
        )


def _validate_enum_map_keys(
    enum_map: Mapping[str, Any] | None, parent: Any, path: str
) -> None:
    """Every enum_map key must be a legal value of the parent enum."""
    allowed = parent.constraints.enum_values
    if not enum_map or not allowed:
        return

    unknown = sorted(k for k in enum_map if k not in allowed)
    if unknown:
        raise RuleSetConfigurationError(
            f"enum_map at {path} has keys outside '{parent.field}' values",
            details={"path": path, "keys": unknown, "allowed": list(allowed)},
        )
