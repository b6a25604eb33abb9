"""
Field-by-field evaluation of a composed RuleSet.

Evaluation order for one field:
1. Empty value (None, blank string, empty list): REQUIRED or
   DEPENDENT_REQUIREMENT_UNMET when a requiredness clause holds, else valid.
2. Type coercion; a TYPE_MISMATCH stops further checks on the field.
3. Independent constraint groups, each reporting at most one message:
   - range: min/max, length, exact_length, date window, minimum age
   - enum: enum values, dependent enum values, accepted
   - pattern: regular expression, then country-aware format

Submitted fields without a rule are ignored. Malformed user input never
raises; every failure becomes a ValidationResult entry.
"""

import math
import re
from collections.abc import Collection, Mapping
from datetime import date, datetime
from typing import Any

from rental_rules.domain.enums import DataType, DateWindow, ErrorKind, FormatKind
from rental_rules.locale.phone import PhoneRegionResolver, phone_region_resolver
from rental_rules.locale.postal_codes import CountryPatternRegistry, postal_code_registry
from rental_rules.rules.context import ValidationContext, ValidationResult
from rental_rules.rules.model import FieldRule, IfEquals, IfIn, RuleSet
from rental_rules.rules.requiredness import (
    ConditionalRequirednessResolver,
    requiredness_resolver,
)

_INTEGER_PATTERN = re.compile(r"^[+-]?\d+$")
_TRUE_VALUES = frozenset({"true", "1", "on", "yes"})
_FALSE_VALUES = frozenset({"false", "0", "off", "no"})

DEFAULT_MESSAGES: dict[str, str] = {
    "required": "{label} is required",
    "required_if": "{label} is required when {other} is {value}",
    "required_if_in": "{label} is required for the selected {other}",
    "type.string": "{label} must be text",
    "type.number": "{label} must be a number",
    "type.integer": "{label} must be a whole number",
    "type.boolean": "{label} must be true or false",
    "type.date": "{label} must be a valid date",
    "type.enum": "{label} is not a valid option",
    "min.number": "{label} must be at least {min}",
    "max.number": "{label} cannot exceed {max}",
    "min.string": "{label} must be at least {min} characters",
    "max.string": "{label} cannot exceed {max} characters",
    "length": "{label} cannot exceed {length} characters",
    "exact_length": "{label} must be exactly {exact_length} characters",
    "date.past": "{label} cannot be in the future",
    "date.future": "{label} must be in the future",
    "date.today_or_future": "{label} cannot be in the past",
    "min_age": "You must be at least {min_age_years} years old",
    "enum": "{label} is not a valid option",
    "enum_depends_on": "{label} is not valid for the selected {other}",
    "accepted": "{label} must be accepted",
    "pattern": "{label} format is invalid",
    "format.postal_code": "Invalid postal code format for selected country",
    "format.phone_number": "Please enter a valid phone number",
}


class _TemplateParams(dict):
    """Leaves unknown placeholders untouched instead of raising."""

    def __missing__(self, key: str) -> str:
        return "{" + key + "}"


def _format_number(value: float | None) -> str:
    if value is None:
        return ""
    if isinstance(value, int):
        return str(value)
    return str(int(value)) if value.is_integer() else str(value)


def _label_for(field: str) -> str:
    return field.replace("_", " ").strip().lower()


def is_empty_value(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, dict, set)):
        return len(value) == 0
    return False


class _Mismatch:
    pass


_MISMATCH = _Mismatch()


def coerce_value(data_type: DataType, value: Any) -> Any:
    """
    Coerce a raw form value to a field's base type.

    Returns the coerced value, or the module-level mismatch sentinel.
    """
    if data_type in (DataType.STRING, DataType.ENUM):
        if isinstance(value, str):
            return value.strip()
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            try:
                return _format_number(value)
            except ValueError:
                # Beyond the interpreter's int-to-str digit limit
                return _MISMATCH
        return _MISMATCH

    if data_type == DataType.NUMBER:
        if isinstance(value, bool):
            return _MISMATCH
        try:
            if isinstance(value, (int, float)):
                number = float(value)
            elif isinstance(value, str):
                number = float(value.strip())
            else:
                return _MISMATCH
        except (OverflowError, ValueError):
            return _MISMATCH
        return number if math.isfinite(number) else _MISMATCH

    if data_type == DataType.INTEGER:
        if isinstance(value, bool):
            return _MISMATCH
        if isinstance(value, int):
            return value
        if isinstance(value, float):
            return int(value) if value.is_integer() else _MISMATCH
        if isinstance(value, str) and _INTEGER_PATTERN.match(value.strip()):
            try:
                return int(value.strip())
            except ValueError:
                return _MISMATCH
        return _MISMATCH

    if data_type == DataType.BOOLEAN:
        if isinstance(value, bool):
            return value
        if isinstance(value, int) and value in (0, 1):
            return bool(value)
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in _TRUE_VALUES:
                return True
            if lowered in _FALSE_VALUES:
                return False
        return _MISMATCH

    if data_type == DataType.DATE:
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        if isinstance(value, str):
            text = value.strip()
            try:
                return date.fromisoformat(text)
            except ValueError:
                pass
            try:
                return datetime.fromisoformat(text).date()
            except ValueError:
                return _MISMATCH
        return _MISMATCH

    return _MISMATCH


def _years_before(reference: date, years: int) -> date:
    try:
        return reference.replace(year=reference.year - years)
    except ValueError:
        # 29 February in a non-leap target year
        return reference.replace(year=reference.year - years, day=28)


class RuleSetEvaluator:
    """
    Evaluates submitted values against a RuleSet.

    Holds only read-only collaborators; one instance serves any number of
    concurrent calls.
    """

    def __init__(
        self,
        requiredness: ConditionalRequirednessResolver = requiredness_resolver,
        postal_codes: CountryPatternRegistry = postal_code_registry,
        phones: PhoneRegionResolver = phone_region_resolver,
    ) -> None:
        self.requiredness = requiredness
        self.postal_codes = postal_codes
        self.phones = phones

    def evaluate(
        self,
        rule_set: RuleSet,
        fields: Mapping[str, Any],
        ctx: ValidationContext,
        only: Collection[str] | None = None,
    ) -> ValidationResult:
        """
        Evaluate every rule of the set (or the `only` subset) against `fields`.

        Args:
            rule_set: Composed RuleSet
            fields: Submitted field name -> raw value
            ctx: Validation context snapshot
            only: Restrict evaluation to these fields (live validation of
                  touched fields). Names without a rule are ignored.

        Returns:
            ValidationResult with errors in rule order
        """
        result = ValidationResult()
        for field, rule in rule_set.items():
            if only is not None and field not in only:
                continue
            self._evaluate_field(rule, fields.get(field), ctx, result)
        return result

    def _evaluate_field(
        self, rule: FieldRule, value: Any, ctx: ValidationContext, result: ValidationResult
    ) -> None:
        # 1. Requiredness
        if is_empty_value(value):
            clause = self.requiredness.satisfied_clause(rule, ctx)
            if clause is None:
                return
            if isinstance(clause, IfEquals):
                kind = ErrorKind.DEPENDENT_REQUIREMENT_UNMET
                message = self._message(
                    rule, kind, "required_if", other=_label_for(clause.field), value=clause.value
                )
            elif isinstance(clause, IfIn):
                kind = ErrorKind.DEPENDENT_REQUIREMENT_UNMET
                message = self._message(rule, kind, "required_if_in", other=_label_for(clause.field))
            else:
                kind = ErrorKind.REQUIRED
                message = self._message(rule, kind, "required")
            result.add(rule.field, kind, message)
            return

        # 2. Type
        coerced = coerce_value(rule.type, value)
        if coerced is _MISMATCH:
            result.add(
                rule.field,
                ErrorKind.TYPE_MISMATCH,
                self._message(rule, ErrorKind.TYPE_MISMATCH, f"type.{rule.type.value}"),
            )
            return

        # 3. Independent constraint groups
        range_key = self._check_range(rule, coerced, ctx)
        if range_key:
            result.add(
                rule.field,
                ErrorKind.OUT_OF_RANGE,
                self._message(rule, ErrorKind.OUT_OF_RANGE, range_key),
            )

        enum_key = self._check_enum(rule, coerced, ctx)
        if enum_key:
            other = rule.constraints.enum_depends_on
            result.add(
                rule.field,
                ErrorKind.ENUM_MISMATCH,
                self._message(
                    rule, ErrorKind.ENUM_MISMATCH, enum_key, other=_label_for(other or "")
                ),
            )

        pattern_key = self._check_pattern(rule, coerced, ctx)
        if pattern_key:
            result.add(
                rule.field,
                ErrorKind.PATTERN_MISMATCH,
                self._message(rule, ErrorKind.PATTERN_MISMATCH, pattern_key),
            )

    def _check_range(self, rule: FieldRule, value: Any, ctx: ValidationContext) -> str | None:
        c = rule.constraints
        if rule.type in (DataType.NUMBER, DataType.INTEGER):
            if c.min is not None and value < c.min:
                return "min.number"
            if c.max is not None and value > c.max:
                return "max.number"
            return None

        if rule.type in (DataType.STRING, DataType.ENUM):
            size = len(value)
            if c.exact_length is not None and size != c.exact_length:
                return "exact_length"
            if c.length is not None and size > c.length:
                return "length"
            if c.min is not None and size < c.min:
                return "min.string"
            if c.max is not None and size > c.max:
                return "max.string"
            return None

        if rule.type == DataType.DATE:
            today = ctx.reference_date()
            if c.date_window == DateWindow.PAST and value > today:
                return "date.past"
            if c.date_window == DateWindow.FUTURE and value <= today:
                return "date.future"
            if c.date_window == DateWindow.TODAY_OR_FUTURE and value < today:
                return "date.today_or_future"
            if c.min_age_years is not None and value > _years_before(today, c.min_age_years):
                return "min_age"
        return None

    def _check_enum(self, rule: FieldRule, value: Any, ctx: ValidationContext) -> str | None:
        c = rule.constraints
        if rule.type == DataType.BOOLEAN:
            return "accepted" if c.accepted and value is not True else None

        if c.enum_values is not None and str(value) not in c.enum_values:
            return "enum"
        if c.enum_depends_on is not None and c.enum_map is not None:
            parent = ctx.sibling(c.enum_depends_on)
            # Missing or unknown parent values are reported on the parent field
            allowed = c.enum_map.get(parent) if parent else None
            if allowed is not None and str(value) not in allowed:
                return "enum_depends_on"
        return None

    def _check_pattern(self, rule: FieldRule, value: Any, ctx: ValidationContext) -> str | None:
        c = rule.constraints
        if c.pattern is None and c.format is None:
            return None
        text = value if isinstance(value, str) else str(value)

        if c.pattern is not None and re.fullmatch(c.pattern, text) is None:
            return "pattern"

        if c.format == FormatKind.POSTAL_CODE:
            country = (ctx.sibling(c.format_source) if c.format_source else None) or ctx.country_code
            # No country selected yet: the country field carries its own requiredness
            if country and not self.postal_codes.matches(country, text):
                return "format.postal_code"
        elif c.format == FormatKind.PHONE_NUMBER:
            dial_code = (ctx.sibling(c.format_source) if c.format_source else None) or ctx.dial_code
            if not self.phones.validate(text, dial_code, ctx.default_phone_region):
                return "format.phone_number"
        return None

    def _message(self, rule: FieldRule, kind: ErrorKind, key: str, **params: Any) -> str:
        """Rule template for the kind when declared, otherwise the default for `key`."""
        template = rule.error_messages.get(kind) or DEFAULT_MESSAGES[key]
        c = rule.constraints
        values = _TemplateParams(
            label=rule.display_label,
            min=_format_number(c.min),
            max=_format_number(c.max),
            length=c.length,
            exact_length=c.exact_length,
            min_age_years=c.min_age_years,
            **params,
        )
        return template.format_map(values)


rule_set_evaluator = RuleSetEvaluator()
