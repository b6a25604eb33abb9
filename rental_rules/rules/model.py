"""
Declarative rule model.

A FieldRule describes one wizard field: base type, constraints, the clauses
that make it required, and optional message templates. A RuleSet is a named
bundle of FieldRules, usually one wizard step.

Requiredness clauses combine with OR semantics; an empty clause tuple means
the field is never required. All models are frozen: composing or merging
rule sets always produces new objects.
"""

import re
from collections.abc import Iterable, Iterator, Mapping
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from rental_rules.core.errors import RuleSetConfigurationError
from rental_rules.domain.enums import (
    DataType,
    DateWindow,
    EmploymentStatus,
    EntityType,
    ErrorKind,
    FormatKind,
)
from rental_rules.rules.validator import validate_rule_set

# Form values treated as a checked box / "yes" answer
TRUTHY_FORM_VALUES = frozenset({"1", "true", "on", "yes"})


# ============================================================================
# Requiredness clauses
# ============================================================================


class Always(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["always"] = "always"


class Never(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["never"] = "never"


class IfEquals(BaseModel):
    """Required when a sibling field equals a value."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["if_equals"] = "if_equals"
    field: str
    value: str


class IfIn(BaseModel):
    """Required when a sibling field equals any of several values."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["if_in"] = "if_in"
    field: str
    values: frozenset[str]


class IfEntityType(BaseModel):
    """Required when the submission describes one of the given parties."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["if_entity_type"] = "if_entity_type"
    types: frozenset[EntityType]


class IfEmploymentStatus(BaseModel):
    """Required for the given employment statuses of the given parties."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["if_employment_status"] = "if_employment_status"
    statuses: frozenset[EmploymentStatus]
    entity_types: frozenset[EntityType] = frozenset(EntityType)


Requiredness = Annotated[
    Union[Always, Never, IfEquals, IfIn, IfEntityType, IfEmploymentStatus],
    Field(discriminator="kind"),
]

# Clauses that depend on another submitted field
SIBLING_CLAUSES = (IfEquals, IfIn)

ALWAYS = Always()
NEVER = Never()


def if_true(field: str) -> IfIn:
    """Required when a checkbox-style sibling is ticked."""
    return IfIn(field=field, values=TRUTHY_FORM_VALUES)


# ============================================================================
# Constraints and rules
# ============================================================================


class FieldConstraints(BaseModel):
    """
    Constraints applied to a non-empty, type-coerced value.

    `min`/`max` bound numbers (and string length for string fields),
    `length` caps the number of characters, `exact_length` fixes it.
    """

    model_config = ConfigDict(frozen=True)

    min: float | None = None
    max: float | None = None
    length: int | None = None
    exact_length: int | None = None
    enum_values: tuple[str, ...] | None = None
    pattern: str | None = None

    # Country-aware format; the country or dial code is read from
    # `format_source` when submitted, otherwise from the context
    format: FormatKind | None = None
    format_source: str | None = None

    date_window: DateWindow | None = None
    min_age_years: int | None = None

    # Boolean that must be true (declarations, consents)
    accepted: bool = False

    # Allowed values keyed by a sibling value, e.g. subtype by property type
    enum_depends_on: str | None = None
    enum_map: dict[str, tuple[str, ...]] | None = None

    @model_validator(mode="after")
    def check_consistency(self) -> "FieldConstraints":
        if self.min is not None and self.max is not None and self.min > self.max:
            raise RuleSetConfigurationError(
                f"min ({self.min}) is greater than max ({self.max})",
                details={"min": self.min, "max": self.max},
            )
        for name in ("length", "exact_length", "min_age_years"):
            value = getattr(self, name)
            if value is not None and value < 0:
                raise RuleSetConfigurationError(
                    f"{name} cannot be negative", details={name: value}
                )
        if self.pattern is not None:
            try:
                re.compile(self.pattern)
            except re.error as e:
                raise RuleSetConfigurationError(
                    f"Invalid pattern: {e}", details={"pattern": self.pattern}
                ) from e
        if self.enum_values is not None and not self.enum_values:
            raise RuleSetConfigurationError("enum_values cannot be empty")
        if (self.enum_depends_on is None) != (self.enum_map is None):
            raise RuleSetConfigurationError(
                "enum_depends_on and enum_map must be declared together",
                details={"enum_depends_on": self.enum_depends_on},
            )
        if self.format_source is not None and self.format is None:
            raise RuleSetConfigurationError(
                "format_source requires a format", details={"format_source": self.format_source}
            )
        return self


class FieldRule(BaseModel):
    """A constraint on one wizard field."""

    model_config = ConfigDict(frozen=True)

    field: str
    type: DataType = DataType.STRING
    constraints: FieldConstraints = FieldConstraints()
    requiredness: tuple[Requiredness, ...] = ()
    error_messages: dict[ErrorKind, str] = {}
    label: str | None = None

    @model_validator(mode="after")
    def check_rule(self) -> "FieldRule":
        if not self.field or not self.field.strip():
            raise RuleSetConfigurationError("Field name cannot be empty")
        c = self.constraints
        if self.type == DataType.ENUM and c.enum_values is None and c.enum_map is None:
            raise RuleSetConfigurationError(
                f"Enum field '{self.field}' declares no enum values",
                details={"field": self.field},
            )
        if c.accepted and self.type != DataType.BOOLEAN:
            raise RuleSetConfigurationError(
                f"Field '{self.field}' uses accepted but is not boolean",
                details={"field": self.field, "type": self.type.value},
            )
        if (c.date_window or c.min_age_years is not None) and self.type != DataType.DATE:
            raise RuleSetConfigurationError(
                f"Field '{self.field}' uses a date constraint but is not a date",
                details={"field": self.field, "type": self.type.value},
            )
        return self

    @property
    def display_label(self) -> str:
        """Human label used in default messages ("employer_name" -> "Employer name")."""
        if self.label:
            return self.label
        return self.field.replace("_", " ").strip().capitalize()

    @property
    def is_optional(self) -> bool:
        return all(isinstance(clause, Never) for clause in self.requiredness)

    def referenced_fields(self) -> set[str]:
        """Sibling fields this rule reads during evaluation."""
        refs = {c.field for c in self.requiredness if isinstance(c, SIBLING_CLAUSES)}
        if self.constraints.format_source:
            refs.add(self.constraints.format_source)
        if self.constraints.enum_depends_on:
            refs.add(self.constraints.enum_depends_on)
        return refs

    def with_requiredness(self, *clauses: Requiredness) -> "FieldRule":
        return self.model_copy(update={"requiredness": tuple(clauses)})


def field_rule(
    field: str,
    type: DataType = DataType.STRING,
    *,
    required: bool | Requiredness | Iterable[Requiredness] = False,
    label: str | None = None,
    messages: dict[ErrorKind, str] | None = None,
    **constraints: object,
) -> FieldRule:
    """
    Shorthand for catalog definitions.

    `required=True` means always required; a clause or an iterable of
    clauses is used as is. Remaining keyword arguments are constraints.

    Example:
        >>> field_rule("lease_duration_months", DataType.INTEGER, required=True, min=1, max=60)
    """
    if required is True:
        clauses: tuple[Requiredness, ...] = (ALWAYS,)
    elif required is False:
        clauses = ()
    elif isinstance(required, BaseModel):
        clauses = (required,)
    else:
        clauses = tuple(required)
    return FieldRule(
        field=field,
        type=type,
        constraints=FieldConstraints(**constraints),
        requiredness=clauses,
        error_messages=messages or {},
        label=label,
    )


# ============================================================================
# RuleSet
# ============================================================================


class RuleSet(Mapping[str, FieldRule]):
    """
    Named, ordered mapping from field name to FieldRule.

    Construction fails fast on duplicate fields and on clauses or constraints
    that reference fields outside the set. Equality ignores insertion order.
    """

    def __init__(self, name: str, rules: Iterable[FieldRule] = ()) -> None:
        self.name = name
        ordered: dict[str, FieldRule] = {}
        for rule in rules:
            if rule.field in ordered:
                raise RuleSetConfigurationError(
                    f"Duplicate field '{rule.field}' in RuleSet '{name}'",
                    details={"ruleset": name, "field": rule.field},
                )
            ordered[rule.field] = rule
        validate_rule_set(name, ordered)
        self._rules = ordered

    def __getitem__(self, field: str) -> FieldRule:
        return self._rules[field]

    def __iter__(self) -> Iterator[str]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RuleSet):
            return NotImplemented
        return self.name == other.name and self._rules == other._rules

    def __hash__(self) -> int:
        return hash((self.name, frozenset(self._rules)))

    def __repr__(self) -> str:
        return f"RuleSet(name={self.name!r}, fields={list(self._rules)!r})"

    @property
    def rules(self) -> tuple[FieldRule, ...]:
        return tuple(self._rules.values())

    def fields(self) -> list[str]:
        return list(self._rules)

    def merge(self, other: "RuleSet") -> "RuleSet":
        """
        Combine two rule sets; for shared fields the right-hand rule wins whole.

        Field order follows `self`, with fields only in `other` appended.
        """
        merged = dict(self._rules)
        merged.update(other._rules)
        return RuleSet(f"{self.name}+{other.name}", merged.values())

    def with_rule(self, rule: FieldRule) -> "RuleSet":
        """Copy of this set with one rule added or replaced."""
        updated = dict(self._rules)
        updated[rule.field] = rule
        return RuleSet(self.name, updated.values())

    def without(self, *fields: str) -> "RuleSet":
        """Copy of this set without the named fields."""
        return RuleSet(self.name, (r for f, r in self._rules.items() if f not in fields))

    def renamed(self, name: str) -> "RuleSet":
        return RuleSet(name, self._rules.values())
