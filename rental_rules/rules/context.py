"""
Per-call validation inputs and outputs.

ValidationContext is a read-only snapshot built fresh for each submission.
ValidationResult collects per-field errors; an empty result means valid.
"""

from collections.abc import Mapping
from datetime import date
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from rental_rules.domain.enums import EmploymentStatus, EntityType, ErrorKind, SaveMode


def normalize_form_value(value: Any) -> str | None:
    """
    Normalize a raw sibling value for comparison.

    Strings are trimmed, booleans become "true"/"false", numbers their
    string form. Blank strings and structured values compare as absent.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        try:
            return str(value)
        except ValueError:
            # Beyond the interpreter's int-to-str digit limit
            return None
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return None


class ValidationContext(BaseModel):
    """
    Declared context of one submission.

    `sibling_values` holds the submitted field map; conditional requiredness
    and format checks read other fields from it.
    """

    model_config = ConfigDict(frozen=True)

    entity_type: EntityType = EntityType.TENANT
    mode: SaveMode = SaveMode.STRICT
    country_code: str | None = None
    dial_code: str | None = None
    employment_status: str | None = None
    sibling_values: Mapping[str, Any] = Field(default_factory=dict)
    wizard_step: int | None = None
    default_phone_region: str | None = None
    # Reference date for date windows; today when unset
    today: date | None = None

    @classmethod
    def from_submission(cls, fields: Mapping[str, Any], **kwargs: Any) -> "ValidationContext":
        """
        Snapshot a submitted field map.

        The employment status defaults to the submitted `employment_status`
        value when not given explicitly.
        """
        kwargs.setdefault("employment_status", normalize_form_value(fields.get("employment_status")))
        return cls(sibling_values=dict(fields), **kwargs)

    def sibling(self, field: str) -> str | None:
        return normalize_form_value(self.sibling_values.get(field))

    def effective_employment_status(self) -> EmploymentStatus | None:
        """
        Declared employment status, falling back to the submitted value.

        Matches enum values exactly, as the enum check on the field does, so a
        status the field rejects never selects an employment branch.
        """
        raw = self.employment_status or self.sibling("employment_status")
        if not raw:
            return None
        try:
            return EmploymentStatus(raw.strip())
        except ValueError:
            return None

    def reference_date(self) -> date:
        return self.today or date.today()

    def with_mode(self, mode: SaveMode) -> "ValidationContext":
        return self.model_copy(update={"mode": mode})


class FieldError(BaseModel):
    model_config = ConfigDict(frozen=True)

    field: str
    kind: ErrorKind
    message: str


class ValidationResult(BaseModel):
    """
    Outcome of one validation call.

    Errors keep evaluation order. `field_errors` is the wire shape handed to
    the HTTP layer: field name -> list of messages.
    """

    errors: list[FieldError] = Field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    @property
    def field_errors(self) -> dict[str, list[str]]:
        grouped: dict[str, list[str]] = {}
        for error in self.errors:
            grouped.setdefault(error.field, []).append(error.message)
        return grouped

    def add(self, field: str, kind: ErrorKind, message: str) -> None:
        self.errors.append(FieldError(field=field, kind=kind, message=message))

    def kinds_for(self, field: str) -> list[ErrorKind]:
        return [e.kind for e in self.errors if e.field == field]

    def has_error(self, field: str, kind: ErrorKind | None = None) -> bool:
        """
        Check for an error on a field, optionally of a given kind.

        Asking for REQUIRED also matches DEPENDENT_REQUIREMENT_UNMET, which
        specializes it.
        """
        for error in self.errors:
            if error.field != field:
                continue
            if kind is None or error.kind == kind:
                return True
            if kind == ErrorKind.REQUIRED and error.kind.is_requirement:
                return True
        return False

    def first(self, field: str) -> str | None:
        """First message for a field, or None."""
        for error in self.errors:
            if error.field == field:
                return error.message
        return None
