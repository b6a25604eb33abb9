"""
Domain enums for the rental rules engine.

Values are the lowercase strings exchanged with the HTTP layer and the
client form layer, so a raw string and its enum member compare equal.
"""

from enum import Enum


class DataType(str, Enum):
    """Base type of a wizard field."""

    STRING = "string"
    NUMBER = "number"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    DATE = "date"
    ENUM = "enum"


class EntityType(str, Enum):
    """Which party a set of personal/financial fields describes."""

    TENANT = "tenant"
    CO_SIGNER = "co_signer"
    GUARANTOR = "guarantor"


class SaveMode(str, Enum):
    """
    How strictly a submission is validated.

    DRAFT preserves partial work (autosave); STRICT is used for precognitive
    live validation and final submission.
    """

    DRAFT = "draft"
    STRICT = "strict"


class EmploymentStatus(str, Enum):
    """Employment situation selected in the financial step."""

    EMPLOYED = "employed"
    SELF_EMPLOYED = "self_employed"
    STUDENT = "student"
    RETIRED = "retired"
    UNEMPLOYED = "unemployed"
    OTHER = "other"


class ErrorKind(str, Enum):
    """Kinds of per-field validation failures."""

    REQUIRED = "required"
    TYPE_MISMATCH = "type_mismatch"
    OUT_OF_RANGE = "out_of_range"
    PATTERN_MISMATCH = "pattern_mismatch"
    ENUM_MISMATCH = "enum_mismatch"
    DEPENDENT_REQUIREMENT_UNMET = "dependent_requirement_unmet"

    @property
    def is_requirement(self) -> bool:
        """True for REQUIRED and its conditional specialization."""
        return self in (ErrorKind.REQUIRED, ErrorKind.DEPENDENT_REQUIREMENT_UNMET)


class FormatKind(str, Enum):
    """Country-aware formats checked against lookup tables."""

    POSTAL_CODE = "postal_code"
    PHONE_NUMBER = "phone_number"


class DateWindow(str, Enum):
    """Date position relative to the validation reference date."""

    PAST = "past"  # before or equal to today
    FUTURE = "future"  # strictly after today
    TODAY_OR_FUTURE = "today_or_future"


class SubmissionState(str, Enum):
    """Lifecycle of a single validation call."""

    RECEIVED = "received"
    COMPOSED = "composed"
    EVALUATED = "evaluated"
    VALID = "valid"
    INVALID = "invalid"
