"""
Rental application wizard rules.

Steps:
1. identity   - personal details, identity document, current address
2. household  - move-in, lease duration, occupants, pets, emergency contact
3. financial  - employment status and the branch-specific income fields
4. support    - rent insurance, guarantor presence
5. history    - credit check authorization, rental history, reason for moving
6. consent    - declarations and digital signature
(7. review has no rules)

The same flat field map describes the tenant, a co-signer or a guarantor;
the ValidationContext entity type tells which party is being validated.
"""

from rental_rules.catalog.wizard import WizardDefinition
from rental_rules.domain.enums import DataType, DateWindow, EmploymentStatus, ErrorKind, FormatKind
from rental_rules.rules.employment import employment_resolver
from rental_rules.rules.model import FieldRule, IfEquals, IfIn, RuleSet, field_rule, if_true

COUNTRIES_REQUIRING_STATE = ("US", "CA", "AU", "BR", "MX", "IN")
CURRENCIES = ("eur", "usd", "gbp", "chf")
EMPLOYMENT_STATUSES = tuple(s.value for s in EmploymentStatus)
EMPLOYMENT_TYPES = ("full_time", "part_time", "contract", "temporary", "zero_hours")
ID_DOCUMENT_TYPES = ("passport", "national_id", "drivers_license")
IMMIGRATION_STATUSES = (
    "citizen",
    "permanent_resident",
    "visa_holder",
    "refugee",
    "asylum_seeker",
    "other",
)
LIVING_SITUATIONS = (
    "renting",
    "owner",
    "living_with_family",
    "student_housing",
    "employer_provided",
    "other",
)
REASONS_FOR_MOVING = (
    "relocation_work",
    "relocation_personal",
    "upsizing",
    "downsizing",
    "end_of_lease",
    "buying_property",
    "relationship_change",
    "closer_to_family",
    "better_location",
    "cost",
    "first_time_renter",
    "other",
)
CREDIT_CHECK_PROVIDERS = ("experian", "equifax", "transunion", "illion_au", "no_preference")
RENT_INSURANCE_OPTIONS = ("yes", "no", "already_have")

# Loose structural check; deliverability is not a validation concern
EMAIL_PATTERN = r"[^@\s]+@[^@\s]+\.[^@\s]+"


def _state_required_for(country_field: str) -> IfIn:
    codes = set(COUNTRIES_REQUIRING_STATE)
    return IfIn(field=country_field, values=codes | {c.lower() for c in codes})


# ============================================================================
# Step 1: Identity
# ============================================================================

IDENTITY = RuleSet(
    "identity",
    [
        field_rule(
            "date_of_birth",
            DataType.DATE,
            required=True,
            min_age_years=18,
            messages={ErrorKind.OUT_OF_RANGE: "You must be at least 18 years old"},
        ),
        field_rule("middle_name", length=100),
        field_rule("nationality", required=True, exact_length=2),
        field_rule("phone_country_code", required=True, length=5, label="Phone country code"),
        field_rule(
            "phone_number",
            required=True,
            length=20,
            format=FormatKind.PHONE_NUMBER,
            format_source="phone_country_code",
        ),
        field_rule("bio", length=1000),
        field_rule(
            "id_document_type",
            DataType.ENUM,
            required=True,
            label="ID document type",
            enum_values=ID_DOCUMENT_TYPES,
        ),
        field_rule("id_number", required=True, length=100, label="ID number"),
        field_rule(
            "id_issuing_country", required=True, exact_length=2, label="ID issuing country"
        ),
        field_rule(
            "id_expiry_date",
            DataType.DATE,
            required=True,
            label="ID expiry date",
            date_window=DateWindow.FUTURE,
            messages={ErrorKind.OUT_OF_RANGE: "ID document must not be expired"},
        ),
        field_rule("immigration_status", DataType.ENUM, enum_values=IMMIGRATION_STATUSES),
        field_rule(
            "immigration_status_other",
            required=IfEquals(field="immigration_status", value="other"),
            length=100,
            messages={ErrorKind.DEPENDENT_REQUIREMENT_UNMET: "Please specify your immigration status"},
        ),
        field_rule(
            "visa_type",
            required=IfEquals(field="immigration_status", value="visa_holder"),
            length=100,
            messages={ErrorKind.DEPENDENT_REQUIREMENT_UNMET: "Visa type is required for visa holders"},
        ),
        field_rule(
            "visa_expiry_date",
            DataType.DATE,
            required=IfEquals(field="immigration_status", value="visa_holder"),
            date_window=DateWindow.FUTURE,
            messages={ErrorKind.OUT_OF_RANGE: "Visa must not be expired"},
        ),
        field_rule("work_permit_number", length=100),
        field_rule("right_to_rent_share_code", length=50),
        field_rule("current_house_number", required=True, length=20, label="House number"),
        field_rule("current_address_line_2", length=100, label="Address line 2"),
        field_rule("current_street_name", required=True, length=255, label="Street name"),
        field_rule("current_city", required=True, length=100, label="City"),
        field_rule(
            "current_state_province",
            required=_state_required_for("current_country"),
            length=100,
            label="State/Province",
            messages={
                ErrorKind.DEPENDENT_REQUIREMENT_UNMET: "State/Province is required for this country"
            },
        ),
        field_rule(
            "current_postal_code",
            required=True,
            length=20,
            label="Postal code",
            format=FormatKind.POSTAL_CODE,
            format_source="current_country",
        ),
        field_rule("current_country", required=True, exact_length=2, label="Country"),
    ],
)


# ============================================================================
# Step 2: Household
# ============================================================================

HOUSEHOLD = RuleSet(
    "household",
    [
        field_rule(
            "desired_move_in_date",
            DataType.DATE,
            required=True,
            label="Move-in date",
            date_window=DateWindow.FUTURE,
        ),
        field_rule(
            "lease_duration_months",
            DataType.INTEGER,
            required=True,
            label="Lease duration",
            min=1,
            max=60,
        ),
        field_rule("is_flexible_on_move_in", DataType.BOOLEAN),
        field_rule("is_flexible_on_duration", DataType.BOOLEAN),
        field_rule("additional_occupants", DataType.INTEGER, required=True, min=0, max=20),
        field_rule("has_pets", DataType.BOOLEAN, required=True),
        field_rule(
            "pets_description",
            required=if_true("has_pets"),
            length=1000,
            messages={ErrorKind.DEPENDENT_REQUIREMENT_UNMET: "Please describe your pets"},
        ),
        field_rule("emergency_contact_first_name", length=100),
        field_rule("emergency_contact_last_name", length=100),
        field_rule("emergency_contact_relationship", length=100),
        field_rule("emergency_contact_phone_country_code", length=10),
        field_rule(
            "emergency_contact_phone_number",
            length=30,
            format=FormatKind.PHONE_NUMBER,
            format_source="emergency_contact_phone_country_code",
        ),
        field_rule("emergency_contact_email", length=255, pattern=EMAIL_PATTERN),
        field_rule("message_to_landlord", length=2000),
    ],
)


# ============================================================================
# Step 3: Financial
# ============================================================================


def _branch_field(field: str, data_type: DataType = DataType.STRING, **kwargs) -> FieldRule:
    """Financial field whose requiredness comes from the employment table."""
    return field_rule(
        field, data_type, required=employment_resolver.requiredness_for(field), **kwargs
    )


FINANCIAL = RuleSet(
    "financial",
    [
        field_rule(
            "employment_status",
            DataType.ENUM,
            required=True,
            enum_values=EMPLOYMENT_STATUSES,
            messages={ErrorKind.REQUIRED: "Please select your employment status"},
        ),
        field_rule(
            "income_currency",
            DataType.ENUM,
            required=True,
            enum_values=CURRENCIES,
            messages={ErrorKind.REQUIRED: "Please select your income currency"},
        ),
        # Employed
        _branch_field("employer_name", length=255),
        _branch_field("job_title", length=255),
        _branch_field("employment_type", DataType.ENUM, enum_values=EMPLOYMENT_TYPES),
        _branch_field("employment_start_date", DataType.DATE, date_window=DateWindow.PAST),
        _branch_field("gross_annual_income", DataType.NUMBER, min=0),
        _branch_field(
            "net_monthly_income",
            DataType.NUMBER,
            min=0,
            messages={ErrorKind.OUT_OF_RANGE: "Income must be a positive number"},
        ),
        # Self-employed
        _branch_field("business_name", length=255),
        _branch_field("business_type", length=255),
        _branch_field("business_start_date", DataType.DATE, date_window=DateWindow.PAST),
        _branch_field("gross_annual_revenue", DataType.NUMBER, min=0),
        # Student
        _branch_field("university_name", length=255),
        _branch_field("program_of_study", length=255),
        _branch_field(
            "student_income_source_type",
            length=255,
            messages={ErrorKind.REQUIRED: "Income source is required"},
        ),
        _branch_field(
            "student_monthly_income",
            DataType.NUMBER,
            min=0,
            messages={ErrorKind.REQUIRED: "Monthly income is required"},
        ),
        field_rule("expected_graduation_date", DataType.DATE, date_window=DateWindow.FUTURE),
        # Retired
        _branch_field("pension_type", length=255),
        _branch_field(
            "pension_monthly_income",
            DataType.NUMBER,
            min=0,
            messages={ErrorKind.REQUIRED: "Monthly pension is required"},
        ),
        # Unemployed
        _branch_field(
            "unemployed_income_source",
            length=255,
            messages={ErrorKind.REQUIRED: "Income source is required"},
        ),
        _branch_field(
            "unemployment_benefits_amount",
            DataType.NUMBER,
            min=0,
            messages={ErrorKind.REQUIRED: "Income amount is required"},
        ),
        # Other
        _branch_field(
            "other_employment_situation",
            length=255,
            messages={ErrorKind.REQUIRED: "Please specify your situation"},
        ),
        _branch_field(
            "other_situation_monthly_income",
            DataType.NUMBER,
            min=0,
            messages={ErrorKind.REQUIRED: "Monthly income is required"},
        ),
        _branch_field(
            "other_situation_income_source",
            length=255,
            messages={ErrorKind.REQUIRED: "Income source is required"},
        ),
    ],
)


# ============================================================================
# Step 4: Support
# ============================================================================

SUPPORT = RuleSet(
    "support",
    [
        field_rule(
            "interested_in_rent_insurance", DataType.ENUM, enum_values=RENT_INSURANCE_OPTIONS
        ),
        field_rule(
            "existing_insurance_provider",
            required=IfEquals(field="interested_in_rent_insurance", value="already_have"),
            length=200,
        ),
        field_rule("existing_insurance_policy_number", length=100),
        field_rule("has_guarantor", DataType.BOOLEAN),
        field_rule("guarantor_first_name", required=if_true("has_guarantor"), length=100),
        field_rule("guarantor_last_name", required=if_true("has_guarantor"), length=100),
        field_rule(
            "guarantor_email",
            required=if_true("has_guarantor"),
            length=255,
            pattern=EMAIL_PATTERN,
        ),
        field_rule("guarantor_phone_country_code", required=if_true("has_guarantor"), length=5),
        field_rule(
            "guarantor_phone_number",
            required=if_true("has_guarantor"),
            length=20,
            format=FormatKind.PHONE_NUMBER,
            format_source="guarantor_phone_country_code",
        ),
        field_rule("guarantor_country", required=if_true("has_guarantor"), exact_length=2),
        field_rule(
            "guarantor_state_province",
            required=_state_required_for("guarantor_country"),
            length=100,
        ),
        field_rule(
            "guarantor_postal_code",
            required=if_true("has_guarantor"),
            length=20,
            format=FormatKind.POSTAL_CODE,
            format_source="guarantor_country",
        ),
    ],
)


# ============================================================================
# Step 5: History
# ============================================================================

HISTORY = RuleSet(
    "history",
    [
        field_rule("authorize_credit_check", DataType.BOOLEAN, required=True, accepted=True),
        field_rule("authorize_background_check", DataType.BOOLEAN),
        field_rule(
            "credit_check_provider_preference", DataType.ENUM, enum_values=CREDIT_CHECK_PROVIDERS
        ),
        field_rule("has_ccjs_or_bankruptcies", DataType.BOOLEAN),
        field_rule(
            "ccj_bankruptcy_details",
            required=if_true("has_ccjs_or_bankruptcies"),
            length=2000,
        ),
        field_rule("has_eviction_history", DataType.BOOLEAN),
        field_rule("eviction_details", required=if_true("has_eviction_history"), length=2000),
        field_rule(
            "current_living_situation",
            DataType.ENUM,
            required=True,
            enum_values=LIVING_SITUATIONS,
        ),
        field_rule(
            "current_address_move_in_date",
            DataType.DATE,
            required=True,
            date_window=DateWindow.PAST,
        ),
        field_rule(
            "current_monthly_rent",
            DataType.NUMBER,
            required=IfEquals(field="current_living_situation", value="renting"),
            min=0,
        ),
        field_rule("current_rent_currency", length=3),
        field_rule("current_landlord_name", length=200),
        field_rule("current_landlord_contact", length=200),
        field_rule(
            "reason_for_moving", DataType.ENUM, required=True, enum_values=REASONS_FOR_MOVING
        ),
        field_rule(
            "reason_for_moving_other",
            required=IfEquals(field="reason_for_moving", value="other"),
            length=200,
        ),
    ],
)


# ============================================================================
# Step 6: Consent
# ============================================================================

CONSENT = RuleSet(
    "consent",
    [
        field_rule("declaration_accuracy", DataType.BOOLEAN, required=True, accepted=True),
        field_rule("consent_screening", DataType.BOOLEAN, required=True, accepted=True),
        field_rule("consent_data_processing", DataType.BOOLEAN, required=True, accepted=True),
        field_rule("consent_reference_contact", DataType.BOOLEAN, required=True, accepted=True),
        field_rule("consent_data_sharing", DataType.BOOLEAN),
        field_rule("consent_marketing", DataType.BOOLEAN),
        field_rule("digital_signature", required=True, length=200),
    ],
)


# ============================================================================
# Overlay: wizard tracking metadata, identical in draft and strict mode
# ============================================================================

APPLICATION_OVERLAY = RuleSet(
    "application_tracking",
    [
        field_rule("current_step", DataType.INTEGER, min=1, max=8),
        field_rule("invited_via_token", length=64),
    ],
)


APPLICATION_WIZARD = WizardDefinition(
    "application",
    steps=[
        ("identity", IDENTITY),
        ("household", HOUSEHOLD),
        ("financial", FINANCIAL),
        ("support", SUPPORT),
        ("history", HISTORY),
        ("consent", CONSENT),
    ],
    overlay=APPLICATION_OVERLAY,
)
