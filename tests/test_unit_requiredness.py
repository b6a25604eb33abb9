"""
Tests for conditional requiredness resolution.

These tests verify:
- OR semantics across clauses
- Sibling value comparison (IfEquals / IfIn) with normalization
- Entity type and employment status clauses
- Error kind selection for empty values
"""

import pytest

from rental_rules.domain.enums import EmploymentStatus, EntityType, ErrorKind
from rental_rules.rules.context import ValidationContext, normalize_form_value
from rental_rules.rules.model import (
    ALWAYS,
    NEVER,
    IfEmploymentStatus,
    IfEntityType,
    IfEquals,
    IfIn,
    field_rule,
    if_true,
)
from rental_rules.rules.requiredness import requiredness_resolver


class TestNormalizeFormValue:
    """Test sibling value normalization."""

    @pytest.mark.anyio
    @pytest.mark.parametrize(
        "raw,expected",
        [
            (None, None),
            ("  visa_holder ", "visa_holder"),
            ("   ", None),
            (True, "true"),
            (False, "false"),
            (3, "3"),
            (["a"], None),
        ],
    )
    async def test_normalize(self, raw, expected):
        """Test that raw form values normalize to comparable strings."""
        assert normalize_form_value(raw) == expected


class TestClauses:
    """Test individual clause evaluation."""

    @pytest.mark.anyio
    async def test_always_and_never(self):
        """Test the constant clauses."""
        ctx = ValidationContext()
        assert requiredness_resolver.clause_satisfied(ALWAYS, ctx)
        assert not requiredness_resolver.clause_satisfied(NEVER, ctx)

    @pytest.mark.anyio
    async def test_if_equals(self):
        """Test that IfEquals compares the trimmed sibling value."""
        clause = IfEquals(field="immigration_status", value="visa_holder")
        matching = ValidationContext.from_submission({"immigration_status": " visa_holder"})
        other = ValidationContext.from_submission({"immigration_status": "citizen"})
        assert requiredness_resolver.clause_satisfied(clause, matching)
        assert not requiredness_resolver.clause_satisfied(clause, other)

    @pytest.mark.anyio
    async def test_if_equals_absent_sibling_is_not_equal(self):
        """Test that a missing sibling never satisfies IfEquals."""
        clause = IfEquals(field="immigration_status", value="visa_holder")
        assert not requiredness_resolver.clause_satisfied(clause, ValidationContext())

    @pytest.mark.anyio
    @pytest.mark.parametrize("value", [True, "true", "1", "on", "yes", " yes "])
    async def test_if_true_accepts_checkbox_values(self, value):
        """Test that the truthy checkbox values satisfy if_true."""
        ctx = ValidationContext.from_submission({"has_pets": value})
        assert requiredness_resolver.clause_satisfied(if_true("has_pets"), ctx)

    @pytest.mark.anyio
    @pytest.mark.parametrize("value", [False, "false", "0", "", None])
    async def test_if_true_rejects_unchecked_values(self, value):
        """Test that unchecked values do not satisfy if_true."""
        ctx = ValidationContext.from_submission({"has_pets": value})
        assert not requiredness_resolver.clause_satisfied(if_true("has_pets"), ctx)

    @pytest.mark.anyio
    async def test_if_in(self):
        """Test that IfIn matches any of its values."""
        clause = IfIn(field="country", values={"US", "CA"})
        assert requiredness_resolver.clause_satisfied(
            clause, ValidationContext.from_submission({"country": "CA"})
        )
        assert not requiredness_resolver.clause_satisfied(
            clause, ValidationContext.from_submission({"country": "NL"})
        )

    @pytest.mark.anyio
    async def test_if_entity_type(self):
        """Test that IfEntityType reads the declared party."""
        clause = IfEntityType(types={EntityType.CO_SIGNER, EntityType.GUARANTOR})
        assert requiredness_resolver.clause_satisfied(
            clause, ValidationContext(entity_type=EntityType.GUARANTOR)
        )
        assert not requiredness_resolver.clause_satisfied(
            clause, ValidationContext(entity_type=EntityType.TENANT)
        )

    @pytest.mark.anyio
    async def test_if_employment_status_uses_context_then_sibling(self):
        """Test that the declared status wins over the submitted one."""
        clause = IfEmploymentStatus(statuses={EmploymentStatus.STUDENT})
        declared = ValidationContext(
            employment_status="student", sibling_values={"employment_status": "employed"}
        )
        submitted = ValidationContext(sibling_values={"employment_status": " student "})
        assert requiredness_resolver.clause_satisfied(clause, declared)
        assert requiredness_resolver.clause_satisfied(clause, submitted)

    @pytest.mark.anyio
    async def test_if_employment_status_matches_case_exactly(self):
        """Test that a status in the wrong case selects no branch."""
        clause = IfEmploymentStatus(statuses={EmploymentStatus.STUDENT})
        ctx = ValidationContext(sibling_values={"employment_status": "Student"})
        assert not requiredness_resolver.clause_satisfied(clause, ctx)

    @pytest.mark.anyio
    async def test_if_employment_status_checks_entity_type(self):
        """Test that the clause is limited to its entity types."""
        clause = IfEmploymentStatus(
            statuses={EmploymentStatus.EMPLOYED}, entity_types={EntityType.TENANT}
        )
        tenant = ValidationContext(entity_type=EntityType.TENANT, employment_status="employed")
        guarantor = ValidationContext(
            entity_type=EntityType.GUARANTOR, employment_status="employed"
        )
        assert requiredness_resolver.clause_satisfied(clause, tenant)
        assert not requiredness_resolver.clause_satisfied(clause, guarantor)

    @pytest.mark.anyio
    async def test_unknown_employment_status_satisfies_nothing(self):
        """Test that an unknown status selects no branch."""
        clause = IfEmploymentStatus(statuses=set(EmploymentStatus))
        ctx = ValidationContext(employment_status="astronaut")
        assert not requiredness_resolver.clause_satisfied(clause, ctx)

    @pytest.mark.anyio
    async def test_unsupported_clause_type(self):
        """Test that a foreign clause object is a programmer error."""
        with pytest.raises(TypeError):
            requiredness_resolver.clause_satisfied(object(), ValidationContext())


class TestRequiredness:
    """Test rule-level resolution."""

    @pytest.mark.anyio
    async def test_no_clauses_means_optional(self):
        """Test that a rule without clauses is never required."""
        assert not requiredness_resolver.is_required(field_rule("bio"), ValidationContext())

    @pytest.mark.anyio
    async def test_or_semantics(self):
        """Test that any satisfied clause makes the field required."""
        rule = field_rule(
            "detail",
            required=[
                IfEquals(field="reason", value="other"),
                IfEntityType(types={EntityType.GUARANTOR}),
            ],
        )
        assert requiredness_resolver.is_required(
            rule, ValidationContext(entity_type=EntityType.GUARANTOR)
        )
        assert requiredness_resolver.is_required(
            rule, ValidationContext.from_submission({"reason": "other"})
        )
        assert not requiredness_resolver.is_required(rule, ValidationContext())

    @pytest.mark.anyio
    async def test_first_satisfied_clause(self):
        """Test that the first satisfied clause is reported."""
        first = IfEquals(field="reason", value="other")
        rule = field_rule("detail", required=[first, ALWAYS])
        ctx = ValidationContext.from_submission({"reason": "other"})
        assert requiredness_resolver.satisfied_clause(rule, ctx) == first

    @pytest.mark.anyio
    async def test_requirement_kind(self):
        """Test that sibling clauses report the dependent kind."""
        rule = field_rule("detail", required=[IfEquals(field="reason", value="other"), ALWAYS])
        dependent = ValidationContext.from_submission({"reason": "other"})
        plain = ValidationContext()
        assert (
            requiredness_resolver.requirement_kind(rule, dependent)
            == ErrorKind.DEPENDENT_REQUIREMENT_UNMET
        )
        assert requiredness_resolver.requirement_kind(rule, plain) == ErrorKind.REQUIRED
        assert requiredness_resolver.requirement_kind(field_rule("bio"), plain) is None
