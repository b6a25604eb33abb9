"""
Tests for the declarative rule model.

These tests verify:
- FieldConstraints / FieldRule construction-time checks
- RuleSet duplicate and dangling reference detection
- RuleSet.merge override semantics (right-hand rule wins whole)
- Requiredness clause discriminated union round trip
"""

import pytest
from pydantic import TypeAdapter, ValidationError

from rental_rules.core.errors import RuleSetConfigurationError
from rental_rules.domain.enums import DataType, EmploymentStatus, EntityType, FormatKind
from rental_rules.rules.model import (
    ALWAYS,
    Always,
    FieldConstraints,
    FieldRule,
    IfEmploymentStatus,
    IfEquals,
    IfIn,
    Never,
    Requiredness,
    RuleSet,
    field_rule,
    if_true,
)


class TestFieldConstraints:
    """Test constraint consistency checks."""

    @pytest.mark.anyio
    async def test_min_greater_than_max(self):
        """Test that min > max is rejected."""
        with pytest.raises(RuleSetConfigurationError) as exc_info:
            FieldConstraints(min=10, max=1)
        assert exc_info.value.details == {"min": 10, "max": 1}

    @pytest.mark.anyio
    async def test_invalid_pattern(self):
        """Test that an uncompilable regular expression is rejected."""
        with pytest.raises(RuleSetConfigurationError, match="Invalid pattern"):
            FieldConstraints(pattern="[unclosed")

    @pytest.mark.anyio
    async def test_negative_length(self):
        """Test that negative lengths are rejected."""
        with pytest.raises(RuleSetConfigurationError):
            FieldConstraints(length=-1)

    @pytest.mark.anyio
    async def test_empty_enum_values(self):
        """Test that an empty enum value list is rejected."""
        with pytest.raises(RuleSetConfigurationError):
            FieldConstraints(enum_values=())

    @pytest.mark.anyio
    async def test_enum_depends_on_requires_map(self):
        """Test that enum_depends_on and enum_map come together."""
        with pytest.raises(RuleSetConfigurationError):
            FieldConstraints(enum_depends_on="type")
        with pytest.raises(RuleSetConfigurationError):
            FieldConstraints(enum_map={"a": ("b",)})

    @pytest.mark.anyio
    async def test_format_source_requires_format(self):
        """Test that format_source without a format is rejected."""
        with pytest.raises(RuleSetConfigurationError):
            FieldConstraints(format_source="country")


class TestFieldRule:
    """Test FieldRule checks and helpers."""

    @pytest.mark.anyio
    async def test_enum_without_values(self):
        """Test that an enum field must declare its values."""
        with pytest.raises(RuleSetConfigurationError, match="declares no enum values"):
            FieldRule(field="status", type=DataType.ENUM)

    @pytest.mark.anyio
    async def test_empty_field_name(self):
        """Test that a blank field name is rejected."""
        with pytest.raises(RuleSetConfigurationError):
            FieldRule(field="  ")

    @pytest.mark.anyio
    async def test_accepted_requires_boolean(self):
        """Test that accepted is only valid on boolean fields."""
        with pytest.raises(RuleSetConfigurationError):
            field_rule("consent", DataType.STRING, accepted=True)

    @pytest.mark.anyio
    async def test_date_constraints_require_date(self):
        """Test that age and window constraints are only valid on dates."""
        with pytest.raises(RuleSetConfigurationError):
            field_rule("age", DataType.INTEGER, min_age_years=18)

    @pytest.mark.anyio
    async def test_rules_are_frozen(self):
        """Test that rules cannot be mutated after construction."""
        rule = field_rule("city", required=True)
        with pytest.raises(ValidationError):
            rule.field = "town"

    @pytest.mark.anyio
    async def test_display_label(self):
        """Test the derived and explicit labels."""
        assert field_rule("employer_name").display_label == "Employer name"
        assert field_rule("id_number", label="ID number").display_label == "ID number"

    @pytest.mark.anyio
    async def test_field_rule_required_shorthands(self):
        """Test the required= shorthands of field_rule."""
        assert field_rule("a", required=True).requiredness == (ALWAYS,)
        assert field_rule("a").requiredness == ()
        assert field_rule("a").is_optional
        clause = IfEquals(field="b", value="x")
        assert field_rule("a", required=clause).requiredness == (clause,)
        assert field_rule("a", required=[clause, ALWAYS]).requiredness == (clause, ALWAYS)

    @pytest.mark.anyio
    async def test_referenced_fields(self):
        """Test that every sibling read during evaluation is reported."""
        rule = field_rule(
            "postal_code",
            required=IfIn(field="has_address", values={"true"}),
            format=FormatKind.POSTAL_CODE,
            format_source="country",
        )
        assert rule.referenced_fields() == {"has_address", "country"}

    @pytest.mark.anyio
    async def test_requiredness_round_trip(self):
        """Test that clauses validate back from their dumped form."""
        adapter = TypeAdapter(Requiredness)
        clause = IfEmploymentStatus(
            statuses={EmploymentStatus.STUDENT}, entity_types={EntityType.TENANT}
        )
        assert adapter.validate_python(clause.model_dump()) == clause
        assert isinstance(adapter.validate_python({"kind": "always"}), Always)
        assert isinstance(adapter.validate_python({"kind": "never"}), Never)


class TestRuleSetConstruction:
    """Test RuleSet construction-time validation."""

    @pytest.mark.anyio
    async def test_duplicate_field(self):
        """Test that one field cannot be declared twice."""
        with pytest.raises(RuleSetConfigurationError) as exc_info:
            RuleSet("step", [field_rule("a"), field_rule("a", required=True)])
        assert exc_info.value.details == {"ruleset": "step", "field": "a"}

    @pytest.mark.anyio
    async def test_dangling_if_equals(self):
        """Test that a clause referencing an unknown field fails at construction."""
        with pytest.raises(RuleSetConfigurationError) as exc_info:
            RuleSet("step", [field_rule("visa_type", required=IfEquals(field="missing", value="x"))])
        assert exc_info.value.details["path"] == "step.visa_type.requiredness[0].field"
        assert exc_info.value.details["field"] == "missing"

    @pytest.mark.anyio
    async def test_dangling_format_source(self):
        """Test that a format source must be a sibling field."""
        with pytest.raises(RuleSetConfigurationError):
            RuleSet(
                "step",
                [field_rule("postal_code", format=FormatKind.POSTAL_CODE, format_source="country")],
            )

    @pytest.mark.anyio
    async def test_clause_value_outside_enum(self):
        """Test that comparing an enum sibling with an impossible value fails."""
        with pytest.raises(RuleSetConfigurationError, match="outside its enum"):
            RuleSet(
                "step",
                [
                    field_rule("status", DataType.ENUM, enum_values=("a", "b")),
                    field_rule("detail", required=IfEquals(field="status", value="c")),
                ],
            )

    @pytest.mark.anyio
    async def test_enum_map_keys_outside_parent(self):
        """Test that enum_map keys must be values of the parent enum."""
        with pytest.raises(RuleSetConfigurationError, match="enum_map"):
            RuleSet(
                "step",
                [
                    field_rule("type", DataType.ENUM, enum_values=("house",)),
                    field_rule(
                        "subtype",
                        DataType.ENUM,
                        enum_depends_on="type",
                        enum_map={"house": ("villa",), "boat": ("yacht",)},
                    ),
                ],
            )

    @pytest.mark.anyio
    async def test_mapping_interface(self):
        """Test that a RuleSet behaves as an ordered read-only mapping."""
        rule_set = RuleSet("step", [field_rule("b"), field_rule("a")])
        assert rule_set.fields() == ["b", "a"]
        assert list(rule_set) == ["b", "a"]
        assert len(rule_set) == 2
        assert rule_set["a"].field == "a"
        assert rule_set.get("missing") is None
        assert "b" in rule_set

    @pytest.mark.anyio
    async def test_equality_ignores_order(self):
        """Test that equality compares names and rules, not insertion order."""
        a = RuleSet("step", [field_rule("x"), field_rule("y")])
        b = RuleSet("step", [field_rule("y"), field_rule("x")])
        assert a == b
        assert hash(a) == hash(b)
        assert a != a.renamed("other")


class TestRuleSetMerge:
    """Test RuleSet.merge override semantics."""

    @pytest.mark.anyio
    async def test_right_hand_rule_wins_whole(self):
        """Test that a shared field takes the right-hand rule exactly."""
        left = RuleSet("a", [field_rule("income", DataType.NUMBER, required=True, min=0, max=10)])
        right_rule = field_rule("income", DataType.NUMBER, min=5)
        right = RuleSet("b", [right_rule])

        merged = left.merge(right)

        assert merged["income"] == right_rule
        # No hybrid: the left-hand max and requiredness are gone
        assert merged["income"].constraints.max is None
        assert merged["income"].requiredness == ()

    @pytest.mark.anyio
    async def test_merge_unions_fields_in_order(self):
        """Test that fields of both sides are kept, left order first."""
        left = RuleSet("a", [field_rule("x"), field_rule("y")])
        right = RuleSet("b", [field_rule("z"), field_rule("x", required=True)])

        merged = left.merge(right)

        assert merged.fields() == ["x", "y", "z"]
        assert merged.name == "a+b"

    @pytest.mark.anyio
    async def test_merge_is_pure(self):
        """Test that merging leaves both inputs unchanged."""
        left = RuleSet("a", [field_rule("x", required=True)])
        right = RuleSet("b", [field_rule("x")])
        left_before = left.rules
        right_before = right.rules

        left.merge(right)

        assert left.rules == left_before
        assert right.rules == right_before

    @pytest.mark.anyio
    async def test_merge_keeps_right_hand_clauses(self):
        """Test that clauses of right-hand rules survive the merge."""
        left = RuleSet("a", [field_rule("has_pets", DataType.BOOLEAN)])
        right = RuleSet(
            "b",
            [
                field_rule("has_pets", DataType.BOOLEAN),
                field_rule("pets", required=if_true("has_pets")),
            ],
        )
        merged = left.merge(right)
        assert merged["pets"].requiredness == (if_true("has_pets"),)

    @pytest.mark.anyio
    async def test_with_rule_and_without(self):
        """Test single-rule replacement and removal."""
        base = RuleSet("a", [field_rule("x"), field_rule("y")])
        replaced = base.with_rule(field_rule("x", required=True))
        assert replaced["x"].requiredness == (ALWAYS,)
        assert base["x"].requiredness == ()
        assert base.without("y").fields() == ["x"]

    @pytest.mark.anyio
    async def test_without_referenced_field_fails(self):
        """Test that removing a referenced sibling is rejected."""
        base = RuleSet("a", [field_rule("flag"), field_rule("detail", required=if_true("flag"))])
        with pytest.raises(RuleSetConfigurationError):
            base.without("flag")
