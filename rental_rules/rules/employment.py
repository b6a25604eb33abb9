"""
Employment-status branching of the financial step.

Which financial fields are required depends on the selected employment
status and on the party being described. The whole decision lives in one
table keyed by (status, entity type); adding a status or a party is a data
edit here, and the financial step rules are derived from the table.

Guarantors only vouch for income, so their branch is reduced to the net
monthly income figure (and nothing at all when unemployed).
"""

from collections.abc import Mapping

from rental_rules.core.errors import RuleSetConfigurationError
from rental_rules.domain.enums import EmploymentStatus, EntityType
from rental_rules.rules.model import IfEmploymentStatus

_EMPLOYED_FIELDS = frozenset(
    {
        "employer_name",
        "job_title",
        "employment_type",
        "employment_start_date",
        "gross_annual_income",
        "net_monthly_income",
    }
)
_SELF_EMPLOYED_FIELDS = frozenset(
    {
        "business_name",
        "business_type",
        "business_start_date",
        "gross_annual_revenue",
        "net_monthly_income",
    }
)
_STUDENT_FIELDS = frozenset(
    {
        "university_name",
        "program_of_study",
        "student_income_source_type",
        "student_monthly_income",
        "net_monthly_income",
    }
)
_RETIRED_FIELDS = frozenset({"pension_type", "pension_monthly_income", "net_monthly_income"})
_UNEMPLOYED_FIELDS = frozenset({"unemployed_income_source", "unemployment_benefits_amount"})
_OTHER_FIELDS = frozenset(
    {
        "other_employment_situation",
        "other_situation_monthly_income",
        "other_situation_income_source",
        "net_monthly_income",
    }
)
_GUARANTOR_INCOME_FIELDS = frozenset({"net_monthly_income"})

EMPLOYMENT_REQUIREMENTS: Mapping[tuple[EmploymentStatus, EntityType], frozenset[str]] = {
    # Tenant
    (EmploymentStatus.EMPLOYED, EntityType.TENANT): _EMPLOYED_FIELDS,
    (EmploymentStatus.SELF_EMPLOYED, EntityType.TENANT): _SELF_EMPLOYED_FIELDS,
    (EmploymentStatus.STUDENT, EntityType.TENANT): _STUDENT_FIELDS,
    (EmploymentStatus.RETIRED, EntityType.TENANT): _RETIRED_FIELDS,
    (EmploymentStatus.UNEMPLOYED, EntityType.TENANT): _UNEMPLOYED_FIELDS,
    (EmploymentStatus.OTHER, EntityType.TENANT): _OTHER_FIELDS,
    # Co-signer
    (EmploymentStatus.EMPLOYED, EntityType.CO_SIGNER): _EMPLOYED_FIELDS,
    (EmploymentStatus.SELF_EMPLOYED, EntityType.CO_SIGNER): _SELF_EMPLOYED_FIELDS,
    (EmploymentStatus.STUDENT, EntityType.CO_SIGNER): _STUDENT_FIELDS,
    (EmploymentStatus.RETIRED, EntityType.CO_SIGNER): _RETIRED_FIELDS,
    (EmploymentStatus.UNEMPLOYED, EntityType.CO_SIGNER): _UNEMPLOYED_FIELDS,
    (EmploymentStatus.OTHER, EntityType.CO_SIGNER): _OTHER_FIELDS,
    # Guarantor
    (EmploymentStatus.EMPLOYED, EntityType.GUARANTOR): _GUARANTOR_INCOME_FIELDS,
    (EmploymentStatus.SELF_EMPLOYED, EntityType.GUARANTOR): _GUARANTOR_INCOME_FIELDS,
    (EmploymentStatus.STUDENT, EntityType.GUARANTOR): _GUARANTOR_INCOME_FIELDS,
    (EmploymentStatus.RETIRED, EntityType.GUARANTOR): _GUARANTOR_INCOME_FIELDS,
    (EmploymentStatus.UNEMPLOYED, EntityType.GUARANTOR): frozenset(),
    (EmploymentStatus.OTHER, EntityType.GUARANTOR): _GUARANTOR_INCOME_FIELDS,
}


def _coerce_status(status: EmploymentStatus | str | None) -> EmploymentStatus | None:
    if status is None or isinstance(status, EmploymentStatus):
        return status
    try:
        return EmploymentStatus(status.strip().lower())
    except ValueError:
        return None


def _coerce_entity_type(entity_type: EntityType | str) -> EntityType | None:
    if isinstance(entity_type, EntityType):
        return entity_type
    try:
        return EntityType(entity_type.strip().lower())
    except ValueError:
        return None


class EmploymentBranchResolver:
    """
    Table-driven lookup of employment-branch required fields.

    The table must cover every (status, entity type) pair; an incomplete
    table is rejected at construction.
    """

    def __init__(
        self,
        table: Mapping[tuple[EmploymentStatus, EntityType], frozenset[str]] = EMPLOYMENT_REQUIREMENTS,
    ) -> None:
        missing = [
            (status.value, entity.value)
            for status in EmploymentStatus
            for entity in EntityType
            if (status, entity) not in table
        ]
        if missing:
            raise RuleSetConfigurationError(
                "Employment requirement table is incomplete", details={"missing": missing}
            )
        self._table = dict(table)

    def branch_requirements(
        self, status: EmploymentStatus | str | None, entity_type: EntityType | str
    ) -> frozenset[str]:
        """
        Fields required for a status and party.

        Unknown statuses or entity types select no branch; the employment
        status field itself reports the invalid value.
        """
        resolved_status = _coerce_status(status)
        resolved_entity = _coerce_entity_type(entity_type)
        if resolved_status is None or resolved_entity is None:
            return frozenset()
        return self._table[(resolved_status, resolved_entity)]

    def branch_fields(self) -> frozenset[str]:
        """Every field required by at least one branch."""
        return frozenset().union(*self._table.values())

    def requiredness_for(self, field: str) -> tuple[IfEmploymentStatus, ...]:
        """
        Requiredness clauses for a field, derived from the table.

        Entity types requiring the field for the same set of statuses share
        one clause. Clause order follows EntityType declaration order.
        """
        statuses_by_entity: dict[EntityType, frozenset[EmploymentStatus]] = {}
        for entity in EntityType:
            statuses = frozenset(
                status for status in EmploymentStatus if field in self._table[(status, entity)]
            )
            if statuses:
                statuses_by_entity[entity] = statuses

        clauses: list[IfEmploymentStatus] = []
        seen: set[frozenset[EmploymentStatus]] = set()
        for entity, statuses in statuses_by_entity.items():
            if statuses in seen:
                continue
            seen.add(statuses)
            entities = frozenset(e for e, s in statuses_by_entity.items() if s == statuses)
            clauses.append(IfEmploymentStatus(statuses=statuses, entity_types=entities))
        return tuple(clauses)

    def to_manifest(self) -> dict[str, dict[str, list[str]]]:
        """Table in the client manifest shape: status -> entity type -> fields."""
        return {
            status.value: {
                entity.value: sorted(self._table[(status, entity)]) for entity in EntityType
            }
            for status in EmploymentStatus
        }


employment_resolver = EmploymentBranchResolver()
