"""Country-aware format lookups: postal code patterns and phone regions."""

from rental_rules.locale.phone import PhoneRegionResolver, phone_region_resolver
from rental_rules.locale.postal_codes import (
    CountryPattern,
    CountryPatternRegistry,
    postal_code_registry,
)

__all__ = [
    "CountryPattern",
    "CountryPatternRegistry",
    "PhoneRegionResolver",
    "phone_region_resolver",
    "postal_code_registry",
]
