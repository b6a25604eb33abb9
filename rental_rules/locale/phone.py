"""
Phone number validation keyed by international dial code.

The wizard collects phone numbers as two fields: a dial code picked from a
country selector (`+31`, `+1`, ...) and the national number typed by the
user. The dial code is resolved to the main region sharing that calling
code and the concatenated number is validated against the libphonenumber
metadata shipped with `phonenumbers`.
"""

import logging
import re

import phonenumbers
from phonenumbers import NumberParseException

from rental_rules.core.config import settings

logger = logging.getLogger(__name__)

_DIAL_CODE_PATTERN = re.compile(r"^\+?(\d{1,3})$")
_UNKNOWN_REGION = "ZZ"


def normalize_dial_code(dial_code: str | None) -> str | None:
    """
    Normalize a dial code to `+<digits>`.

    Returns None for empty or malformed input.
    """
    if dial_code is None:
        return None
    cleaned = str(dial_code).strip().replace(" ", "")
    match = _DIAL_CODE_PATTERN.match(cleaned)
    if not match:
        return None
    return f"+{match.group(1)}"


class PhoneRegionResolver:
    """
    Resolves dial codes to regions and validates full numbers.

    Stateless apart from the configured default region; safe to share.
    """

    def __init__(self, default_region: str | None = None) -> None:
        self.default_region = (default_region or settings.default_phone_region).upper()

    def resolve_region(self, dial_code: str | None, default_region: str | None = None) -> str:
        """
        Map a dial code to the main region for that calling code.

        Several regions share some calling codes (+1 covers US, CA and the
        NANP islands, +7 covers RU and KZ). The metadata lists the main
        region first, so the result is deterministic.

        Args:
            dial_code: Dial code with or without the leading `+`
            default_region: Region returned when the dial code is empty or
                            does not resolve. Falls back to the resolver default.

        Returns:
            ISO 3166-1 alpha-2 region code
        """
        fallback = (default_region or self.default_region).upper()
        normalized = normalize_dial_code(dial_code)
        if normalized is None:
            if dial_code:
                logger.debug("Malformed dial code, using default region", extra={"dial_code": dial_code})
            return fallback

        region = phonenumbers.region_code_for_country_code(int(normalized[1:]))
        # Non-geographic calling codes map to "001"
        if region == _UNKNOWN_REGION or not region.isalpha():
            return fallback
        return region

    def is_valid(self, full_number: object, region: str | None = None) -> bool:
        """Parse and validate a number; parse failures are invalid, never raised."""
        if not isinstance(full_number, str) or not full_number.strip():
            return False
        try:
            parsed = phonenumbers.parse(full_number.strip(), region or self.default_region)
        except NumberParseException:
            return False
        return phonenumbers.is_valid_number(parsed)

    def validate(
        self, number: object, dial_code: str | None = None, default_region: str | None = None
    ) -> bool:
        """
        Validate a national number entered next to a dial code selector.

        The full number is the dial code concatenated with the raw input,
        which is how the form layer submits it.
        """
        if not isinstance(number, str):
            return False
        region = self.resolve_region(dial_code, default_region)
        normalized = normalize_dial_code(dial_code)
        raw = number.strip()
        # Already international; the selector value is redundant
        if raw.startswith("+") or normalized is None:
            return self.is_valid(raw, region)
        return self.is_valid(f"{normalized}{raw}", region)


phone_region_resolver = PhoneRegionResolver()
