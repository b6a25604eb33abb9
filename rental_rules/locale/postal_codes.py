"""
Country-specific postal code formats.

The table below is the single source of truth for postal code grammar on
both sides of the wizard: the server evaluates it directly and the client
form layer receives it through the compiled manifest (see
`rental_rules.compiler.compiler`).

Coverage follows the Universal Postal Union address standards and national
postal authorities. Patterns are written without anchors, matched with
`fullmatch`, and compiled case-insensitively so letter-bearing formats
(GB, NL, CA, ...) accept lowercase input. Digit-only formats are unaffected
by the flag.

Countries absent from the table have no enforced format: any non-empty
value is accepted so submissions from those countries are never blocked.
"""

import re
from collections.abc import Iterator, Mapping
from dataclasses import dataclass


@dataclass(frozen=True)
class CountryPattern:
    """Postal code grammar for one ISO 3166-1 alpha-2 country."""

    country_code: str
    pattern: re.Pattern[str]
    example: str

    def matches(self, value: str) -> bool:
        return self.pattern.fullmatch(value.strip()) is not None

    @property
    def source(self) -> str:
        """Anchored pattern source usable by JavaScript `RegExp`."""
        return f"^{self.pattern.pattern}$"


# (country code, pattern, documented example)
_POSTAL_CODE_TABLE: tuple[tuple[str, str, str], ...] = (
    # =====================
    # EUROPE
    # =====================
    # Western Europe
    ("AD", r"AD\d{3}", "AD100"),
    ("AT", r"\d{4}", "1010"),
    ("BE", r"\d{4}", "1000"),
    ("CH", r"\d{4}", "8001"),
    ("DE", r"\d{5}", "10115"),
    ("FR", r"\d{5}", "75001"),
    ("LI", r"\d{4}", "9490"),
    ("LU", r"\d{4}", "1234"),
    ("MC", r"980\d{2}", "98000"),
    ("NL", r"\d{4}\s?[A-Z]{2}", "1012 AB"),
    # British Isles
    ("GB", r"[A-Z]{1,2}\d[A-Z\d]?\s?\d[A-Z]{2}", "SW1A 1AA"),
    ("GG", r"GY\d\s?\d[A-Z]{2}", "GY1 1AA"),
    ("IM", r"IM\d\s?\d[A-Z]{2}", "IM1 1AA"),
    ("JE", r"JE\d\s?\d[A-Z]{2}", "JE1 1AA"),
    ("IE", r"[A-Z]\d{2}\s?[A-Z\d]{4}", "D02 X285"),
    # Nordic
    ("DK", r"\d{4}", "1000"),
    ("FI", r"\d{5}", "00100"),
    ("FO", r"FO-?\d{3}", "FO-100"),
    ("GL", r"\d{4}", "3900"),
    ("IS", r"\d{3}", "101"),
    ("NO", r"\d{4}", "0001"),
    ("SE", r"\d{3}\s?\d{2}", "111 22"),
    ("AX", r"\d{5}", "22100"),
    # Southern Europe
    ("ES", r"\d{5}", "28001"),
    ("GI", r"GX11\s?1[A-Z]{2}", "GX11 1AA"),
    ("IT", r"\d{5}", "00100"),
    ("MT", r"[A-Z]{3}\s?\d{4}", "VLT 1234"),
    ("PT", r"\d{4}-?\d{3}", "1000-001"),
    ("SM", r"4789\d", "47890"),
    ("VA", r"00120", "00120"),
    # Central Europe
    ("CZ", r"\d{3}\s?\d{2}", "110 00"),
    ("HU", r"\d{4}", "1011"),
    ("PL", r"\d{2}-?\d{3}", "00-001"),
    ("SK", r"\d{3}\s?\d{2}", "811 01"),
    # Eastern Europe
    ("BY", r"\d{6}", "220000"),
    ("MD", r"MD-?\d{4}", "MD-2000"),
    ("RU", r"\d{6}", "101000"),
    ("UA", r"\d{5}", "01001"),
    # Balkans
    ("AL", r"\d{4}", "1001"),
    ("BA", r"\d{5}", "71000"),
    ("BG", r"\d{4}", "1000"),
    ("GR", r"\d{3}\s?\d{2}", "104 32"),
    ("HR", r"\d{5}", "10000"),
    ("ME", r"\d{5}", "81000"),
    ("MK", r"\d{4}", "1000"),
    ("RO", r"\d{6}", "010001"),
    ("RS", r"\d{5,6}", "11000"),
    ("SI", r"\d{4}", "1000"),
    ("XK", r"\d{5}", "10000"),
    # Baltic States
    ("EE", r"\d{5}", "10111"),
    ("LT", r"LT-?\d{5}", "LT-01234"),
    ("LV", r"LV-?\d{4}", "LV-1050"),
    # =====================
    # NORTH AMERICA
    # =====================
    ("CA", r"[A-Z]\d[A-Z]\s?\d[A-Z]\d", "K1A 0B1"),
    ("MX", r"\d{5}", "06600"),
    ("US", r"\d{5}(-\d{4})?", "10001"),
    ("PR", r"\d{5}(-\d{4})?", "00901"),
    ("VI", r"\d{5}(-\d{4})?", "00801"),
    # Caribbean
    ("BB", r"BB\d{5}", "BB11000"),
    ("JM", r"JM[A-Z]{3}\d{2}", "JMAAW01"),
    ("TC", r"TKCA\s?1ZZ", "TKCA 1ZZ"),
    ("VG", r"VG\d{4}", "VG1110"),
    # Central America
    ("CR", r"\d{4,5}", "10101"),
    ("GT", r"\d{5}", "01001"),
    ("HN", r"\d{5}", "11101"),
    ("NI", r"\d{5}", "11001"),
    ("PA", r"\d{4}", "0801"),
    ("SV", r"\d{4}", "1101"),
    # =====================
    # SOUTH AMERICA
    # =====================
    ("AR", r"[A-Z]?\d{4}[A-Z]{3}", "C1425ABC"),
    ("BO", r"\d{4}", "0000"),
    ("BR", r"\d{5}-?\d{3}", "01310-100"),
    ("CL", r"\d{7}", "8320000"),
    ("CO", r"\d{6}", "110111"),
    ("EC", r"\d{6}", "170150"),
    ("GY", r"\d{6}", "000000"),
    ("PE", r"\d{5}", "15001"),
    ("PY", r"\d{4}", "1234"),
    ("UY", r"\d{5}", "11000"),
    ("VE", r"\d{4}(-?[A-Z])?", "1010"),
    # =====================
    # ASIA
    # =====================
    # East Asia
    ("CN", r"\d{6}", "100000"),
    ("HK", r"999077", "999077"),
    ("JP", r"\d{3}-?\d{4}", "100-0001"),
    ("KP", r"\d{6}", "999093"),
    ("KR", r"\d{5}", "03000"),
    ("MO", r"999078", "999078"),
    ("MN", r"\d{5}", "14200"),
    ("TW", r"\d{3}(-?\d{2,3})?", "100"),
    # Southeast Asia
    ("BN", r"[A-Z]{2}\d{4}", "KB1234"),
    ("ID", r"\d{5}", "10110"),
    ("KH", r"\d{5}", "12000"),
    ("LA", r"\d{5}", "01000"),
    ("MM", r"\d{5}", "11181"),
    ("MY", r"\d{5}", "50000"),
    ("PH", r"\d{4}", "1000"),
    ("SG", r"\d{6}", "018956"),
    ("TH", r"\d{5}", "10100"),
    ("VN", r"\d{6}", "100000"),
    # South Asia
    ("AF", r"\d{4}", "1001"),
    ("BD", r"\d{4}", "1000"),
    ("BT", r"\d{5}", "11001"),
    ("IN", r"\d{6}", "110001"),
    ("LK", r"\d{5}", "00100"),
    ("MV", r"\d{5}", "20002"),
    ("NP", r"\d{5}", "44600"),
    ("PK", r"\d{5}", "44000"),
    # Central Asia
    ("KG", r"\d{6}", "720001"),
    ("KZ", r"\d{6}", "010000"),
    ("TJ", r"\d{6}", "734000"),
    ("TM", r"\d{6}", "744000"),
    ("UZ", r"\d{6}", "100000"),
    # Middle East
    ("AE", r"\d{5}", "00000"),
    ("AM", r"\d{4}", "0001"),
    ("AZ", r"AZ\s?\d{4}", "AZ 1000"),
    ("BH", r"\d{3,4}", "317"),
    ("CY", r"\d{4}", "1010"),
    ("GE", r"\d{4}", "0100"),
    ("IL", r"\d{7}", "9100001"),
    ("IQ", r"\d{5}", "10001"),
    ("IR", r"\d{10}", "1234567890"),
    ("JO", r"\d{5}", "11110"),
    ("KW", r"\d{5}", "12345"),
    ("LB", r"\d{4}(\s?\d{4})?", "1100"),
    ("OM", r"\d{3}", "100"),
    ("PS", r"\d{3}", "600"),
    ("QA", r"\d{4,5}", "0000"),
    ("SA", r"\d{5}(-?\d{4})?", "12345"),
    ("SY", r"\d{5}", "00000"),
    ("TR", r"\d{5}", "34000"),
    ("YE", r"\d{5}", "00000"),
    # =====================
    # AFRICA
    # =====================
    ("DZ", r"\d{5}", "16000"),
    ("EG", r"\d{5}", "12411"),
    ("ET", r"\d{4}", "1000"),
    ("KE", r"\d{5}", "00100"),
    ("MA", r"\d{5}", "10000"),
    ("MU", r"\d{5}", "72000"),
    ("NG", r"\d{6}", "100001"),
    ("SN", r"\d{5}", "10000"),
    ("TN", r"\d{4}", "1000"),
    ("ZA", r"\d{4}", "2000"),
    ("ZW", r"\d{5}", "00263"),
    # =====================
    # OCEANIA
    # =====================
    ("AU", r"\d{4}", "2000"),
    ("FJ", r"\d{4}", "1000"),
    ("NC", r"\d{5}", "98800"),
    ("NZ", r"\d{4}", "6011"),
    ("PF", r"\d{5}", "98700"),
    ("PG", r"\d{3}", "111"),
    ("WS", r"WS\d{4}", "WS1234"),
)


class CountryPatternRegistry(Mapping[str, CountryPattern]):
    """
    Read-only lookup from country code to postal code grammar.

    Lookups are pure; the registry is built once and never mutated.
    """

    def __init__(self, table: tuple[tuple[str, str, str], ...] = _POSTAL_CODE_TABLE) -> None:
        patterns: dict[str, CountryPattern] = {}
        for country_code, source, example in table:
            code = country_code.upper()
            patterns[code] = CountryPattern(
                country_code=code,
                pattern=re.compile(source, re.IGNORECASE),
                example=example,
            )
        self._patterns = patterns

    def __getitem__(self, country_code: str) -> CountryPattern:
        return self._patterns[country_code.upper()]

    def __iter__(self) -> Iterator[str]:
        return iter(self._patterns)

    def __len__(self) -> int:
        return len(self._patterns)

    def __contains__(self, country_code: object) -> bool:
        return isinstance(country_code, str) and country_code.upper() in self._patterns

    def get(self, country_code: str | None, default: CountryPattern | None = None):  # type: ignore[override]
        if not country_code:
            return default
        return self._patterns.get(country_code.strip().upper(), default)

    def matches(self, country_code: str, value: str) -> bool:
        """
        Check a non-empty postal code against a country's grammar.

        Unknown countries always match. Callers gate empty values through
        requiredness before calling this.
        """
        country_pattern = self.get(country_code)
        if country_pattern is None:
            return True
        return country_pattern.matches(value)

    def example_for(self, country_code: str) -> str:
        """Placeholder example for a country, empty when unknown."""
        country_pattern = self.get(country_code)
        return country_pattern.example if country_pattern else ""

    def supported_countries(self) -> list[str]:
        return list(self._patterns)

    def to_manifest(self) -> dict[str, dict[str, str]]:
        """Pattern sources and examples in the client manifest shape."""
        return {
            code: {"pattern": cp.source, "flags": "i", "example": cp.example}
            for code, cp in self._patterns.items()
        }


# Process-wide registry, loaded once at import
postal_code_registry = CountryPatternRegistry()
