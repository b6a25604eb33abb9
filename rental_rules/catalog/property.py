"""
Property listing wizard rules.

Draft saves accept any partially filled listing (type-only checks); the
strict composition is what publishing a listing requires. Image uploads are
validated by the storage layer and have no rules here.
"""

from rental_rules.catalog.wizard import WizardDefinition
from rental_rules.domain.enums import DataType, DateWindow, ErrorKind, FormatKind
from rental_rules.rules.model import RuleSet, field_rule

PROPERTY_TYPES = ("apartment", "house", "room", "commercial", "industrial", "parking")

SUBTYPES_BY_TYPE: dict[str, tuple[str, ...]] = {
    "apartment": ("studio", "loft", "duplex", "triplex", "penthouse", "serviced"),
    "house": ("detached", "semi-detached", "villa", "bungalow"),
    "room": ("private_room", "student_room", "co-living"),
    "commercial": ("office", "retail"),
    "industrial": ("warehouse", "factory"),
    "parking": ("garage", "indoor_spot", "outdoor_spot"),
}

ALL_SUBTYPES = tuple(s for subtypes in SUBTYPES_BY_TYPE.values() for s in subtypes)

ENERGY_CLASSES = ("A+", "A", "B", "C", "D", "E", "F", "G")
THERMAL_INSULATION_CLASSES = ("A", "B", "C", "D", "E", "F", "G")
HEATING_TYPES = ("gas", "electric", "district", "wood", "heat_pump", "other")
CURRENCIES = ("eur", "usd", "gbp", "chf")


TYPE = RuleSet(
    "type",
    [
        field_rule(
            "type",
            DataType.ENUM,
            required=True,
            label="Property type",
            enum_values=PROPERTY_TYPES,
            messages={ErrorKind.ENUM_MISMATCH: "Please select a valid property type"},
        ),
        field_rule(
            "subtype",
            DataType.ENUM,
            required=True,
            label="Property subtype",
            enum_values=ALL_SUBTYPES,
            enum_depends_on="type",
            enum_map=SUBTYPES_BY_TYPE,
            messages={
                ErrorKind.ENUM_MISMATCH: "Please select a valid subtype for the selected property type"
            },
        ),
    ],
)

LOCATION = RuleSet(
    "location",
    [
        field_rule("house_number", required=True, length=20, label="House/building number"),
        field_rule("street_name", required=True, length=255),
        field_rule("street_line2", length=255, label="Address line 2"),
        field_rule("city", required=True, length=100),
        field_rule("state", length=100, label="State/province"),
        field_rule(
            "postal_code",
            required=True,
            length=20,
            format=FormatKind.POSTAL_CODE,
            format_source="country",
        ),
        field_rule(
            "country",
            required=True,
            exact_length=2,
            messages={ErrorKind.OUT_OF_RANGE: "Country code must be exactly 2 characters"},
        ),
    ],
)

SPECS = RuleSet(
    "specs",
    [
        field_rule(
            "bedrooms",
            DataType.INTEGER,
            required=True,
            label="Number of bedrooms",
            min=0,
            max=20,
        ),
        field_rule(
            "bathrooms",
            DataType.NUMBER,
            required=True,
            label="Number of bathrooms",
            min=0,
            max=10,
        ),
        field_rule("size", DataType.NUMBER, min=1, max=100000),
        field_rule("floor_level", DataType.INTEGER, min=-10, max=200),
        field_rule("has_elevator", DataType.BOOLEAN),
        field_rule("year_built", DataType.INTEGER, min=1800),
        field_rule("parking_spots_interior", DataType.INTEGER, min=0, max=20),
        field_rule("parking_spots_exterior", DataType.INTEGER, min=0, max=20),
        field_rule("balcony_size", DataType.NUMBER, min=0, max=10000),
        field_rule("land_size", DataType.NUMBER, min=0, max=1000000),
    ],
)

AMENITIES = RuleSet(
    "amenities",
    [
        field_rule(name, DataType.BOOLEAN)
        for name in (
            "kitchen_equipped",
            "kitchen_separated",
            "has_cellar",
            "has_laundry",
            "has_fireplace",
            "has_air_conditioning",
            "has_garden",
            "has_rooftop",
        )
    ],
)

ENERGY = RuleSet(
    "energy",
    [
        field_rule("energy_class", DataType.ENUM, enum_values=ENERGY_CLASSES),
        field_rule(
            "thermal_insulation_class", DataType.ENUM, enum_values=THERMAL_INSULATION_CLASSES
        ),
        field_rule("heating_type", DataType.ENUM, enum_values=HEATING_TYPES),
    ],
)

PRICING = RuleSet(
    "pricing",
    [
        field_rule(
            "rent_amount",
            DataType.NUMBER,
            required=True,
            min=0.01,
            max=999999.99,
        ),
        field_rule("rent_currency", DataType.ENUM, required=True, enum_values=CURRENCIES),
        field_rule(
            "available_date",
            DataType.DATE,
            date_window=DateWindow.TODAY_OR_FUTURE,
        ),
    ],
)

MEDIA = RuleSet(
    "media",
    [
        field_rule("title", required=True, length=255),
        field_rule("description", length=10000),
        field_rule("main_image_index", DataType.INTEGER, min=0),
    ],
)

PROPERTY_OVERLAY = RuleSet(
    "property_tracking",
    [field_rule("wizard_step", DataType.INTEGER, min=1, max=8)],
)


PROPERTY_WIZARD = WizardDefinition(
    "property",
    steps=[
        ("type", TYPE),
        ("location", LOCATION),
        ("specs", SPECS),
        ("amenities", AMENITIES),
        ("energy", ENERGY),
        ("pricing", PRICING),
        ("media", MEDIA),
    ],
    overlay=PROPERTY_OVERLAY,
)
