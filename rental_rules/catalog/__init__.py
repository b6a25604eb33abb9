"""Wizard rule catalogs for the rental application and property listing wizards."""

from rental_rules.catalog.application import APPLICATION_WIZARD
from rental_rules.catalog.property import PROPERTY_WIZARD
from rental_rules.catalog.wizard import WizardDefinition, WizardStep

__all__ = ["APPLICATION_WIZARD", "PROPERTY_WIZARD", "WizardDefinition", "WizardStep"]
