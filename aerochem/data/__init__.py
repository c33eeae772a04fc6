"""Data modules - built-in species, thermodynamic data and mechanisms."""

from .air_species import (
    AIR5,
    ELEMENT_DATA,
    MECHANISMS,
    NASA7_DATA,
    NITROGEN_IONIZED,
    RRHO_DATA,
    SPECIES_DATA,
)

__all__ = [
    "AIR5",
    "ELEMENT_DATA",
    "MECHANISMS",
    "NASA7_DATA",
    "NITROGEN_IONIZED",
    "RRHO_DATA",
    "SPECIES_DATA",
]
