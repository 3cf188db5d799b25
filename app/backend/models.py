"""
Physical constants, metal catalog and unit data for alloy assays.

This module provides access to:
1. Physical constants (gold and water density, density tolerance)
2. The default impurity metal catalog
3. Mass unit factors and scalar conversions to grams
4. Helper functions to fetch this data as pydantic models
"""
from typing import Dict, List

from schemas import Constants, MassUnit, Metal


# Physical constants
GOLD_DENSITY = 19.32  # g/cm³, pure 24K gold
WATER_DENSITY = 1.0  # g/cm³
DENSITY_TOLERANCE = 0.05  # g/cm³, absolute measurement tolerance
FULL_KARAT = 24.0

# Default impurity metals: name and density (g/cm³)
METALS_DATA: List[Metal] = [
    Metal(name="Copper", density=8.96),
    Metal(name="Silver", density=10.49),
    Metal(name="Platinum", density=21.45),
    Metal(name="Palladium", density=12.02),
    Metal(name="Nickel", density=8.91),
    Metal(name="Zinc", density=7.14),
]

# Grams per unit of mass
GRAMS_PER_UNIT: Dict[MassUnit, float] = {
    MassUnit.GRAM: 1.0,
    MassUnit.TROY_OUNCE: 31.1034768,
    MassUnit.OUNCE: 28.3495,
    MassUnit.PENNYWEIGHT: 1.55517,
    MassUnit.TOLA: 11.6638038,
    MassUnit.CARAT: 0.2,
}


def get_metal(name: str) -> Metal:
    """
    Look up a catalog metal by name (case-insensitive).

    Raises:
        KeyError: if the metal is not in the catalog
    """
    key = name.strip().lower()
    for metal in METALS_DATA:
        if metal.name.lower() == key:
            return metal
    raise KeyError(name)


def mass_to_grams(value: float, unit: MassUnit = MassUnit.GRAM) -> float:
    """Convert a mass in `unit` to grams."""
    return value * GRAMS_PER_UNIT[MassUnit(unit)]


def price_per_gram(price: float, unit: MassUnit = MassUnit.GRAM) -> float:
    """
    Convert a price quoted per `unit` of mass to a price per gram.

    e.g. a spot price per troy ounce divided by 31.1034768.
    """
    return price / GRAMS_PER_UNIT[MassUnit(unit)]


def get_constants() -> Constants:
    """
    Return physical constants, metal catalog and unit factors as a pydantic model.

    This function is used by the /api/constants endpoint.
    """
    return Constants(
        gold_density=GOLD_DENSITY,
        water_density=WATER_DENSITY,
        density_tolerance=DENSITY_TOLERANCE,
        metals=METALS_DATA,
        grams_per_unit=GRAMS_PER_UNIT,
    )
