"""
Alloy composition calculations for gold assays.

This module implements the physical model for two-metal gold alloys:
1. Density from a hydrostatic (buoyancy) weighing
2. Density validity against the gold/impurity mixing envelope
3. Pure gold mass from the volume-fraction mixing law
4. Purity percentage and karat
5. Forward alloying (pure gold -> target karat)
6. Reverse alloying (raise karat by adding pure gold)
7. Market value of the gold content

All masses are in grams and all densities in g/cm³.
"""
import logging
from typing import Dict, List, Optional, Sequence, Tuple, Union

import numpy as np

from models import DENSITY_TOLERANCE, FULL_KARAT, GOLD_DENSITY, WATER_DENSITY
from schemas import Metal, PurityMethod

logger = logging.getLogger(__name__)

STANDARD_KARATS = (24.0, 22.0, 18.0, 14.0, 12.0, 10.0, 9.0)


class InvalidParameterError(ValueError):
    """Raised when an alloying request has no physically sensible answer."""


def _finite(*values: float) -> bool:
    return bool(np.all(np.isfinite(values)))


def density_from_weighing(weight_in_air: float, weight_in_water: float) -> float:
    """
    Calculate density from a hydrostatic weighing (Archimedes' principle).

    density = W_air / ((W_air - W_water) / rho_water)

    Args:
        weight_in_air: Mass measured in air (g)
        weight_in_water: Mass measured fully submerged in water (g)

    Returns:
        Density in g/cm³, or 0.0 if the weighing cannot determine one
    """
    if not _finite(weight_in_air, weight_in_water):
        logger.debug("Non-finite weighing (%s, %s)", weight_in_air, weight_in_water)
        return 0.0
    if weight_in_water <= 0 or weight_in_air <= weight_in_water:
        logger.debug(
            "No positive displacement for weighing (%s, %s)", weight_in_air, weight_in_water
        )
        return 0.0

    displaced_volume = (weight_in_air - weight_in_water) / WATER_DENSITY
    return weight_in_air / displaced_volume


def density_bounds(impurity_density: float, tolerance: float = DENSITY_TOLERANCE) -> Tuple[float, float]:
    """Return the (lower, upper) density envelope for gold mixed with an impurity."""
    lower = min(GOLD_DENSITY, impurity_density) - tolerance
    upper = max(GOLD_DENSITY, impurity_density) + tolerance
    return lower, upper


def is_density_valid(density: float, impurity: Optional[Metal]) -> bool:
    """
    Check that a density is achievable by mixing pure gold with the impurity.

    This is the gate for every derived quantity: purity, karat and pure gold
    mass are meaningless when it fails.
    """
    if impurity is None or not impurity.name:
        return False
    if not _finite(density) or density <= 0:
        return False
    lower, upper = density_bounds(impurity.density)
    return lower <= density <= upper


def _clamp_mass(mass: float, total_mass: float) -> float:
    # Densities inside the tolerance band but beyond the impurity give a
    # slightly negative fraction.
    if not _finite(mass):
        return 0.0
    return min(max(mass, 0.0), total_mass)


def pure_gold_mass(total_mass: float, density: float, impurity: Optional[Metal]) -> float:
    """
    Calculate the pure gold content using the volume-fraction mixing law.

    V = m / rho
    phi_gold = (rho - rho_imp) / (rho_gold - rho_imp)
    m_gold = phi_gold * V * rho_gold

    Args:
        total_mass: Total mass of the item (g)
        density: Measured density of the item (g/cm³)
        impurity: The other metal in the alloy

    Returns:
        Pure gold mass in g, or 0.0 if the density is invalid or mass non-positive
    """
    if not is_density_valid(density, impurity) or not _finite(total_mass) or total_mass <= 0:
        return 0.0
    if abs(density - GOLD_DENSITY) < DENSITY_TOLERANCE:
        return total_mass

    denominator = GOLD_DENSITY - impurity.density
    if denominator == 0:
        return 0.0

    object_volume = total_mass / density
    volume_fraction_gold = (density - impurity.density) / denominator
    return _clamp_mass(volume_fraction_gold * object_volume * GOLD_DENSITY, total_mass)


def pure_gold_mass_from_mass_fraction(
    total_mass: float, density: float, impurity: Optional[Metal]
) -> float:
    """
    Calculate the pure gold content from reciprocal densities.

    w_gold = (1/rho - 1/rho_imp) / (1/rho_gold - 1/rho_imp)
    m_gold = m * w_gold

    Algebraically identical to `pure_gold_mass` since w = phi * rho_gold / rho.
    """
    if not is_density_valid(density, impurity) or not _finite(total_mass) or total_mass <= 0:
        return 0.0
    if abs(density - GOLD_DENSITY) < DENSITY_TOLERANCE:
        return total_mass

    denominator = 1 / GOLD_DENSITY - 1 / impurity.density
    if denominator == 0:
        return 0.0

    mass_fraction = (1 / density - 1 / impurity.density) / denominator
    return _clamp_mass(total_mass * mass_fraction, total_mass)


def purity_percentage(gold_mass: float, total_mass: float) -> float:
    """Purity by mass in percent; 0.0 if either mass is non-positive."""
    if not _finite(gold_mass, total_mass) or gold_mass <= 0 or total_mass <= 0:
        return 0.0
    return gold_mass / total_mass * 100.0


def karats_from_purity(purity: float) -> float:
    """Convert purity percentage to karats."""
    return purity * FULL_KARAT / 100.0


def purity_from_karats(karat: float) -> float:
    """Convert karats to purity percentage."""
    return karat / FULL_KARAT * 100.0


def expected_density(karat: float, impurity: Metal) -> float:
    """
    Density of an ideal gold/impurity mixture at the given karat.

    1/rho = w/rho_gold + (1 - w)/rho_imp
    """
    if not 0 <= karat <= FULL_KARAT:
        raise InvalidParameterError(f"Karat must be between 0 and {FULL_KARAT:g}, got {karat}")
    w = karat / FULL_KARAT
    return 1 / (w / GOLD_DENSITY + (1 - w) / impurity.density)


def karat_reference_table(
    impurity: Optional[Metal] = None,
    karats: Sequence[float] = STANDARD_KARATS,
) -> List[Dict[str, Optional[float]]]:
    """
    Build the karat reference table.

    Each row holds karat, purity percentage, fineness (parts per thousand) and,
    when an impurity is given, the expected ideal-mixture density.
    """
    table = []
    for karat in karats:
        purity = purity_from_karats(karat)
        table.append({
            "karat": karat,
            "purity_percentage": purity,
            "fineness": purity * 10.0,
            "expected_density": expected_density(karat, impurity) if impurity is not None else None,
        })
    return table


def alloy_pure_gold(gold_mass: float, target_karat: float) -> Dict[str, float]:
    """
    Calculate the impurity mass needed to bring pure gold down to a target karat.

    p = K / 24
    m_imp = m_gold * (1/p - 1)

    Args:
        gold_mass: Mass of 24K gold (g)
        target_karat: Desired karat, strictly between 0 and 24

    Returns:
        Dictionary with target_purity, impurity_mass and total_alloy_mass

    Raises:
        InvalidParameterError: if the inputs have no solution
    """
    if not _finite(gold_mass, target_karat):
        raise InvalidParameterError("Gold mass and target karat must be finite numbers")
    if gold_mass <= 0:
        raise InvalidParameterError(f"Pure gold mass must be positive, got {gold_mass}")
    if not 0 < target_karat < FULL_KARAT:
        raise InvalidParameterError(
            f"Target karat must be greater than 0 and less than {FULL_KARAT:g}, got {target_karat}"
        )

    target_purity = target_karat / FULL_KARAT
    impurity_mass = gold_mass * (1.0 / target_purity - 1.0)
    total_alloy_mass = gold_mass + impurity_mass
    if not _finite(impurity_mass, total_alloy_mass):
        raise InvalidParameterError("Resulting alloy mass is too large to represent")
    return {
        "target_purity": target_purity,
        "impurity_mass": impurity_mass,
        "total_alloy_mass": total_alloy_mass,
    }


def raise_karat(initial_mass: float, initial_karat: float, target_karat: float) -> Dict[str, float]:
    """
    Calculate the pure gold to add to an alloy to reach a higher karat.

    m_add = m * (p_target - p_initial) / (1 - p_target)

    Args:
        initial_mass: Mass of the existing alloy (g)
        initial_karat: Karat of the existing alloy
        target_karat: Desired karat, above initial_karat and below 24

    Returns:
        Dictionary with initial_purity, target_purity, added_gold_mass and final_mass

    Raises:
        InvalidParameterError: if the inputs have no solution
    """
    if not _finite(initial_mass, initial_karat, target_karat):
        raise InvalidParameterError("Mass and karat values must be finite numbers")
    if initial_mass <= 0:
        raise InvalidParameterError(f"Initial mass must be positive, got {initial_mass}")
    if initial_karat < 0:
        raise InvalidParameterError(f"Initial karat cannot be negative, got {initial_karat}")
    if target_karat <= initial_karat:
        raise InvalidParameterError(
            "Target karat must be higher than the initial karat; adding pure gold cannot lower it"
        )
    if target_karat >= FULL_KARAT:
        raise InvalidParameterError(
            f"Target karat must be less than {FULL_KARAT:g}; no finite gold addition reaches it"
        )

    initial_purity = initial_karat / FULL_KARAT
    target_purity = target_karat / FULL_KARAT
    added_gold_mass = initial_mass * (target_purity - initial_purity) / (1.0 - target_purity)
    final_mass = initial_mass + added_gold_mass
    if not _finite(added_gold_mass, final_mass):
        raise InvalidParameterError("Resulting alloy mass is too large to represent")
    return {
        "initial_purity": initial_purity,
        "target_purity": target_purity,
        "added_gold_mass": added_gold_mass,
        "final_mass": final_mass,
    }


def market_value(gold_mass: float, price_per_gram: float) -> float:
    """Value of the gold content; 0.0 when no price (or no gold) is available."""
    if not _finite(gold_mass, price_per_gram) or gold_mass <= 0 or price_per_gram <= 0:
        return 0.0
    value = gold_mass * price_per_gram
    return value if _finite(value) else 0.0


class MeasuredItem:
    """
    One alloy sample under analysis.

    Created per calculation, populated either from a weighing pair or from a
    known density and mass, then queried for derived results.
    """

    def __init__(self, impurity: Optional[Metal] = None):
        self.impurity = impurity
        self.total_mass = 0.0
        self.density = 0.0

    def set_impurity(self, impurity: Metal) -> None:
        self.impurity = impurity

    def set_total_mass(self, mass: float) -> None:
        self.total_mass = mass

    def set_density(self, density: float) -> None:
        self.density = density

    def calculate_density_from_weight(self, weight_in_air: float, weight_in_water: float) -> float:
        """Set density (and total mass, on success) from a weighing pair."""
        self.density = density_from_weighing(weight_in_air, weight_in_water)
        if self.density > 0:
            self.total_mass = weight_in_air
        return self.density

    def is_density_valid(self) -> bool:
        return is_density_valid(self.density, self.impurity)

    def pure_gold_mass(self, method: Union[PurityMethod, str] = PurityMethod.VOLUME) -> float:
        if PurityMethod(method) == PurityMethod.MASS:
            return pure_gold_mass_from_mass_fraction(self.total_mass, self.density, self.impurity)
        return pure_gold_mass(self.total_mass, self.density, self.impurity)

    def purity_percentage(self, method: Union[PurityMethod, str] = PurityMethod.VOLUME) -> float:
        return purity_percentage(self.pure_gold_mass(method), self.total_mass)

    def karats(self, method: Union[PurityMethod, str] = PurityMethod.VOLUME) -> float:
        return karats_from_purity(self.purity_percentage(method))

    def analyze(
        self,
        price_per_gram: float = 0.0,
        method: Union[PurityMethod, str] = PurityMethod.VOLUME,
    ) -> Dict[str, Union[float, bool]]:
        """
        Compute every derived quantity of the item.

        Returns:
            Dictionary with density, density_valid, total_mass, pure_gold_mass,
            purity_percentage, karats and market_value
        """
        gold_mass = self.pure_gold_mass(method)
        purity = purity_percentage(gold_mass, self.total_mass)
        return {
            "density": self.density if _finite(self.density) else 0.0,
            "density_valid": self.is_density_valid(),
            "total_mass": self.total_mass if _finite(self.total_mass) else 0.0,
            "pure_gold_mass": gold_mass,
            "purity_percentage": purity,
            "karats": karats_from_purity(purity),
            "market_value": market_value(gold_mass, price_per_gram),
        }


def analyze_weighings(
    weights_in_air: Sequence[float],
    weights_in_water: Sequence[float],
    impurity: Metal,
    price_per_gram: float = 0.0,
) -> List[Dict[str, Union[float, bool]]]:
    """
    Analyse a series of hydrostatic weighings against one impurity.

    Args:
        weights_in_air: Masses in air (g)
        weights_in_water: Matching submerged masses (g)
        impurity: The other metal in the alloy
        price_per_gram: Gold price per gram (0 for no valuation)

    Returns:
        One analysis dictionary per weighing
    """
    if len(weights_in_air) != len(weights_in_water):
        raise ValueError("weights_in_air and weights_in_water must have the same length")

    results = []
    for w_air, w_water in zip(weights_in_air, weights_in_water):
        item = MeasuredItem(impurity)
        item.calculate_density_from_weight(w_air, w_water)
        results.append(item.analyze(price_per_gram))
    return results
