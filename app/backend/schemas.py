"""
Pydantic models for API request/response schemas.
"""
from enum import Enum
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, Field, ConfigDict


class Metal(BaseModel):
    """A reference metal: display name and density."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="Metal name")
    density: float = Field(..., gt=0, allow_inf_nan=False, description="Density (g/cm³)")


class MassUnit(str, Enum):
    """Mass units accepted by the API (converted to grams before analysis)."""

    GRAM = "g"
    TROY_OUNCE = "ozt"
    OUNCE = "oz"
    PENNYWEIGHT = "dwt"
    TOLA = "tola"
    CARAT = "ct"


class PurityMethod(str, Enum):
    """Mixing-law derivation used for pure-gold mass."""

    VOLUME = "volume"
    MASS = "mass"


class WeighingRequest(BaseModel):
    """Hydrostatic weighing of one item."""

    weight_in_air: float = Field(..., ge=0, description="Weight in air")
    weight_in_water: float = Field(..., ge=0, description="Weight fully submerged in water")
    unit: MassUnit = Field(MassUnit.GRAM, description="Unit of both weights")
    impurity: Metal = Field(..., description="The other metal in the alloy")
    price_per_gram: Optional[float] = Field(
        None, ge=0, description="Gold price per price_unit; falls back to the configured default"
    )
    price_unit: MassUnit = Field(MassUnit.GRAM, description="Mass unit the price is quoted per")


class DensityRequest(BaseModel):
    """Item with a known density and total mass."""

    density: float = Field(..., ge=0, description="Density (g/cm³)")
    total_mass: float = Field(..., gt=0, description="Total mass of the item")
    unit: MassUnit = Field(MassUnit.GRAM, description="Unit of total_mass")
    impurity: Metal = Field(..., description="The other metal in the alloy")
    method: PurityMethod = Field(PurityMethod.VOLUME, description="Mixing-law derivation")
    price_per_gram: Optional[float] = Field(
        None, ge=0, description="Gold price per price_unit; falls back to the configured default"
    )
    price_unit: MassUnit = Field(MassUnit.GRAM, description="Mass unit the price is quoted per")


class PurityResult(BaseModel):
    """Result of a purity analysis."""

    impurity: Metal = Field(..., description="Impurity used for the analysis")
    density: float = Field(..., description="Density (g/cm³), 0 if undetermined")
    density_valid: bool = Field(..., description="Density lies in the two-metal envelope")
    total_mass: float = Field(..., description="Total mass (g)")
    pure_gold_mass: float = Field(..., description="Pure gold content (g)")
    purity_percentage: float = Field(..., description="Purity by mass (%)")
    karats: float = Field(..., description="Karat value")
    market_value: Optional[float] = Field(None, description="Value of the gold content, if a price is set")


class AlloyRequest(BaseModel):
    """Make a target-karat alloy from pure gold."""

    pure_gold_mass: float = Field(..., gt=0, description="Mass of 24K gold")
    target_karat: float = Field(..., description="Target karat (< 24)")
    unit: MassUnit = Field(MassUnit.GRAM, description="Unit of pure_gold_mass")
    impurity: Metal = Field(..., description="Metal to alloy with")


class AlloyResult(BaseModel):
    """Masses for a forward alloying calculation (grams)."""

    impurity: Metal
    target_karat: float
    target_purity: float = Field(..., description="Target purity as a fraction")
    pure_gold_mass: float
    impurity_mass: float = Field(..., description="Impurity mass to add (g)")
    total_alloy_mass: float = Field(..., description="Resulting alloy mass (g)")


class RaiseKaratRequest(BaseModel):
    """Raise the karat of an existing alloy by adding pure gold."""

    initial_mass: float = Field(..., gt=0, description="Mass of the existing alloy")
    initial_karat: float = Field(..., description="Karat of the existing alloy")
    target_karat: float = Field(..., description="Desired karat")
    unit: MassUnit = Field(MassUnit.GRAM, description="Unit of initial_mass")


class RaiseKaratResult(BaseModel):
    """Masses for a reverse alloying calculation (grams)."""

    initial_mass: float
    initial_karat: float
    target_karat: float
    initial_purity: float
    target_purity: float
    added_gold_mass: float = Field(..., description="Pure gold to add (g)")
    final_mass: float = Field(..., description="Resulting alloy mass (g)")


class KaratRow(BaseModel):
    """One line of the karat reference table."""

    karat: float
    purity_percentage: float
    fineness: float = Field(..., description="Parts per thousand")
    expected_density: Optional[float] = Field(
        None, description="Ideal-mixture density with the selected impurity (g/cm³)"
    )


class ColumnMapping(BaseModel):
    """Maps CSV columns to expected fields."""

    weight_in_air: str = Field(..., description="Column name for weight in air")
    weight_in_water: str = Field(..., description="Column name for weight in water")
    label: Optional[str] = Field(None, description="Optional column identifying the item")


class ImportResponse(BaseModel):
    """Response for CSV import endpoint."""

    columns: List[str] = Field(..., description="Detected column names")
    rows: List[Dict[str, Union[float, str]]] = Field(..., description="Parsed data rows")
    unit: MassUnit = Field(MassUnit.GRAM, description="Detected mass unit")
    decimal_separator: str = Field(".", description="Detected decimal separator (. or ,)")
    column_separator: str = Field(",", description="Detected column separator (, or ;)")


class BatchWeighingRequest(BaseModel):
    """Analyse every row of an imported weighing table."""

    column_mapping: ColumnMapping = Field(..., description="Column mapping")
    rows: List[Dict[str, Union[float, str]]] = Field(..., description="Data rows")
    unit: MassUnit = Field(MassUnit.GRAM, description="Unit of the weights")
    impurity: Metal = Field(..., description="The other metal in the alloy")
    price_per_gram: Optional[float] = Field(None, ge=0, description="Gold price per price_unit")
    price_unit: MassUnit = Field(MassUnit.GRAM, description="Mass unit the price is quoted per")


class BatchRow(PurityResult):
    """Purity result tagged with its source row."""

    row_index: int = Field(..., description="Index of the row in the request")
    label: Optional[str] = Field(None, description="Item label, if mapped")


class Constants(BaseModel):
    """Physical constants, metal catalog and unit factors."""

    gold_density: float = Field(19.32, description="Pure gold density (g/cm³)")
    water_density: float = Field(1.0, description="Water density (g/cm³)")
    density_tolerance: float = Field(0.05, description="Absolute density tolerance (g/cm³)")
    metals: List[Metal] = Field(..., description="Default impurity metals")
    grams_per_unit: Dict[MassUnit, float] = Field(..., description="Mass unit factors to grams")
