"""
Main FastAPI application for the gold assay toolkit.
Defines API endpoints for purity analysis, alloying calculations and CSV import.
"""
import logging
import os
from typing import List, Optional

from fastapi import FastAPI, File, HTTPException, UploadFile
from fastapi.middleware.cors import CORSMiddleware
import uvicorn

import alloy
from io_csv import parse_weighings_csv
from logging_config import setup_logging
from models import get_constants as _get_constants_data
from models import METALS_DATA, get_metal, mass_to_grams, price_per_gram
from schemas import (
    AlloyRequest,
    AlloyResult,
    BatchRow,
    BatchWeighingRequest,
    Constants,
    DensityRequest,
    ImportResponse,
    KaratRow,
    MassUnit,
    Metal,
    PurityMethod,
    PurityResult,
    RaiseKaratRequest,
    RaiseKaratResult,
    WeighingRequest,
)

# Environment configuration
APP_ENV = os.getenv("APP_ENV", "dev")
MAX_UPLOAD_MB = int(os.getenv("MAX_UPLOAD_MB", "10"))
ORIGIN = os.getenv("ORIGIN", "http://localhost:5173")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("LOG_FILE") or None
DEFAULT_PRICE_PER_GRAM = float(os.getenv("DEFAULT_PRICE_PER_GRAM", "0"))

setup_logging(LOG_LEVEL, LOG_FILE)
logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="Gold Assay API",
    description="API for gold alloy purity and alloying calculations",
    version="0.1.0",
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=[ORIGIN],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _resolve_price(price: Optional[float], unit: MassUnit = MassUnit.GRAM) -> float:
    if price is None:
        return DEFAULT_PRICE_PER_GRAM
    return price_per_gram(price, unit)


def _purity_result(
    item: alloy.MeasuredItem, price: float, method: PurityMethod = PurityMethod.VOLUME
) -> PurityResult:
    analysis = item.analyze(price, method)
    if not analysis["density_valid"]:
        logger.warning(
            "Inconclusive: density %.3f g/cm³ is outside the range for gold with %s",
            analysis["density"],
            item.impurity.name,
        )
    else:
        logger.info(
            "Density %.3f g/cm³ with %s: %.2f%% (%.2fK), %.3f g pure gold",
            analysis["density"],
            item.impurity.name,
            analysis["purity_percentage"],
            analysis["karats"],
            analysis["pure_gold_mass"],
        )
    return PurityResult(
        impurity=item.impurity,
        density=analysis["density"],
        density_valid=analysis["density_valid"],
        total_mass=analysis["total_mass"],
        pure_gold_mass=analysis["pure_gold_mass"],
        purity_percentage=analysis["purity_percentage"],
        karats=analysis["karats"],
        market_value=analysis["market_value"] if price > 0 else None,
    )


# API endpoints
@app.get("/api/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "ok", "version": app.version}


@app.get("/api/constants", response_model=Constants)
async def get_constants():
    """Return physical constants, the metal catalog and unit factors."""
    return _get_constants_data()


@app.get("/api/metals", response_model=List[Metal])
async def list_metals():
    """List the default impurity metals."""
    return METALS_DATA


@app.get("/api/karats", response_model=List[KaratRow])
async def karat_table(impurity: Optional[str] = None):
    """
    Return the karat reference table.

    If an impurity name is given, each row includes the expected density of
    the ideal gold/impurity mixture.
    """
    metal = None
    if impurity:
        try:
            metal = get_metal(impurity)
        except KeyError as exc:
            raise HTTPException(status_code=404, detail=f"Unknown metal: {impurity}") from exc
    return [KaratRow(**row) for row in alloy.karat_reference_table(metal)]


@app.post("/api/purity/weight", response_model=PurityResult)
async def purity_from_weight(request: WeighingRequest):
    """
    Calculate purity from a hydrostatic weighing.

    Weighings that do not determine a density are returned with density 0
    and density_valid false.
    """
    item = alloy.MeasuredItem(request.impurity)
    item.calculate_density_from_weight(
        mass_to_grams(request.weight_in_air, request.unit),
        mass_to_grams(request.weight_in_water, request.unit),
    )
    return _purity_result(item, _resolve_price(request.price_per_gram, request.price_unit))


@app.post("/api/purity/density", response_model=PurityResult)
async def purity_from_density(request: DensityRequest):
    """Calculate purity from a known density and total mass."""
    item = alloy.MeasuredItem(request.impurity)
    item.set_density(request.density)
    item.set_total_mass(mass_to_grams(request.total_mass, request.unit))
    price = _resolve_price(request.price_per_gram, request.price_unit)
    return _purity_result(item, price, request.method)


@app.post("/api/import", response_model=ImportResponse)
async def import_csv(file: UploadFile = File(...)):
    """
    Parse an uploaded weighing table and return detected columns and rows.

    Handles decimal commas, ';' or tab separated files and unit suffixes.
    """
    if not file.filename or not file.filename.lower().endswith((".csv", ".txt")):
        raise HTTPException(status_code=400, detail="Invalid file type. Please upload a CSV file.")

    content = await file.read()
    file_size_mb = len(content) / (1024 * 1024)

    if file_size_mb > MAX_UPLOAD_MB:
        raise HTTPException(
            status_code=400,
            detail=f"File too large. Maximum size is {MAX_UPLOAD_MB} MB."
        )
    try:
        result = parse_weighings_csv(content)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=f"CSV parsing failed: {exc}") from exc

    logger.info("Imported %d weighing rows from %s", len(result["rows"]), file.filename)
    return result


@app.post("/api/purity/batch", response_model=List[BatchRow])
async def purity_batch(request: BatchWeighingRequest):
    """Analyse every row of an imported weighing table."""
    mapping = request.column_mapping
    weights_in_air = []
    weights_in_water = []
    labels = []

    for index, row in enumerate(request.rows):
        if mapping.weight_in_air not in row or mapping.weight_in_water not in row:
            raise HTTPException(
                status_code=400,
                detail=f"Missing required columns in row {index}. Check column mapping."
            )

        w_air = row[mapping.weight_in_air]
        w_water = row[mapping.weight_in_water]
        if not isinstance(w_air, (int, float)) or not isinstance(w_water, (int, float)):
            raise HTTPException(
                status_code=400,
                detail=f"Non-numeric weight in row {index}."
            )

        weights_in_air.append(mass_to_grams(w_air, request.unit))
        weights_in_water.append(mass_to_grams(w_water, request.unit))
        labels.append(str(row[mapping.label]) if mapping.label and mapping.label in row else None)

    price = _resolve_price(request.price_per_gram, request.price_unit)
    analyses = alloy.analyze_weighings(weights_in_air, weights_in_water, request.impurity, price)

    inconclusive = sum(1 for a in analyses if not a["density_valid"])
    logger.info(
        "Batch of %d weighings with %s, %d inconclusive",
        len(analyses), request.impurity.name, inconclusive,
    )

    return [
        BatchRow(
            row_index=index,
            label=label,
            impurity=request.impurity,
            density=analysis["density"],
            density_valid=analysis["density_valid"],
            total_mass=analysis["total_mass"],
            pure_gold_mass=analysis["pure_gold_mass"],
            purity_percentage=analysis["purity_percentage"],
            karats=analysis["karats"],
            market_value=analysis["market_value"] if price > 0 else None,
        )
        for index, (label, analysis) in enumerate(zip(labels, analyses))
    ]


@app.post("/api/alloy/forward", response_model=AlloyResult)
async def alloy_forward(request: AlloyRequest):
    """
    Calculate how much impurity to add to pure gold for a target karat.

      p     = K / 24
      m_imp = m_gold · (1/p − 1)
    """
    gold_mass = mass_to_grams(request.pure_gold_mass, request.unit)
    try:
        result = alloy.alloy_pure_gold(gold_mass, request.target_karat)
    except alloy.InvalidParameterError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    logger.info(
        "%.3f g pure gold -> %gK: add %.3f g %s",
        gold_mass, request.target_karat, result["impurity_mass"], request.impurity.name,
    )
    return AlloyResult(
        impurity=request.impurity,
        target_karat=request.target_karat,
        pure_gold_mass=gold_mass,
        **result,
    )


@app.post("/api/alloy/reverse", response_model=RaiseKaratResult)
async def alloy_reverse(request: RaiseKaratRequest):
    """
    Calculate how much pure gold raises an alloy to a target karat.

      m_add = m · (p_target − p_initial) / (1 − p_target)
    """
    initial_mass = mass_to_grams(request.initial_mass, request.unit)
    try:
        result = alloy.raise_karat(initial_mass, request.initial_karat, request.target_karat)
    except alloy.InvalidParameterError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    logger.info(
        "%.3f g %gK -> %gK: add %.3f g pure gold",
        initial_mass, request.initial_karat, request.target_karat, result["added_gold_mass"],
    )
    return RaiseKaratResult(
        initial_mass=initial_mass,
        initial_karat=request.initial_karat,
        target_karat=request.target_karat,
        **result,
    )


if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=APP_ENV == "dev")
