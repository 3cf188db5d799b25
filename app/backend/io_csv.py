"""
CSV import and parsing utilities.

This module handles:
1. Parsing weighing tables exported from balances or spreadsheets
2. Detecting decimal and column separators
3. Extracting masses with unit suffixes ("19,30 g", "0.62 ozt")
4. Normalizing data for further processing
"""
import csv
import io
import logging
import re
from typing import Any, Dict, List, Optional, Tuple, Union

from schemas import MassUnit

logger = logging.getLogger(__name__)

# Unit suffixes as they appear in balance exports, longest first
UNIT_ALIASES: List[Tuple[str, MassUnit]] = [
    ("ozt", MassUnit.TROY_OUNCE),
    ("dwt", MassUnit.PENNYWEIGHT),
    ("tola", MassUnit.TOLA),
    ("ct", MassUnit.CARAT),
    ("oz", MassUnit.OUNCE),
    ("g", MassUnit.GRAM),
]

_MASS_PATTERN = re.compile(r"^\s*(-?\d+(?:[.,]\d+)?)\s*([a-z]*)\s*$")


def detect_separators(content: bytes) -> Tuple[str, str]:
    """
    Detect decimal and column separators in CSV content.

    Args:
        content: Raw CSV content as bytes

    Returns:
        Tuple of (decimal_separator, column_separator)
    """
    decimal_sep = "."
    column_sep = ","

    sample = content[:min(5000, len(content))].decode("utf-8", errors="ignore")

    if ";" in sample:
        column_sep = ";"
        # With ';' between columns a comma can only be a decimal mark
        if re.search(r"\d+,\d+", sample):
            decimal_sep = ","
    elif "\t" in sample:
        column_sep = "\t"
        if re.search(r"\d+,\d+", sample):
            decimal_sep = ","

    return decimal_sep, column_sep


def extract_mass(text: str) -> Tuple[Optional[float], Optional[MassUnit]]:
    """
    Extract a mass and its unit from a cell like "19,30 g".

    Args:
        text: Cell text

    Returns:
        Tuple of (value, unit); unit is None when no suffix is present and
        both are None when the cell is not a mass
    """
    match = _MASS_PATTERN.match(text.strip().lower())
    if not match:
        return None, None

    value = float(match.group(1).replace(",", "."))
    suffix = match.group(2)
    if not suffix:
        return value, None
    for alias, unit in UNIT_ALIASES:
        if suffix == alias:
            return value, unit
    return None, None


def normalize_value(value: str, decimal_sep: str = ".") -> Union[float, str]:
    """
    Try to convert a string to a float, handling different decimal separators.

    Args:
        value: String value to convert
        decimal_sep: Decimal separator to use

    Returns:
        Float if conversion successful, otherwise the original (stripped) string
    """
    if not value or not isinstance(value, str):
        return value

    value = value.strip()
    if decimal_sep == ",":
        candidate = value.replace(",", ".")
    else:
        candidate = value

    try:
        return float(candidate)
    except ValueError:
        return value


def parse_weighings_csv(content: bytes) -> Dict[str, Any]:
    """
    Parse a weighing table with headers in the first row.

    Cells carrying a unit suffix are converted to plain numbers and the
    suffix is reported as the table's unit.

    Args:
        content: Raw CSV content as bytes

    Returns:
        Dict with keys:
            - columns: List of column names
            - rows: List of parsed data rows
            - unit: Detected mass unit (g if none found)
            - decimal_separator: Detected decimal separator (. or ,)
            - column_separator: Detected column separator (, ; or tab)
    """
    decimal_sep, column_sep = detect_separators(content)

    text = content.decode("utf-8-sig", errors="ignore")
    reader = csv.reader(io.StringIO(text), delimiter=column_sep)

    try:
        headers = [h.strip().strip('"') for h in next(reader)]
    except StopIteration:
        headers = []

    rows = []
    units = set()

    for row in reader:
        if not row or not any(cell.strip() for cell in row):
            continue

        row_dict: Dict[str, Union[float, str]] = {}
        for i, cell in enumerate(row):
            key = headers[i] if i < len(headers) else f"column_{i}"
            value = normalize_value(cell, decimal_sep)
            if isinstance(value, str):
                mass, unit = extract_mass(value)
                if mass is not None and unit is not None:
                    value = mass
                    units.add(unit)
            row_dict[key] = value

        rows.append(row_dict)

    if len(units) > 1:
        raise ValueError(f"Mixed mass units in one table: {sorted(u.value for u in units)}")
    unit = units.pop() if units else MassUnit.GRAM

    logger.debug("Parsed %d weighing rows (unit=%s)", len(rows), unit.value)

    return {
        "columns": headers,
        "rows": rows,
        "unit": unit,
        "decimal_separator": decimal_sep,
        "column_separator": column_sep,
    }
