"""
Tests for CSV import and parsing utilities in io_csv.py.
"""
import pytest
from io_csv import detect_separators, extract_mass, normalize_value, parse_weighings_csv
from schemas import MassUnit


def test_parse_weighings_csv():
    """Test parsing a plain weighing table with headers in the first row."""
    csv_content = """item,weight_in_air,weight_in_water
ring,19.30,18.00
chain,12.5,11.8
"""

    result = parse_weighings_csv(csv_content.encode("utf-8"))

    assert result["columns"] == ["item", "weight_in_air", "weight_in_water"]
    assert len(result["rows"]) == 2
    assert result["unit"] == MassUnit.GRAM
    assert result["column_separator"] == ","

    first_row = result["rows"][0]
    assert first_row["item"] == "ring"
    assert isinstance(first_row["weight_in_air"], float)
    assert first_row["weight_in_air"] == 19.30
    assert first_row["weight_in_water"] == 18.00


def test_parse_weighings_csv_with_decimal_comma():
    """Test parsing a semicolon separated table with decimal commas."""
    csv_content = """item;weight_in_air;weight_in_water
ring;19,30;18,00
chain;12,5;11,8
"""

    result = parse_weighings_csv(csv_content.encode("utf-8"))

    assert result["decimal_separator"] == ","
    assert result["column_separator"] == ";"

    first_row = result["rows"][0]
    assert first_row["weight_in_air"] == 19.30
    assert first_row["weight_in_water"] == 18.00


def test_parse_weighings_csv_with_units():
    """Cells with unit suffixes are converted and the unit reported."""
    csv_content = """item;weight_in_air;weight_in_water
coin;1,002 ozt;0,950 ozt

bar;10 ozt;9,48 ozt
"""

    result = parse_weighings_csv(csv_content.encode("utf-8"))

    assert result["unit"] == MassUnit.TROY_OUNCE
    assert len(result["rows"]) == 2  # blank line skipped
    assert result["rows"][0]["weight_in_air"] == 1.002
    assert result["rows"][1]["weight_in_water"] == 9.48


def test_parse_weighings_csv_mixed_units():
    """Mixing units in one table is rejected."""
    csv_content = """weight_in_air,weight_in_water
19.3 g,18 g
1 ozt,0.95 ozt
"""

    with pytest.raises(ValueError):
        parse_weighings_csv(csv_content.encode("utf-8"))


def test_parse_weighings_csv_empty():
    """Test parsing an empty CSV file."""
    result = parse_weighings_csv(b"")

    assert result["columns"] == []
    assert len(result["rows"]) == 0


def test_parse_weighings_csv_extra_columns():
    """Cells beyond the header get generated column names."""
    result = parse_weighings_csv(b"weight_in_air,weight_in_water\n19.3,18.0,note\n")

    assert result["rows"][0]["column_2"] == "note"


def test_detect_separators():
    """Test detection of decimal and column separators."""
    dec_sep, col_sep = detect_separators(b"air,water\n19.30,18.00")
    assert dec_sep == "."
    assert col_sep == ","

    dec_sep, col_sep = detect_separators(b"air;water\n19,30;18,00")
    assert dec_sep == ","
    assert col_sep == ";"

    dec_sep, col_sep = detect_separators(b"air;water\n19.30;18.00")
    assert dec_sep == "."
    assert col_sep == ";"

    dec_sep, col_sep = detect_separators(b"air\twater\n19,30\t18,00")
    assert dec_sep == ","
    assert col_sep == "\t"


def test_extract_mass():
    """Test extraction of masses with unit suffixes."""
    assert extract_mass("19.30 g") == (19.30, MassUnit.GRAM)
    assert extract_mass("19,30g") == (19.30, MassUnit.GRAM)
    assert extract_mass("0.62 ozt") == (0.62, MassUnit.TROY_OUNCE)
    assert extract_mass("2 OZ") == (2.0, MassUnit.OUNCE)
    assert extract_mass("12 dwt") == (12.0, MassUnit.PENNYWEIGHT)
    assert extract_mass("1 tola") == (1.0, MassUnit.TOLA)
    assert extract_mass("5 ct") == (5.0, MassUnit.CARAT)
    assert extract_mass("19.3") == (19.3, None)
    assert extract_mass("ring") == (None, None)
    assert extract_mass("3 lb") == (None, None)


def test_normalize_value():
    """Test numeric normalisation of cells."""
    assert normalize_value("19.30") == 19.30
    assert normalize_value("19,30", ",") == 19.30
    assert normalize_value(" 18.00 ") == 18.00
    assert normalize_value("ring") == "ring"
    assert normalize_value("") == ""
