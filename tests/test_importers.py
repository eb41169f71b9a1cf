"""Tests for CSV/JSON import parsing and row validation."""
import pytest

from app.core.exceptions import ImportFileError
from app.models.customer import CustomerCreate
from app.models.product import ProductCreate
from app.utils.importers import file_format, parse_csv_rows, parse_json_rows, parse_rows, validate_rows


class TestFileFormat:
    @pytest.mark.parametrize("filename,expected", [("c.csv", "csv"), ("C.JSON", "json"), ("a.b.csv", "csv")])
    def test_supported(self, filename, expected):
        assert file_format(filename) == expected

    @pytest.mark.parametrize("filename", ["c.xlsx", "noext", ""])
    def test_unsupported(self, filename):
        with pytest.raises(ImportFileError, match="Unsupported file format"):
            file_format(filename)


def test_csv_rows_drop_blank_and_undefined_cells():
    content = (
        "name,description,unitPrice,stockQuantity,unit\n"
        "Fuse,,100,undefined,pcs\n"
        ",,,,\n"
        "Saloon,Herbicide,1025,10,kg\n"
    )

    rows = parse_csv_rows(content)

    assert rows == [
        {"name": "Fuse", "unitPrice": "100", "unit": "pcs"},
        {"name": "Saloon", "description": "Herbicide", "unitPrice": "1025", "stockQuantity": "10", "unit": "kg"},
    ]


def test_json_rows_must_be_array_of_objects():
    assert parse_json_rows('[{"name": "A"}]') == [{"name": "A"}]

    with pytest.raises(ImportFileError, match="array of objects"):
        parse_json_rows('{"name": "A"}')

    with pytest.raises(ImportFileError, match="Invalid JSON"):
        parse_json_rows("[{")


def test_parse_rows_dispatches_on_extension():
    assert parse_rows("customers.json", '[{"name": "A"}]') == [{"name": "A"}]
    assert parse_rows("customers.csv", "name\nA\n") == [{"name": "A"}]


def test_validate_rows_accepts_camel_case_keys():
    products = validate_rows(
        [{"name": "Fuse", "unitPrice": "100", "unit": "pcs", "minStockAlert": "5"}],
        ProductCreate,
    )

    assert products[0].unit_price == 100
    assert products[0].min_stock_alert == 5
    assert products[0].stock_quantity is None


def test_validate_rows_reports_every_bad_row():
    rows = [
        {"name": "Muhammad Yaqoob", "area": "Peshawar", "role": "dealer"},
        {"name": "No Area", "role": "dealer"},
        {"area": "Swat"},
    ]

    with pytest.raises(ImportFileError) as excinfo:
        validate_rows(rows, CustomerCreate)

    assert excinfo.value.message == "Validation errors found"
    assert len(excinfo.value.details) == 2
    assert excinfo.value.details[0].startswith("Row 2: area")
    assert excinfo.value.details[1].startswith("Row 3:")
