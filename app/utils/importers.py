"""
Bulk import of customers and products from uploaded CSV or JSON files.

Every row is validated before anything is written; a single bad row
rejects the whole file with one message per failing row.
"""
import csv
import io
import json
from typing import Any, Dict, List, Type, TypeVar

from pydantic import BaseModel, ValidationError
from pydantic.alias_generators import to_snake

from app.core.exceptions import ImportFileError

T = TypeVar("T", bound=BaseModel)

SUPPORTED_FORMATS = ("csv", "json")


def file_format(filename: str) -> str:
    extension = filename.rsplit(".", 1)[-1].lower() if "." in filename else ""
    if extension not in SUPPORTED_FORMATS:
        raise ImportFileError("Unsupported file format. Please use CSV or JSON.")
    return extension


def parse_csv_rows(content: str) -> List[Dict[str, Any]]:
    """Rows keyed by header; blank cells are dropped so defaults apply."""
    reader = csv.DictReader(io.StringIO(content))
    rows = []
    for raw in reader:
        if not any((value or "").strip() for value in raw.values()):
            continue
        row = {}
        for key, value in raw.items():
            if key is None:
                continue
            value = (value or "").strip()
            if value and value != "undefined":
                row[key.strip()] = value
        rows.append(row)
    return rows


def parse_json_rows(content: str) -> List[Dict[str, Any]]:
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise ImportFileError(f"Invalid JSON: {e.msg}") from e
    if not isinstance(data, list) or not all(isinstance(row, dict) for row in data):
        raise ImportFileError("File must contain an array of objects")
    return data


def parse_rows(filename: str, content: str) -> List[Dict[str, Any]]:
    if file_format(filename) == "csv":
        return parse_csv_rows(content)
    return parse_json_rows(content)


def validate_rows(rows: List[Dict[str, Any]], model: Type[T]) -> List[T]:
    """
    Build one model per row. Keys may be camelCase or snake_case.

    Raises ImportFileError listing every failing row (1-based).
    """
    validated: List[T] = []
    errors: List[str] = []
    for index, row in enumerate(rows, start=1):
        data = {to_snake(key): value for key, value in row.items()}
        try:
            validated.append(model.model_validate(data))
        except ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
                for error in e.errors()
            )
            errors.append(f"Row {index}: {problems}")

    if errors:
        raise ImportFileError("Validation errors found", errors)
    return validated
