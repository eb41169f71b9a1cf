"""Small helpers for building MongoDB filters."""
import re
from typing import Optional, Tuple

from app.core.config import settings
from app.models.ledger import DateRange


def contains_ci(text: str) -> dict:
    """Case-insensitive substring match; user input is matched literally."""
    return {"$regex": re.escape(text), "$options": "i"}


def date_range_query(date_range: DateRange) -> Optional[dict]:
    """$gte/$lte bounds for a date field, or None when the range is open."""
    if date_range.is_open:
        return None
    bounds = {}
    if date_range.start is not None:
        bounds["$gte"] = date_range.start
    if date_range.end is not None:
        bounds["$lte"] = date_range.end
    return bounds


def page_window(page: int, limit: int) -> Tuple[int, int]:
    """(skip, limit) for a 1-based page, with limit clamped to MAX_PAGE_SIZE."""
    page = max(page, 1)
    limit = min(max(limit, 1), settings.MAX_PAGE_SIZE)
    return (page - 1) * limit, limit
