"""
Search, filter, sort and pagination helpers.

Turns raw query-string values into SQLAlchemy expressions. User supplied
search text is always escaped so it is matched literally.
"""

import math
from typing import Any, Dict, Optional, Sequence

from sqlalchemy import ColumnElement, or_

from app.config import settings
from app.utils.exceptions import InvalidQueryError

LIKE_ESCAPE_CHAR = "\\"


def escape_like(text: str) -> str:
    """
    Escape LIKE wildcards so ``text`` matches as a literal substring.

    Only ``%``, ``_`` and the escape character itself have meaning inside a
    LIKE pattern, so characters such as ``.*+?()[]`` pass through untouched.
    """
    return (
        text.replace(LIKE_ESCAPE_CHAR, LIKE_ESCAPE_CHAR * 2)
        .replace("%", LIKE_ESCAPE_CHAR + "%")
        .replace("_", LIKE_ESCAPE_CHAR + "_")
    )


def text_search_condition(search: Optional[str], columns: Sequence[Any]) -> Optional[ColumnElement]:
    """Case-insensitive substring match of ``search`` across ``columns``."""
    if search is None:
        return None
    search = search.strip()
    if not search:
        return None

    pattern = f"%{escape_like(search)}%"
    return or_(*(column.ilike(pattern, escape=LIKE_ESCAPE_CHAR) for column in columns))


class PriceRange:
    """Inclusive numeric range; ``max_value`` is None for an open upper bound."""

    def __init__(self, min_value: float, max_value: Optional[float] = None):
        self.min_value = min_value
        self.max_value = max_value

    def condition(self, column) -> ColumnElement:
        if self.max_value is None:
            return column >= self.min_value
        return column.between(self.min_value, self.max_value)

    def __eq__(self, other) -> bool:
        return (
            isinstance(other, PriceRange)
            and self.min_value == other.min_value
            and self.max_value == other.max_value
        )

    def __repr__(self) -> str:
        return f"PriceRange({self.min_value}, {self.max_value})"


def _parse_bound(raw: str) -> float:
    raw = raw.strip()
    try:
        value = float(raw)
    except ValueError:
        raise InvalidQueryError("Invalid price range format")
    if not math.isfinite(value) or value < 0:
        raise InvalidQueryError("Invalid price range format")
    return value


def parse_price_range(price_range: Optional[str]) -> Optional[PriceRange]:
    """
    Parse ``"min-max"`` or ``"min+"``.

    Returns None when no range was given.

    Raises:
        InvalidQueryError: On any malformed value, including min > max
    """
    if price_range is None or not price_range.strip():
        return None

    value = price_range.strip()
    if value.endswith("+"):
        return PriceRange(_parse_bound(value[:-1]))

    parts = value.split("-")
    if len(parts) != 2:
        raise InvalidQueryError("Invalid price range format")

    low, high = _parse_bound(parts[0]), _parse_bound(parts[1])
    if low > high:
        raise InvalidQueryError("Invalid price range format")
    return PriceRange(low, high)


def resolve_sort(sort_by: Optional[str], options: Dict[str, Sequence[Any]], default: str = "newest"):
    """
    Map a ``sortBy`` key to ORDER BY clauses.

    Raises:
        InvalidQueryError: If the key is not one of ``options``
    """
    key = (sort_by or "").strip() or default
    if key not in options:
        allowed = ", ".join(sorted(options))
        raise InvalidQueryError(f"Invalid sortBy value '{key}'. Allowed: {allowed}")
    return options[key]


def _lenient_int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


class Pagination:
    """Page/limit pair, both floored at 1 and limit capped at the configured maximum."""

    def __init__(self, page: Any = None, limit: Any = None, max_limit: Optional[int] = None):
        max_limit = max_limit or settings.max_page_size
        self.page = max(_lenient_int(page, 1), 1)
        self.limit = min(max(_lenient_int(limit, settings.default_page_size), 1), max_limit)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def meta(self, total: int) -> Dict[str, int]:
        return {
            "page": self.page,
            "limit": self.limit,
            "total": total,
            "pages": total_pages(total, self.limit),
        }


def total_pages(total: int, limit: int) -> int:
    return max(math.ceil(total / limit), 1) if limit > 0 else 1
