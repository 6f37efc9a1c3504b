"""
Helpers for turning flat row sets into nested collections.

Rows come back from SQLAlchemy as mappings; these helpers group them by
correlation key and coalesce the nullable legacy columns into the shapes the
mobile apps expect.
"""
from collections import defaultdict
from datetime import datetime
from typing import Any, Callable, Dict, Hashable, Iterable, List, Mapping, Optional

VERSION_FORMAT = "%Y-%m-%d %H:%M:%S"

# Integer primary keys are 32-bit signed columns
MAX_ROW_ID = 2 ** 31 - 1


def group_rows(rows: Iterable[Mapping[str, Any]], *keys: str) -> Dict[Hashable, List[Mapping[str, Any]]]:
    """Group rows by one column, or by a tuple of columns when several are given.

    Each group keeps the relative order of the source rows.
    """
    grouped: Dict[Hashable, List[Mapping[str, Any]]] = defaultdict(list)
    for row in rows:
        if len(keys) == 1:
            key = row[keys[0]]
        else:
            key = tuple(row[k] for k in keys)
        grouped[key].append(row)
    return grouped


def map_groups(grouped: Mapping[Hashable, List[Mapping[str, Any]]],
               build: Callable[[Mapping[str, Any]], Any]) -> Dict[Hashable, List[Any]]:
    """Apply `build` to every row of every group."""
    return {key: [build(row) for row in rows] for key, rows in grouped.items()}


def as_flag(value: Any) -> int:
    """Legacy 0/1 flags: NULL and falsy values become 0."""
    return 1 if value else 0


def as_int(value: Any, default: int = 0) -> int:
    if value is None:
        return default
    return int(value)


def as_float(value: Any, default: float = 0.0) -> float:
    if value is None:
        return default
    return float(value)


def as_str(value: Any, default: str = "") -> str:
    if value is None:
        return default
    return str(value)


def format_version(value: Optional[datetime]) -> Optional[str]:
    """Catalog version at second resolution."""
    if value is None:
        return None
    return value.strftime(VERSION_FORMAT)


def parse_version(value: Optional[str]) -> Optional[datetime]:
    """Parse a client supplied catalog version; anything unparseable is None."""
    if not value:
        return None
    try:
        return datetime.strptime(value.strip(), VERSION_FORMAT)
    except ValueError:
        return None


def parse_row_id(value: Any) -> Optional[int]:
    """Primary key from a path value; None when no stored row can carry it."""
    try:
        key = int(value)
    except (TypeError, ValueError):
        return None
    if not 1 <= key <= MAX_ROW_ID:
        return None
    return key
