"""Tolerant coercion of backend record fields.

Backend rows are loosely typed JSON: numbers arrive as strings, lists as
null, timestamps in several ISO-8601 spellings. These helpers never raise;
anything they cannot interpret becomes the supplied default.
"""

from __future__ import annotations

import math
from datetime import datetime
from typing import Any, Dict, List, Optional

from marketplace.utils.time import as_utc


def safe_float(value: Any, default: Optional[float] = None) -> Optional[float]:
    """Parse a finite float from a number or numeric string."""
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        result = float(value)
    elif isinstance(value, str):
        try:
            result = float(value.strip())
        except ValueError:
            return default
    else:
        return default
    if math.isnan(result) or math.isinf(result):
        return default
    return result


def safe_int(value: Any, default: Optional[int] = None) -> Optional[int]:
    """Parse an int, truncating floats and numeric strings."""
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    parsed = safe_float(value)
    if parsed is None:
        return default
    return int(parsed)


def safe_bool(value: Any, default: bool = False) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("true", "1", "yes"):
            return True
        if lowered in ("false", "0", "no"):
            return False
    return default


def safe_str(value: Any, default: str = "") -> str:
    if value is None:
        return default
    return str(value)


def safe_str_list(value: Any) -> List[str]:
    """Coerce a JSON array into a list of strings, dropping nulls."""
    if not isinstance(value, (list, tuple, set)):
        return []
    return [str(v) for v in value if v is not None]


def safe_dict(value: Any) -> Dict[str, Any]:
    if not isinstance(value, dict):
        return {}
    return {str(k): v for k, v in value.items()}


def safe_utc(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 string (or datetime) into a UTC-aware datetime.

    A trailing ``Z`` is accepted. Unparseable input means "no timestamp".
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return as_utc(value)
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        return as_utc(datetime.fromisoformat(text))
    except ValueError:
        return None


def iso_or_none(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def safe_records(value: Any) -> List[Dict[str, Any]]:
    """Keep only the mapping entries of a JSON array."""
    if not isinstance(value, list):
        return []
    return [v for v in value if isinstance(v, dict)]
