"""Shared type coercion for upstream payloads and history rows.

Handles NaN/Inf, bool-as-int, pandas missing values and ``"W-L"`` style
strings consistently so adapters never have to guess.
"""
from __future__ import annotations

import math
from datetime import date, datetime
from decimal import Decimal
from typing import Any

import pandas as pd


def _unwrap(value: Any) -> Any:
    # numpy scalars coming out of pandas frames
    if hasattr(value, "item") and not isinstance(value, (str, bytes)):
        try:
            return value.item()
        except (TypeError, ValueError):
            return value
    return value


def parse_bool(value: Any) -> bool | None:
    value = _unwrap(value)
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        if isinstance(value, float) and (math.isnan(value) or math.isinf(value)):
            return None
        return bool(value)
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "1", "yes"}:
            return True
        if lowered in {"false", "0", "no"}:
            return False
    return None


def parse_int(value: Any) -> int | None:
    value = _unwrap(value)
    if value is None:
        return None
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            return None
        return int(value)
    if isinstance(value, str):
        try:
            return int(float(value))
        except (ValueError, OverflowError):
            return None
    return None


def parse_date(value: Any) -> date | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if "T" in text:
            text = text.split("T")[0]
        if len(text) == 8 and text.isdigit():
            text = f"{text[:4]}-{text[4:6]}-{text[6:]}"
        try:
            return date.fromisoformat(text)
        except ValueError:
            return None
    return None


def parse_record(value: Any) -> tuple[int, int]:
    """Parse an ESPN ``"W-L"`` summary; anything malformed is ``(0, 0)``."""
    if not isinstance(value, str):
        return 0, 0
    head = value.strip().split(",")[0]
    parts = head.split("-")
    if len(parts) < 2:
        return 0, 0
    wins = parse_int(parts[0].strip())
    losses = parse_int(parts[1].strip())
    if wins is None or losses is None or wins < 0 or losses < 0:
        return 0, 0
    return wins, losses


def normalize_id(value: Any) -> str | None:
    """Normalize an ID value to a clean string.

    Handles float IDs like 401585123.0 → "401585123".
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if pd.isna(value) or not math.isfinite(value):
            return None
        if float(value).is_integer():
            return str(int(value))
        return str(value)
    text = str(value).strip()
    if not text:
        return None
    if text.endswith(".0"):
        head = text[:-2]
        if head.isdigit():
            return head
    return text


def json_safe(value: Any) -> Any:
    """Make a value JSON-serializable (Decimal → float, datetime → ISO, NaN → None)."""
    if value is None or value is pd.NaT:
        return None
    if isinstance(value, dict):
        return {str(k): json_safe(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [json_safe(v) for v in value]
    if isinstance(value, Decimal):
        return float(value) if value.is_finite() else None
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, float):
        return value if math.isfinite(value) else None
    if hasattr(value, "item") and not isinstance(value, (str, bytes)):
        # numpy scalars coming out of pandas frames
        try:
            return json_safe(value.item())
        except (TypeError, ValueError):
            return value
    return value
