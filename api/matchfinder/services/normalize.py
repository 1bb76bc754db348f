from __future__ import annotations

import math
import re
from datetime import datetime, timezone
from typing import Any

CM_PER_FOOT = 30.48
CM_PER_INCH = 2.54

_CM_RE = re.compile(r"(\d+(?:\.\d+)?)\s*(?:cm|cms|centimet(?:er|re)s?)\b", re.IGNORECASE)
_FEET_INCHES_RE = re.compile(
    r"(?<![\d.])(\d+)\s*(?:'|’|ft\.?|feet|foot)\s*(?:(\d+(?:\.\d+)?)\s*(?:\"|”|''|in\.?|inch(?:es)?)?)?",
    re.IGNORECASE,
)
_DECIMAL_FEET_RE = re.compile(r"^\s*(\d)(?:\.(\d{1,2}))?\s*(?:ft\.?|feet|foot)?\s*$", re.IGNORECASE)
_BARE_NUMBER_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*$")
_INT_TOKEN_RE = re.compile(r"\d+")


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _feet_inches_to_cm(feet: float, inches: float) -> int:
    return _round_half_up(feet * CM_PER_FOOT + inches * CM_PER_INCH)


def height_to_cm(raw: str | None) -> int:
    """Convert a free-text height into whole centimetres.

    Recognised forms, in priority order: ``172 cm``, ``5'8"`` / ``5 ft 8 in``,
    and the feet'inches shorthand ``5.8`` or ``5.8 ft`` (five feet eight
    inches). ``5.10`` therefore means 5'10", not 5.1 ft. Anything else yields 0.
    """
    if not raw:
        return 0
    text = str(raw).strip()
    if not text:
        return 0

    m = _CM_RE.search(text)
    if m:
        return _round_half_up(float(m.group(1)))

    m = _FEET_INCHES_RE.search(text)
    if m:
        feet = int(m.group(1))
        inches = float(m.group(2)) if m.group(2) else 0.0
        if inches >= 12:
            return 0
        return _feet_inches_to_cm(feet, inches)

    m = _DECIMAL_FEET_RE.match(text)
    if m:
        feet = int(m.group(1))
        inches = int(m.group(2)) if m.group(2) else 0
        if inches >= 12:
            return 0
        return _feet_inches_to_cm(feet, inches)

    m = _BARE_NUMBER_RE.match(text)
    if m and float(m.group(1)) >= 100:
        return _round_half_up(float(m.group(1)))

    return 0


def income_to_units(raw: str | None) -> int | None:
    """First integer token in free text ("10 LPA" -> 10); None when there is none."""
    if not raw:
        return None
    m = _INT_TOKEN_RE.search(str(raw))
    if not m:
        return None
    return int(m.group(0))


def parse_timestamp(raw: Any) -> datetime | None:
    if raw is None:
        return None
    if isinstance(raw, datetime):
        value = raw
    else:
        text = str(raw).strip()
        if not text:
            return None
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            value = datetime.fromisoformat(text)
        except ValueError:
            return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def fold(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip().lower()
