from __future__ import annotations

import hashlib
import json
from typing import Any

from ..schemas import ExtendedFilters


def _normalize(value: Any) -> Any:
    if isinstance(value, dict):
        return {k: _normalize(value[k]) for k in sorted(value.keys())}
    if isinstance(value, (list, tuple)):
        return [_normalize(v) for v in value]
    return value


def canonical_json(value: Any) -> str:
    return json.dumps(_normalize(value), separators=(",", ":"), ensure_ascii=False)


def sha256_hex(value: Any) -> str:
    return hashlib.sha256(canonical_json(value).encode("utf-8")).hexdigest()


def view_fingerprint(
    filters: ExtendedFilters | None, sort: str, search_text: str, use_preferences: bool
) -> str:
    payload = {
        "filters": (filters or ExtendedFilters()).model_dump(mode="json", exclude_defaults=True),
        "sort": sort,
        "search": (search_text or "").strip().lower(),
        "use_preferences": bool(use_preferences),
    }
    return sha256_hex(payload)
