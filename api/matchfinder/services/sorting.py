from __future__ import annotations

import unicodedata
from datetime import datetime, timezone
from typing import Any, Callable, Sequence

from ..config import DEFAULT_COMPATIBILITY_WEIGHTS
from ..schemas import PartnerPreferences, Profile
from .normalize import fold, parse_timestamp

SORT_STRATEGIES = ("newest", "age-asc", "age-desc", "name-asc", "compatibility")

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _name_key(value: str) -> str:
    decomposed = unicodedata.normalize("NFKD", value or "")
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch)).casefold()


def _contains_any(actual: str | None, wanted: list[str]) -> bool:
    text = fold(actual)
    return bool(text) and any(fold(w) and fold(w) in text for w in wanted)


def _member(actual: str | None, wanted: list[str]) -> bool:
    text = fold(actual)
    return bool(text) and any(fold(w) == text for w in wanted)


def compatibility_score(
    p: Profile, prefs: PartnerPreferences | None, weights: dict[str, Any] | None = None
) -> int:
    w = weights or DEFAULT_COMPATIBILITY_WEIGHTS
    score = 0
    if prefs is not None:
        if prefs.religion and _contains_any(p.religion, prefs.religion):
            score += int(w.get("religion", 2))
        if prefs.mother_tongue and _contains_any(p.mother_tongue, prefs.mother_tongue):
            score += int(w.get("mother_tongue", 2))
        if prefs.education and _contains_any(p.education, prefs.education):
            score += int(w.get("education", 1))
        if prefs.living_country and _contains_any(p.country, prefs.living_country):
            score += int(w.get("living_country", 1))
        if prefs.diet_preference and _member(p.diet_preference, prefs.diet_preference):
            score += int(w.get("diet", 1))
    if p.has_readiness_badge:
        score += int(w.get("readiness_badge", 1))
    if p.photos:
        score += int(w.get("photo", 1))
    return score


def _sort_key(strategy: str, prefs: PartnerPreferences | None) -> Callable[[Profile], Any]:
    if strategy == "newest":
        return lambda p: -(parse_timestamp(p.created_at) or _EPOCH).timestamp()
    if strategy == "age-asc":
        return lambda p: p.age
    if strategy == "age-desc":
        return lambda p: -p.age
    if strategy == "name-asc":
        return lambda p: _name_key(p.display_name)
    if strategy == "compatibility":
        return lambda p: -compatibility_score(p, prefs)
    raise ValueError(f"unknown sort strategy: {strategy}")


def sort_profiles(
    profiles: Sequence[Profile], strategy: str = "newest", prefs: PartnerPreferences | None = None
) -> list[Profile]:
    key = _sort_key(strategy, prefs)
    decorated = [(key(p), i, p) for i, p in enumerate(profiles)]
    decorated.sort(key=lambda x: (x[0], x[1]))
    return [p for _, _, p in decorated]
