from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Callable, Mapping

from ..config import AGE_SLIDER_MAX, AGE_SLIDER_MIN, DEFAULT_AGE_RANGE, DEFAULT_INCOME_RANGE, WILDCARD
from ..schemas import ExtendedFilters, PartnerPreferences, Profile
from .normalize import fold, height_to_cm, income_to_units, parse_timestamp
from .relations import EMPTY_STATUS, RelationStatus

OPPOSITE_GENDER = {"male": "female", "female": "male"}


class FilterValidationError(ValueError):
    pass


class ClauseKind(str, Enum):
    SCALAR = "scalar"
    ARRAY = "array"
    RANGE = "range"
    BOOLEAN = "boolean"
    WINDOW = "window"
    TEXT = "text"


class MatchMode(str, Enum):
    CONTAINS = "contains"
    EQUALS = "equals"
    MEMBER = "member"


def is_wildcard(value: Any) -> bool:
    """True when a filter value places no constraint: absent, empty, or the "any" sentinel."""
    if value is None:
        return True
    if isinstance(value, str):
        v = fold(value)
        return v == "" or v == WILDCARD
    if isinstance(value, (list, tuple, set, frozenset)):
        return all(isinstance(v, str) and fold(v) in {"", WILDCARD} for v in value)
    return False


def is_explicit_any(value: Any) -> bool:
    if isinstance(value, str):
        return fold(value) == WILDCARD
    if isinstance(value, (list, tuple)):
        return len(value) > 0 and all(isinstance(v, str) and fold(v) == WILDCARD for v in value)
    return False


def _active_values(values: Any) -> list[Any]:
    if isinstance(values, str):
        values = [values]
    return [v for v in values if not (isinstance(v, str) and fold(v) in {"", WILDCARD})]


def _employment_text(p: Profile) -> str:
    return " ".join(part for part in (p.employment_status or "", p.occupation or "") if part)


def _last_active(p: Profile) -> datetime | None:
    for raw in (p.last_activity_at, p.last_login_at, p.updated_at):
        ts = parse_timestamp(raw)
        if ts is not None:
            return ts
    return None


ATTRIBUTES: dict[str, Callable[[Profile], Any]] = {
    "religion": lambda p: p.religion,
    "caste": lambda p: p.caste,
    "community": lambda p: p.community,
    "mother_tongue": lambda p: p.mother_tongue,
    "marital_status": lambda p: p.marital_status,
    "education": lambda p: p.education,
    "employment_status": _employment_text,
    "occupation": lambda p: p.occupation,
    "country": lambda p: p.country,
    "state": lambda p: p.state,
    "city": lambda p: p.location,
    "diet": lambda p: p.diet_preference,
    "drinking": lambda p: p.drinking_habit,
    "smoking": lambda p: p.smoking_habit,
    "manglik": lambda p: p.manglik,
    "disability": lambda p: p.disability,
    "has_photo": lambda p: bool(p.photos),
    "is_verified": lambda p: p.status == "verified",
    "has_readiness_badge": lambda p: bool(p.has_readiness_badge),
    "joined": lambda p: parse_timestamp(p.created_at),
    "last_active": _last_active,
}

_COMPLETENESS_FIELDS: tuple[Callable[[Profile], Any], ...] = (
    lambda p: p.display_name,
    lambda p: p.photos,
    lambda p: p.bio,
    lambda p: p.education,
    lambda p: p.occupation,
    lambda p: p.salary,
    lambda p: p.height,
    lambda p: p.religion,
    lambda p: p.mother_tongue,
    lambda p: p.marital_status,
    lambda p: p.location,
    lambda p: p.country,
    lambda p: p.diet_preference,
    lambda p: p.partner_preferences,
)


def profile_completeness(p: Profile) -> int:
    filled = sum(1 for getter in _COMPLETENESS_FIELDS if getter(p))
    return (filled * 100) // len(_COMPLETENESS_FIELDS)


def _numeric(p: Profile, attribute: str) -> int | None:
    if attribute == "age":
        return p.age
    if attribute == "height":
        cm = height_to_cm(p.height)
        return cm if cm > 0 else None
    if attribute == "income":
        return income_to_units(p.salary)
    if attribute == "completeness":
        return profile_completeness(p)
    raise KeyError(attribute)


@dataclass(frozen=True)
class FilterClause:
    key: str
    label: str
    kind: ClauseKind
    source: str
    attribute: str
    values: tuple[Any, ...] = ()
    mode: MatchMode = MatchMode.MEMBER
    bounds: tuple[int | None, int | None] = (None, None)
    suggestion: str = ""

    def matches(self, p: Profile, now: datetime) -> bool:
        if self.kind in (ClauseKind.SCALAR, ClauseKind.ARRAY):
            return self._matches_values(ATTRIBUTES[self.attribute](p))
        if self.kind is ClauseKind.RANGE:
            return self._matches_range(_numeric(p, self.attribute))
        if self.kind is ClauseKind.BOOLEAN:
            return bool(ATTRIBUTES[self.attribute](p))
        if self.kind is ClauseKind.WINDOW:
            ts = ATTRIBUTES[self.attribute](p)
            days = self.bounds[0] or 0
            return ts is not None and ts >= now - timedelta(days=days)
        if self.kind is ClauseKind.TEXT:
            query = fold(self.values[0])
            return any(query in fold(text) for text in (p.display_name, p.location, p.profile_id))
        raise ValueError(f"unknown clause kind: {self.kind}")

    def _matches_values(self, actual: Any) -> bool:
        if isinstance(actual, bool) or any(isinstance(v, bool) for v in self.values):
            return actual is not None and actual in self.values
        if actual is None:
            return False
        text = fold(actual)
        if self.mode is MatchMode.CONTAINS:
            return any(fold(v) in text for v in self.values)
        if not text:
            return False
        return any(fold(v) == text for v in self.values)

    def _matches_range(self, value: int | None) -> bool:
        lo, hi = self.bounds
        if value is None:
            if self.attribute == "income":
                return lo is None or lo <= 0
            return True
        if lo is not None and value < lo:
            return False
        if hi is not None and value > hi:
            return False
        return True


@dataclass(frozen=True)
class MatchPlan:
    preference_clauses: tuple[FilterClause, ...] = ()
    manual_clauses: tuple[FilterClause, ...] = ()
    search_clause: FilterClause | None = None
    now: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def clauses(self) -> tuple[FilterClause, ...]:
        tail = (self.search_clause,) if self.search_clause else ()
        return self.preference_clauses + self.manual_clauses + tail


# (attribute, label, preference field, mode, manual filter field overriding it)
_PREFERENCE_LISTS: tuple[tuple[str, str, str, MatchMode, str | None], ...] = (
    ("religion", "Religion", "religion", MatchMode.CONTAINS, "religions"),
    ("education", "Education", "education", MatchMode.EQUALS, "education_levels"),
    ("mother_tongue", "Mother tongue", "mother_tongue", MatchMode.CONTAINS, "mother_tongues"),
    ("country", "Living country", "living_country", MatchMode.CONTAINS, "country"),
    ("diet", "Diet", "diet_preference", MatchMode.MEMBER, "diet_preference"),
    ("occupation", "Occupation", "occupation", MatchMode.EQUALS, "occupation_type"),
    ("employment_status", "Employment status", "employment_status", MatchMode.CONTAINS, "employment_statuses"),
    ("caste", "Caste", "caste", MatchMode.CONTAINS, "caste"),
    ("community", "Community", "community", MatchMode.CONTAINS, "community"),
    ("marital_status", "Marital status", "marital_status", MatchMode.MEMBER, "marital_statuses"),
    ("state", "Living state", "living_state", MatchMode.CONTAINS, "state"),
    ("city", "City", "location", MatchMode.CONTAINS, "city"),
)

_PREFERENCE_LIFESTYLE: tuple[tuple[str, str, str, MatchMode, str | None], ...] = (
    ("drinking", "Drinking habit", "drinking_habit", MatchMode.MEMBER, "drinking_habit"),
    ("smoking", "Smoking habit", "smoking_habit", MatchMode.MEMBER, "smoking_habit"),
    ("manglik", "Manglik", "manglik", MatchMode.MEMBER, None),
    ("disability", "Differently abled", "disability", MatchMode.MEMBER, "disability"),
)


def _pref_key(attribute: str) -> str:
    return "smart-matching-" + attribute.replace("_", "-")


def _manual_key(attribute: str) -> str:
    return attribute.replace("_", "-") + "-filter"


def _pref_list_clause(
    prefs: PartnerPreferences, filters: ExtendedFilters, spec: tuple[str, str, str, MatchMode, str | None]
) -> FilterClause | None:
    attribute, label, pref_field, mode, manual_field = spec
    values = list(getattr(prefs, pref_field) or [])
    if attribute != "manglik":
        values = _active_values(values)
    if not values:
        return None
    if manual_field and is_explicit_any(getattr(filters, manual_field)):
        return None
    return FilterClause(
        key=_pref_key(attribute),
        label=f"{label} (partner preferences)",
        kind=ClauseKind.ARRAY,
        source="preference",
        attribute=attribute,
        values=tuple(values),
        mode=mode,
        suggestion=f"Widen your {label.lower()} partner preference or set {label.lower()} to Any",
    )


def build_preference_clauses(
    prefs: PartnerPreferences | None, filters: ExtendedFilters | None = None
) -> list[FilterClause]:
    if prefs is None:
        return []
    filters = filters or ExtendedFilters()
    out: list[FilterClause] = []

    if prefs.age_min or prefs.age_max:
        out.append(
            FilterClause(
                key=_pref_key("age"),
                label="Age (partner preferences)",
                kind=ClauseKind.RANGE,
                source="preference",
                attribute="age",
                bounds=(prefs.age_min or None, prefs.age_max or None),
                suggestion="Widen the preferred age range in your partner preferences",
            )
        )

    for spec in _PREFERENCE_LISTS:
        clause = _pref_list_clause(prefs, filters, spec)
        if clause:
            out.append(clause)

    h_lo, h_hi = height_to_cm(prefs.height_min), height_to_cm(prefs.height_max)
    if h_lo or h_hi:
        out.append(
            FilterClause(
                key=_pref_key("height"),
                label="Height (partner preferences)",
                kind=ClauseKind.RANGE,
                source="preference",
                attribute="height",
                bounds=(h_lo or None, h_hi or None),
                suggestion="Widen the preferred height range in your partner preferences",
            )
        )

    i_lo = income_to_units(prefs.annual_income_min or prefs.salary_min)
    i_hi = income_to_units(prefs.annual_income_max or prefs.salary_max)
    if i_lo is not None or i_hi is not None:
        out.append(
            FilterClause(
                key=_pref_key("income"),
                label="Annual income (partner preferences)",
                kind=ClauseKind.RANGE,
                source="preference",
                attribute="income",
                bounds=(i_lo, i_hi),
                suggestion="Lower the minimum income in your partner preferences",
            )
        )

    for spec in _PREFERENCE_LIFESTYLE:
        clause = _pref_list_clause(prefs, filters, spec)
        if clause:
            out.append(clause)
    return out


def _manual_values(key_attr: str, label: str, value: Any, mode: MatchMode, kind: ClauseKind) -> FilterClause | None:
    if is_wildcard(value):
        return None
    values = _active_values(value)
    return FilterClause(
        key=_manual_key(key_attr),
        label=label,
        kind=kind,
        source="manual",
        attribute=key_attr,
        values=tuple(values),
        mode=mode,
        suggestion=f"Clear the {label.lower()} filter or choose Any",
    )


def build_manual_clauses(filters: ExtendedFilters | None) -> list[FilterClause]:
    if filters is None:
        return []
    f = filters
    out: list[FilterClause | None] = []

    if f.age_range is not None and tuple(f.age_range) != DEFAULT_AGE_RANGE:
        out.append(
            FilterClause(
                key="age-range-filter",
                label="Age range",
                kind=ClauseKind.RANGE,
                source="manual",
                attribute="age",
                bounds=(f.age_range[0], f.age_range[1]),
                suggestion=f"Widen the age range beyond {f.age_range[0]}-{f.age_range[1]}",
            )
        )
    if f.income_range is not None and tuple(f.income_range) != DEFAULT_INCOME_RANGE:
        out.append(
            FilterClause(
                key="income-filter",
                label="Annual income",
                kind=ClauseKind.RANGE,
                source="manual",
                attribute="income",
                bounds=(f.income_range[0], f.income_range[1]),
                suggestion="Lower the minimum income",
            )
        )
    if f.height_range is not None:
        out.append(
            FilterClause(
                key="height-filter",
                label="Height",
                kind=ClauseKind.RANGE,
                source="manual",
                attribute="height",
                bounds=(f.height_range[0], f.height_range[1]),
                suggestion="Widen the height range",
            )
        )

    out.append(_manual_values("education", "Education", f.education_levels, MatchMode.EQUALS, ClauseKind.ARRAY))
    out.append(
        _manual_values("employment_status", "Employment status", f.employment_statuses, MatchMode.CONTAINS, ClauseKind.ARRAY)
    )
    out.append(_manual_values("occupation", "Occupation", f.occupation_type, MatchMode.EQUALS, ClauseKind.SCALAR))
    out.append(_manual_values("country", "Country", f.country, MatchMode.CONTAINS, ClauseKind.SCALAR))
    out.append(_manual_values("state", "State", f.state, MatchMode.CONTAINS, ClauseKind.SCALAR))
    out.append(_manual_values("city", "City", f.city, MatchMode.CONTAINS, ClauseKind.SCALAR))
    out.append(_manual_values("religion", "Religion", f.religions, MatchMode.CONTAINS, ClauseKind.ARRAY))
    out.append(_manual_values("caste", "Caste", f.caste, MatchMode.CONTAINS, ClauseKind.SCALAR))
    out.append(_manual_values("community", "Community", f.community, MatchMode.CONTAINS, ClauseKind.SCALAR))
    out.append(_manual_values("mother_tongue", "Mother tongue", f.mother_tongues, MatchMode.CONTAINS, ClauseKind.ARRAY))
    out.append(_manual_values("marital_status", "Marital status", f.marital_statuses, MatchMode.MEMBER, ClauseKind.ARRAY))
    if f.manglik is not None:
        out.append(
            FilterClause(
                key="manglik-filter",
                label="Manglik",
                kind=ClauseKind.SCALAR,
                source="manual",
                attribute="manglik",
                values=(f.manglik,),
                suggestion="Set manglik to Any",
            )
        )
    out.append(_manual_values("diet", "Diet", f.diet_preference, MatchMode.EQUALS, ClauseKind.SCALAR))
    out.append(_manual_values("drinking", "Drinking habit", f.drinking_habit, MatchMode.EQUALS, ClauseKind.SCALAR))
    out.append(_manual_values("smoking", "Smoking habit", f.smoking_habit, MatchMode.EQUALS, ClauseKind.SCALAR))
    out.append(_manual_values("disability", "Differently abled", f.disability, MatchMode.EQUALS, ClauseKind.SCALAR))

    for attribute, label, enabled in (
        ("has_readiness_badge", "Readiness badge", f.has_readiness_badge),
        ("is_verified", "Verified only", f.is_verified),
        ("has_photo", "With photo only", f.has_photo),
    ):
        if enabled:
            out.append(
                FilterClause(
                    key=_manual_key(attribute),
                    label=label,
                    kind=ClauseKind.BOOLEAN,
                    source="manual",
                    attribute=attribute,
                    suggestion=f"Turn off '{label}'",
                )
            )

    for attribute, key, label, days in (
        ("joined", "recently-joined-filter", "Recently joined", f.recently_joined_days),
        ("last_active", "last-active-filter", "Recently active", f.last_active_days),
    ):
        if days:
            out.append(
                FilterClause(
                    key=key,
                    label=label,
                    kind=ClauseKind.WINDOW,
                    source="manual",
                    attribute=attribute,
                    bounds=(days, None),
                    suggestion=f"Extend the '{label.lower()}' window beyond {days} days",
                )
            )

    if f.profile_completeness > 0:
        out.append(
            FilterClause(
                key="profile-completeness-filter",
                label="Profile completeness",
                kind=ClauseKind.RANGE,
                source="manual",
                attribute="completeness",
                bounds=(f.profile_completeness, None),
                suggestion="Lower the profile completeness threshold",
            )
        )
    return [c for c in out if c is not None]


def build_search_clause(search_text: str | None) -> FilterClause | None:
    query = (search_text or "").strip()
    if not query:
        return None
    return FilterClause(
        key="search-input",
        label="Search",
        kind=ClauseKind.TEXT,
        source="manual",
        attribute="search",
        values=(query,),
        suggestion=f"Clear the search for '{query}'",
    )


def compile_plan(
    filters: ExtendedFilters | None,
    prefs: PartnerPreferences | None,
    use_preferences: bool,
    search_text: str | None = "",
    now: datetime | None = None,
) -> MatchPlan:
    filters = filters or ExtendedFilters()
    return MatchPlan(
        preference_clauses=tuple(build_preference_clauses(prefs, filters)) if use_preferences else (),
        manual_clauses=tuple(build_manual_clauses(filters)),
        search_clause=build_search_clause(search_text),
        now=now or datetime.now(timezone.utc),
    )


def _is_self(p: Profile, viewer: Profile) -> bool:
    if p.profile_id == viewer.profile_id:
        return True
    return bool(p.id and viewer.id and p.id == viewer.id)


def is_gender_complement(p: Profile, viewer: Profile) -> bool:
    wanted = OPPOSITE_GENDER.get(viewer.gender or "")
    return wanted is not None and p.gender == wanted


def is_listable(p: Profile, viewer: Profile) -> bool:
    return not _is_self(p, viewer) and p.status == "verified" and not p.is_deleted


def is_base_eligible(p: Profile, viewer: Profile) -> bool:
    return is_listable(p, viewer) and is_gender_complement(p, viewer)


def passes_relations(status: RelationStatus) -> bool:
    if status.is_blocked or status.is_blocked_by_them:
        return False
    if status.is_declined_by_me or status.is_declined_by_them:
        return False
    return True


def passes_plan(
    p: Profile, viewer: Profile, plan: MatchPlan, status_map: Mapping[str, RelationStatus]
) -> bool:
    if not is_listable(p, viewer):
        return False
    if not passes_relations(status_map.get(p.profile_id, EMPTY_STATUS)):
        return False
    if not is_gender_complement(p, viewer):
        return False
    for clause in plan.clauses:
        if not clause.matches(p, plan.now):
            return False
    return True


def evaluate(
    profile: Profile,
    viewer: Profile,
    filters: ExtendedFilters | None,
    prefs: PartnerPreferences | None,
    status_map: Mapping[str, RelationStatus],
    use_preferences: bool,
    search_text: str = "",
    now: datetime | None = None,
) -> bool:
    """Run one profile through the full predicate.

    The recently-joined and last-active windows are measured from `now`.
    Leaving it unset reads the wall clock on every call, so callers that
    compare results across calls pin it once and pass it in.
    """
    plan = compile_plan(filters, prefs, use_preferences, search_text, now)
    return passes_plan(profile, viewer, plan, status_map)


def count_active_filters(filters: ExtendedFilters | None) -> int:
    return len(build_manual_clauses(filters))


def has_partner_preferences(prefs: PartnerPreferences | None) -> bool:
    if prefs is None:
        return False
    return bool(
        prefs.age_min
        or prefs.age_max
        or _active_values(prefs.education)
        or _active_values(prefs.caste)
        or _active_values(prefs.mother_tongue)
        or _active_values(prefs.religion)
        or _active_values(prefs.living_country)
        or _active_values(prefs.diet_preference)
    )


def _parse_age(raw: Any, which: str) -> int:
    if isinstance(raw, bool):
        raise FilterValidationError(f"{which} age must be a whole number")
    if isinstance(raw, int):
        return raw
    text = str(raw if raw is not None else "").strip()
    if not text.isdigit():
        raise FilterValidationError(f"{which} age must be a whole number")
    return int(text)


def validate_age_bounds(min_raw: Any, max_raw: Any) -> tuple[int, int]:
    lo = min(max(_parse_age(min_raw, "Minimum"), AGE_SLIDER_MIN), AGE_SLIDER_MAX)
    hi = min(max(_parse_age(max_raw, "Maximum"), AGE_SLIDER_MIN), AGE_SLIDER_MAX)
    if lo > hi:
        raise FilterValidationError("Minimum age cannot be greater than maximum age")
    return lo, hi
