from datetime import datetime, timezone

import pytest

from matchfinder.schemas import BlockedProfile, ExtendedFilters, PartnerPreferences, Profile, RelationshipLogs
from matchfinder.services.diagnostics import (
    REASON_COMBINATION,
    REASON_HIDDEN,
    REASON_NO_ELIGIBLE,
    REASON_TOO_STRICT,
    DiagnosticsNotApplicable,
    analyze_empty_result,
)
from matchfinder.services.filters import compile_plan
from matchfinder.services.pipeline import MatchInputs, compute_matches

NOW = datetime(2025, 6, 1, tzinfo=timezone.utc)


def _pool(n: int = 100, **overrides):
    out = []
    for i in range(n):
        data = {
            "profile_id": f"F{i:03d}",
            "full_name": f"Bride {i}",
            "gender": "female",
            "status": "verified",
            "age": 31 + (i % 10),
            "religion": "Hindu" if i % 2 else "Jain",
            "mother_tongue": "Hindi",
            "country": "India",
            "education": "Graduate",
        }
        data.update(overrides)
        out.append(Profile(**data))
    return out


def _viewer(prefs: PartnerPreferences | None = None):
    return Profile(profile_id="ME", full_name="Groom", gender="male", status="verified", age=30, partner_preferences=prefs)


def _run(pool, filters, viewer=None, use_preferences=False, logs=None):
    viewer = viewer or _viewer()
    return compute_matches(
        MatchInputs(
            viewer_profile_id=viewer.profile_id,
            profiles=[viewer] + pool,
            logs=logs or RelationshipLogs(),
            filters=filters,
            use_preferences=use_preferences,
            now=NOW,
        )
    )


def test_zero_match_religion_reported():
    result = _run(_pool(), ExtendedFilters(religions=["sikh"]))
    assert result.total == 0
    assert result.profiles == []
    report = result.diagnostics
    assert report.reason == REASON_TOO_STRICT
    assert report.base_pool_size == 100
    assert report.issues[0].filter_key == "religion-filter"
    assert report.issues[0].match_count == 0


def test_diagnostics_absent_when_results_exist():
    result = _run(_pool(), ExtendedFilters(religions=["hindu"]))
    assert result.total == 50
    assert result.diagnostics is None


def test_empty_base_pool_is_a_distinct_reason():
    result = _run(_pool(10, gender="male"), ExtendedFilters(religions=["sikh"]))
    assert result.diagnostics.reason == REASON_NO_ELIGIBLE
    assert result.diagnostics.issues == []

    result = _run(_pool(10, status="pending"), ExtendedFilters())
    assert result.diagnostics.reason == REASON_NO_ELIGIBLE


def test_restrictive_age_range_reported_below_threshold():
    # ages cycle 31..40, so 31-32 admits 20 of 100
    flt = ExtendedFilters(age_range=(31, 32), religions=["sikh"])
    issues = _run(_pool(), flt).diagnostics.issues
    assert [i.filter_key for i in issues] == ["age-range-filter", "religion-filter"]
    assert issues[0].match_count == 20


def test_age_range_above_threshold_not_reported():
    flt = ExtendedFilters(age_range=(31, 35), religions=["sikh"])
    issues = _run(_pool(), flt).diagnostics.issues
    assert [i.filter_key for i in issues] == ["religion-filter"]


def test_preference_clauses_come_first_and_list_is_capped():
    prefs = PartnerPreferences(religion=["Sikh"], education=["Doctorate"], mother_tongue=["Tamil"])
    flt = ExtendedFilters(
        country="Canada",
        city="Toronto",
        caste="Iyer",
        diet_preference="vegan",
    )
    report = _run(_pool(), flt, viewer=_viewer(prefs), use_preferences=True).diagnostics
    keys = [i.filter_key for i in report.issues]
    assert len(keys) == 5
    assert keys == [
        "smart-matching-religion",
        "smart-matching-education",
        "smart-matching-mother-tongue",
        "country-filter",
        "city-filter",
    ]
    assert report.issues[0].source == "preference"


def test_combination_reason_when_each_clause_alone_admits_someone():
    pool = [
        Profile(profile_id="F1", gender="female", status="verified", age=29, religion="Hindu", mother_tongue="Tamil"),
        Profile(profile_id="F2", gender="female", status="verified", age=29, religion="Jain", mother_tongue="Hindi"),
    ]
    report = _run(pool, ExtendedFilters(religions=["jain"], mother_tongues=["tamil"])).diagnostics
    assert report.reason == REASON_COMBINATION
    assert report.issues == []


def test_hidden_by_relationships_without_any_clause():
    pool = _pool(3)
    logs = RelationshipLogs(
        blocked_profiles=[BlockedProfile(blocker_profile_id="ME", blocked_profile_id=p.profile_id) for p in pool]
    )
    report = _run(pool, ExtendedFilters(), logs=logs).diagnostics
    assert report.reason == REASON_HIDDEN
    assert report.base_pool_size == 3


def test_hidden_by_relationships_even_with_a_filter_set():
    pool = _pool(3, religion="Hindu")
    logs = RelationshipLogs(
        blocked_profiles=[BlockedProfile(blocker_profile_id="ME", blocked_profile_id=p.profile_id) for p in pool]
    )
    result = _run(pool, ExtendedFilters(religions=["hindu"]), logs=logs)
    assert result.total == 0
    assert result.diagnostics.reason == REASON_HIDDEN
    assert result.diagnostics.issues == []


def test_analyzer_refuses_non_empty_results():
    plan = compile_plan(ExtendedFilters(), None, use_preferences=False, now=NOW)
    with pytest.raises(DiagnosticsNotApplicable):
        analyze_empty_result(_pool(3), _viewer(), plan, result_count=3)


def test_diagnostics_are_idempotent():
    flt = ExtendedFilters(religions=["sikh"], age_range=(31, 32))
    first = _run(_pool(), flt).diagnostics
    second = _run(_pool(), flt).diagnostics
    assert first == second
