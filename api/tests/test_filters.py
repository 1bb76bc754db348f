from datetime import datetime, timedelta, timezone

import pytest

from matchfinder.schemas import ExtendedFilters, PartnerPreferences, Profile
from matchfinder.services.filters import (
    FilterValidationError,
    build_preference_clauses,
    count_active_filters,
    evaluate,
    has_partner_preferences,
    is_wildcard,
    profile_completeness,
    validate_age_bounds,
)

NOW = datetime(2025, 6, 1, tzinfo=timezone.utc)


def _profile(profile_id: str, gender: str = "female", **overrides):
    base = {
        "profile_id": profile_id,
        "full_name": f"Person {profile_id}",
        "age": 28,
        "gender": gender,
        "status": "verified",
        "religion": "Hindu",
        "mother_tongue": "Marathi",
        "education": "Graduate",
        "occupation": "Software Engineer",
        "location": "Pune",
        "state": "Maharashtra",
        "country": "India",
        "created_at": "2025-05-01T00:00:00Z",
    }
    base.update(overrides)
    return Profile(**base)


def _viewer(prefs: PartnerPreferences | None = None):
    return _profile("ME", gender="male", full_name="Viewer", partner_preferences=prefs)


def _check(candidate, filters=None, prefs=None, use_preferences=False, search="", viewer=None):
    viewer = viewer or _viewer(prefs)
    return evaluate(candidate, viewer, filters or ExtendedFilters(), prefs, {}, use_preferences, search, NOW)


def test_is_wildcard_sentinel_forms():
    assert is_wildcard(None)
    assert is_wildcard("")
    assert is_wildcard("any")
    assert is_wildcard("Any")
    assert is_wildcard([])
    assert is_wildcard(["any"])
    assert not is_wildcard(["hindu"])
    assert not is_wildcard("sikh")


def test_identity_and_eligibility_checks():
    assert _check(_profile("P1")) is True
    assert _check(_profile("ME")) is False
    assert _check(_profile("P2", status="pending")) is False
    assert _check(_profile("P3", is_deleted=True)) is False


def test_strict_opposite_gender():
    assert _check(_profile("P1", gender="male")) is False
    female_viewer = _profile("ME", gender="female")
    assert _check(_profile("P2", gender="male"), viewer=female_viewer) is True
    assert _check(_profile("P3", gender="female"), viewer=female_viewer) is False
    genderless_viewer = _profile("ME", gender=None)
    assert _check(_profile("P4"), viewer=genderless_viewer) is False


def test_sentinel_any_equals_absent_filter():
    pool = [
        _profile("P1", religion="Hindu", education="Graduate"),
        _profile("P2", religion="Sikh", education="Doctorate"),
        _profile("P3", religion=None, education=""),
    ]
    for field in ("religions", "education_levels", "mother_tongues", "employment_statuses", "marital_statuses"):
        with_any = ExtendedFilters(**{field: ["any"]})
        omitted = ExtendedFilters()
        assert [_check(p, with_any) for p in pool] == [_check(p, omitted) for p in pool], field


def test_manual_array_clause_is_case_insensitive_substring():
    assert _check(_profile("P1", religion="Hindu"), ExtendedFilters(religions=["hindu"])) is True
    assert _check(_profile("P2", religion="Sikh"), ExtendedFilters(religions=["hindu"])) is False
    assert _check(_profile("P3", religion=None), ExtendedFilters(religions=["hindu"])) is False


def test_preference_clauses_apply_only_with_smart_matching():
    prefs = PartnerPreferences(religion=["Hindu"], age_min=25, age_max=30)
    sikh = _profile("P1", religion="Sikh")
    assert _check(sikh, prefs=prefs, use_preferences=True) is False
    assert _check(sikh, prefs=prefs, use_preferences=False) is True
    older = _profile("P2", age=35)
    assert _check(older, prefs=prefs, use_preferences=True) is False


def test_manual_any_suppresses_matching_preference_clause():
    prefs = PartnerPreferences(religion=["Hindu"])
    sikh = _profile("P1", religion="Sikh")
    assert _check(sikh, ExtendedFilters(religions=["any"]), prefs, use_preferences=True) is True
    keys = [c.key for c in build_preference_clauses(prefs, ExtendedFilters(religions=["any"]))]
    assert "smart-matching-religion" not in keys


def test_preference_and_manual_clauses_intersect():
    prefs = PartnerPreferences(religion=["Hindu"])
    tamil = _profile("P1", religion="Hindu", mother_tongue="Tamil")
    assert _check(tamil, ExtendedFilters(mother_tongues=["Marathi"]), prefs, use_preferences=True) is False
    marathi = _profile("P2", religion="Hindu", mother_tongue="Marathi")
    assert _check(marathi, ExtendedFilters(mother_tongues=["Marathi"]), prefs, use_preferences=True) is True


def test_preference_height_uses_normalized_units():
    prefs = PartnerPreferences(height_min="5'2\"", height_max="5'8\"")
    assert _check(_profile("P1", height="5.4"), prefs=prefs, use_preferences=True) is True
    assert _check(_profile("P2", height="183 cm"), prefs=prefs, use_preferences=True) is False
    assert _check(_profile("P3", height="unknown"), prefs=prefs, use_preferences=True) is True


def test_preference_income_uses_salary_fallback():
    prefs = PartnerPreferences(salary_min="10 LPA", salary_max="25 LPA")
    assert _check(_profile("P1", salary="12 LPA"), prefs=prefs, use_preferences=True) is True
    assert _check(_profile("P2", salary="5 LPA"), prefs=prefs, use_preferences=True) is False
    assert _check(_profile("P3", salary="40 LPA"), prefs=prefs, use_preferences=True) is False
    assert _check(_profile("P4", salary=None), prefs=prefs, use_preferences=True) is False
    assert _check(_profile("P5", salary="not disclosed"), prefs=prefs, use_preferences=True) is False

    annual = PartnerPreferences(annual_income_min="20", salary_min="10 LPA")
    assert _check(_profile("P6", salary="12 LPA"), prefs=annual, use_preferences=True) is False
    assert _check(_profile("P7", salary="22 LPA"), prefs=annual, use_preferences=True) is True


def test_preference_manglik_list():
    only_manglik = PartnerPreferences(manglik=[True])
    assert _check(_profile("P1", manglik=True), prefs=only_manglik, use_preferences=True) is True
    assert _check(_profile("P2", manglik=False), prefs=only_manglik, use_preferences=True) is False
    assert _check(_profile("P3", manglik=None), prefs=only_manglik, use_preferences=True) is False

    either = PartnerPreferences(manglik=[True, False])
    assert _check(_profile("P4", manglik=False), prefs=either, use_preferences=True) is True
    assert _check(_profile("P5", manglik=None), prefs=either, use_preferences=True) is False

    unset = PartnerPreferences(manglik=[])
    assert _check(_profile("P6", manglik=None), prefs=unset, use_preferences=True) is True


def test_income_range_defaults_and_missing_income():
    no_salary = _profile("P1", salary=None)
    rich = _profile("P2", salary="30 LPA")
    assert _check(no_salary, ExtendedFilters(income_range=(0, 100))) is True
    assert _check(no_salary, ExtendedFilters(income_range=(5, 100))) is False
    assert _check(no_salary, ExtendedFilters(income_range=(0, 20))) is True
    assert _check(rich, ExtendedFilters(income_range=(0, 20))) is False
    assert _check(rich, ExtendedFilters(income_range=(10, 40))) is True


def test_height_filter_ignores_unparseable_heights():
    flt = ExtendedFilters(height_range=(160, 170))
    assert _check(_profile("P1", height=None), flt) is True
    assert _check(_profile("P2", height="5'5\""), flt) is True
    assert _check(_profile("P3", height="6'"), flt) is False


def test_boolean_and_window_filters():
    no_photo = _profile("P1", photos=[])
    assert _check(no_photo, ExtendedFilters(has_photo=True)) is False
    assert _check(_profile("P2", photos=["https://x/1.jpg"]), ExtendedFilters(has_photo=True)) is True
    assert _check(_profile("P3"), ExtendedFilters(has_readiness_badge=True)) is False
    recent = _profile("P4", created_at=(NOW - timedelta(days=3)).isoformat())
    old = _profile("P5", created_at=(NOW - timedelta(days=90)).isoformat())
    assert _check(recent, ExtendedFilters(recently_joined_days=7)) is True
    assert _check(old, ExtendedFilters(recently_joined_days=7)) is False
    idle = _profile("P6", last_login_at="not-a-date")
    assert _check(idle, ExtendedFilters(last_active_days=30)) is False


def test_scalar_filters_and_manglik():
    assert _check(_profile("P1", location="Pune"), ExtendedFilters(city="pune")) is True
    assert _check(_profile("P2", location="Mumbai"), ExtendedFilters(city="pune")) is False
    assert _check(_profile("P3", diet_preference="veg"), ExtendedFilters(diet_preference="veg")) is True
    assert _check(_profile("P4", diet_preference="non-veg"), ExtendedFilters(diet_preference="veg")) is False
    assert _check(_profile("P5", diet_preference="non-veg"), ExtendedFilters(diet_preference="any")) is True
    assert _check(_profile("P6", manglik=True), ExtendedFilters(manglik=False)) is False
    assert _check(_profile("P7", manglik=None), ExtendedFilters(manglik=False)) is False


def test_text_search_matches_name_location_or_id():
    p = _profile("SM000123", full_name="Meera Iyer", location="Chennai")
    assert _check(p, search="meera") is True
    assert _check(p, search="CHENNAI") is True
    assert _check(p, search="sm000123") is True
    assert _check(p, search="kavya") is False
    assert _check(p, search="   ") is True


def test_profile_completeness_threshold():
    sparse = _profile("P1")
    assert profile_completeness(sparse) < 80
    assert _check(sparse, ExtendedFilters(profile_completeness=80)) is False
    assert _check(sparse, ExtendedFilters(profile_completeness=10)) is True


def test_evaluate_is_pure():
    prefs = PartnerPreferences(religion=["Hindu"], mother_tongue=["Marathi"])
    p = _profile("P1")
    flt = ExtendedFilters(age_range=(25, 30), religions=["hindu"])
    first = _check(p, flt, prefs, use_preferences=True)
    second = _check(p, flt, prefs, use_preferences=True)
    assert first is second is True


def test_window_clauses_are_repeatable_with_pinned_now():
    edge = _profile("P1", created_at=(NOW - timedelta(days=7)).isoformat())
    flt = ExtendedFilters(recently_joined_days=7)
    results = {_check(edge, flt) for _ in range(3)}
    assert results == {True}
    later = NOW + timedelta(seconds=1)
    viewer = _viewer()
    assert evaluate(edge, viewer, flt, None, {}, False, "", later) is False


def test_active_filter_count_ignores_wildcards_and_defaults():
    assert count_active_filters(ExtendedFilters()) == 0
    assert count_active_filters(ExtendedFilters(age_range=(18, 60), religions=["any"], income_range=(0, 100))) == 0
    flt = ExtendedFilters(age_range=(25, 30), religions=["Hindu"], has_photo=True, diet_preference="any")
    assert count_active_filters(flt) == 3


def test_has_partner_preferences():
    assert has_partner_preferences(None) is False
    assert has_partner_preferences(PartnerPreferences()) is False
    assert has_partner_preferences(PartnerPreferences(religion=["any"])) is False
    assert has_partner_preferences(PartnerPreferences(age_min=24)) is True


def test_validate_age_bounds():
    assert validate_age_bounds("25", "30") == (25, 30)
    assert validate_age_bounds(10, 70) == (18, 60)
    with pytest.raises(FilterValidationError):
        validate_age_bounds("2a", "30")
    with pytest.raises(FilterValidationError):
        validate_age_bounds("", "30")
    with pytest.raises(FilterValidationError):
        validate_age_bounds("40", "30")
