from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Sequence

from ..schemas import ExtendedFilters, Profile, RelationshipLogs
from .diagnostics import DiagnosticReport, analyze_empty_result
from .filters import compile_plan, count_active_filters, passes_plan
from .fingerprint import view_fingerprint
from .pagination import page_slice, total_pages
from .relations import RelationStatus, build_relation_index, build_status_map
from .sorting import sort_profiles

logger = logging.getLogger(__name__)


class ViewerNotFound(LookupError):
    pass


@dataclass
class MatchInputs:
    viewer_profile_id: str
    profiles: Sequence[Profile]
    logs: RelationshipLogs = field(default_factory=RelationshipLogs)
    filters: ExtendedFilters = field(default_factory=ExtendedFilters)
    use_preferences: bool = True
    search_text: str = ""
    sort: str = "newest"
    page: int = 1
    now: datetime | None = None


@dataclass
class MatchPage:
    profiles: list[Profile]
    statuses: dict[str, RelationStatus]
    total: int
    page: int
    total_pages: int
    active_filter_count: int
    fingerprint: str
    diagnostics: DiagnosticReport | None = None


def find_viewer(profiles: Sequence[Profile], viewer_profile_id: str) -> Profile:
    for p in profiles:
        if p.profile_id == viewer_profile_id or (p.id and p.id == viewer_profile_id):
            return p
    raise ViewerNotFound(f"viewer profile {viewer_profile_id} is not in the profile pool")


def compute_matches(inputs: MatchInputs) -> MatchPage:
    viewer = find_viewer(inputs.profiles, inputs.viewer_profile_id)
    prefs = viewer.partner_preferences

    logs = inputs.logs
    index = build_relation_index(
        viewer.profile_id,
        interests=logs.interests,
        contact_requests=logs.contact_requests,
        blocks=logs.blocked_profiles,
        declines=logs.declined_profiles,
        views=logs.profile_views,
    )
    status_map = build_status_map(index, inputs.profiles)

    now = inputs.now or datetime.now(timezone.utc)
    plan = compile_plan(
        inputs.filters,
        prefs,
        use_preferences=inputs.use_preferences and prefs is not None,
        search_text=inputs.search_text,
        now=now,
    )
    filtered = [p for p in inputs.profiles if passes_plan(p, viewer, plan, status_map)]

    diagnostics = None
    if not filtered:
        diagnostics = analyze_empty_result(inputs.profiles, viewer, plan, status_map)

    ordered = sort_profiles(filtered, inputs.sort, prefs)
    pages = total_pages(len(ordered))
    window = page_slice(ordered, inputs.page)

    logger.info(
        "[MATCHES] viewer=%s pool=%s matched=%s page=%s/%s sort=%s clauses=%s",
        viewer.profile_id,
        len(inputs.profiles),
        len(filtered),
        inputs.page,
        pages,
        inputs.sort,
        len(plan.clauses),
    )
    return MatchPage(
        profiles=window,
        statuses={p.profile_id: status_map[p.profile_id] for p in window},
        total=len(filtered),
        page=inputs.page,
        total_pages=pages,
        active_filter_count=count_active_filters(inputs.filters),
        fingerprint=view_fingerprint(inputs.filters, inputs.sort, inputs.search_text, inputs.use_preferences),
        diagnostics=diagnostics,
    )
