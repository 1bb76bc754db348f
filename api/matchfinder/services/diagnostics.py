from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Mapping, Sequence

from ..config import AGE_RESTRICTIVE_RATIO, MAX_DIAGNOSTICS
from ..schemas import Profile
from .filters import MatchPlan, is_base_eligible, passes_relations
from .relations import EMPTY_STATUS, RelationStatus

logger = logging.getLogger(__name__)

REASON_NO_ELIGIBLE = "no_eligible_candidates"
REASON_TOO_STRICT = "filters_too_strict"
REASON_COMBINATION = "filter_combination"
REASON_HIDDEN = "hidden_by_relationships"


class DiagnosticsNotApplicable(RuntimeError):
    pass


@dataclass(frozen=True)
class DiagnosticIssue:
    filter_key: str
    label: str
    match_count: int
    suggestion: str
    source: str


@dataclass
class DiagnosticReport:
    reason: str
    base_pool_size: int
    issues: list[DiagnosticIssue] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def base_pool(profiles: Sequence[Profile], viewer: Profile) -> list[Profile]:
    return [p for p in profiles if is_base_eligible(p, viewer)]


def analyze_empty_result(
    profiles: Sequence[Profile],
    viewer: Profile,
    plan: MatchPlan,
    status_map: Mapping[str, RelationStatus] | None = None,
    result_count: int = 0,
) -> DiagnosticReport:
    """Explain an empty match list one clause at a time.

    Every active clause is counted alone against the base pool (verified,
    not deleted, opposite gender, not the viewer) and never combined with
    the others. A clause is reported when it admits nobody; the age clauses
    are also reported when they admit fewer than AGE_RESTRICTIVE_RATIO of
    the pool. Evaluation order is kept and the list is capped at
    MAX_DIAGNOSTICS entries.

    When blocks or declines hide the whole pool the clauses are not the
    cause, so the report says so instead of listing them.
    """
    if result_count:
        raise DiagnosticsNotApplicable(f"diagnostics requested for a non-empty result ({result_count} matches)")

    pool = base_pool(profiles, viewer)
    if not pool:
        logger.info("[DIAGNOSTICS] viewer=%s has no eligible candidates", viewer.profile_id)
        return DiagnosticReport(reason=REASON_NO_ELIGIBLE, base_pool_size=0)

    clauses = plan.clauses
    statuses = status_map or {}
    if not any(passes_relations(statuses.get(p.profile_id, EMPTY_STATUS)) for p in pool):
        logger.info("[DIAGNOSTICS] viewer=%s pool=%s hidden by relationships", viewer.profile_id, len(pool))
        return DiagnosticReport(reason=REASON_HIDDEN, base_pool_size=len(pool))
    if not clauses:
        return DiagnosticReport(reason=REASON_HIDDEN, base_pool_size=len(pool))

    threshold = len(pool) * AGE_RESTRICTIVE_RATIO
    issues: list[DiagnosticIssue] = []
    for clause in clauses:
        count = sum(1 for p in pool if clause.matches(p, plan.now))
        restrictive = count == 0 or (clause.attribute == "age" and count < threshold)
        if not restrictive:
            continue
        issues.append(
            DiagnosticIssue(
                filter_key=clause.key,
                label=clause.label,
                match_count=count,
                suggestion=clause.suggestion,
                source=clause.source,
            )
        )
        if len(issues) >= MAX_DIAGNOSTICS:
            break

    reason = REASON_TOO_STRICT if issues else REASON_COMBINATION
    logger.info(
        "[DIAGNOSTICS] viewer=%s pool=%s clauses=%s reason=%s issues=%s",
        viewer.profile_id,
        len(pool),
        len(clauses),
        reason,
        [i.filter_key for i in issues],
    )
    return DiagnosticReport(reason=reason, base_pool_size=len(pool), issues=issues)
