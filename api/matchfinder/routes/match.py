from typing import Any

from fastapi import APIRouter, HTTPException

from ..schemas import DiagnosticsOut, MatchSearchRequest, MatchSearchResponse, RelationStatusOut
from ..services.filters import FilterValidationError, validate_age_bounds
from ..services.pagination import PageOutOfRange
from ..services.pipeline import MatchInputs, ViewerNotFound, compute_matches

router = APIRouter()
scaffold_router = APIRouter()


@scaffold_router.get("/health")
def match_scaffold_health() -> dict[str, str]:
    return {"status": "ok", "module": "match"}


@router.post("/matches/search", response_model=MatchSearchResponse)
def search_matches(payload: MatchSearchRequest) -> dict[str, Any]:
    filters = payload.filters
    if filters.age_range is not None:
        try:
            lo, hi = validate_age_bounds(*filters.age_range)
        except FilterValidationError as exc:
            raise HTTPException(status_code=400, detail=str(exc))
        filters = filters.model_copy(update={"age_range": (lo, hi)})

    try:
        result = compute_matches(
            MatchInputs(
                viewer_profile_id=payload.viewer_profile_id,
                profiles=payload.profiles,
                logs=payload.logs,
                filters=filters,
                use_preferences=payload.use_preferences,
                search_text=payload.search,
                sort=payload.sort,
                page=payload.page,
            )
        )
    except ViewerNotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except PageOutOfRange as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    diagnostics = None
    if result.diagnostics is not None:
        diagnostics = DiagnosticsOut.model_validate(result.diagnostics.to_dict())

    return {
        "profiles": [p.model_dump(by_alias=True) for p in result.profiles],
        "statuses": {pid: RelationStatusOut.model_validate(status.to_dict()) for pid, status in result.statuses.items()},
        "total": result.total,
        "page": result.page,
        "total_pages": result.total_pages,
        "active_filter_count": result.active_filter_count,
        "diagnostics": diagnostics,
    }
