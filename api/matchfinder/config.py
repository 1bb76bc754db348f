import json
import os
from typing import Any

PAGE_SIZE = int(os.getenv("MATCH_PAGE_SIZE", "20"))
SEARCH_DEBOUNCE_MS = int(os.getenv("SEARCH_DEBOUNCE_MS", "300"))

AGE_SLIDER_MIN = int(os.getenv("AGE_SLIDER_MIN", "18"))
AGE_SLIDER_MAX = int(os.getenv("AGE_SLIDER_MAX", "60"))
DEFAULT_AGE_RANGE: tuple[int, int] = (AGE_SLIDER_MIN, AGE_SLIDER_MAX)
DEFAULT_INCOME_RANGE: tuple[int, int] = (
    int(os.getenv("INCOME_SLIDER_MIN", "0")),
    int(os.getenv("INCOME_SLIDER_MAX", "100")),
)

AGE_RESTRICTIVE_RATIO = float(os.getenv("AGE_RESTRICTIVE_RATIO", "0.30"))
MAX_DIAGNOSTICS = int(os.getenv("MAX_DIAGNOSTICS", "5"))

WILDCARD = "any"

DEFAULT_COMPATIBILITY_WEIGHTS: dict[str, Any] = {
    "religion": int(os.getenv("COMPAT_RELIGION_W", "2")),
    "mother_tongue": int(os.getenv("COMPAT_MOTHER_TONGUE_W", "2")),
    "education": int(os.getenv("COMPAT_EDUCATION_W", "1")),
    "living_country": int(os.getenv("COMPAT_COUNTRY_W", "1")),
    "diet": int(os.getenv("COMPAT_DIET_W", "1")),
    "readiness_badge": int(os.getenv("COMPAT_BADGE_W", "1")),
    "photo": int(os.getenv("COMPAT_PHOTO_W", "1")),
}

if os.getenv("COMPATIBILITY_WEIGHTS_JSON"):
    try:
        DEFAULT_COMPATIBILITY_WEIGHTS.update(json.loads(os.getenv("COMPATIBILITY_WEIGHTS_JSON", "{}")))
    except json.JSONDecodeError:
        pass

DEV_MODE = os.getenv("DEV_MODE", "false").lower() == "true"
