from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PartnerPreferences(CamelModel):
    age_min: int | None = None
    age_max: int | None = None
    height_min: str | None = None
    height_max: str | None = None
    marital_status: list[str] = Field(default_factory=list)
    religion: list[str] = Field(default_factory=list)
    caste: list[str] = Field(default_factory=list)
    community: list[str] = Field(default_factory=list)
    mother_tongue: list[str] = Field(default_factory=list)
    education: list[str] = Field(default_factory=list)
    employment_status: list[str] = Field(default_factory=list)
    occupation: list[str] = Field(default_factory=list)
    living_country: list[str] = Field(default_factory=list)
    living_state: list[str] = Field(default_factory=list)
    location: list[str] = Field(default_factory=list)
    diet_preference: list[str] = Field(default_factory=list)
    drinking_habit: list[str] = Field(default_factory=list)
    smoking_habit: list[str] = Field(default_factory=list)
    manglik: list[bool] = Field(default_factory=list)
    disability: list[str] = Field(default_factory=list)
    annual_income_min: str | None = None
    annual_income_max: str | None = None
    salary_min: str | None = None
    salary_max: str | None = None


class Profile(CamelModel):
    id: str | None = None
    profile_id: str
    first_name: str = ""
    last_name: str = ""
    full_name: str = ""
    age: int = 0
    gender: Literal["male", "female"] | None = None
    marital_status: str | None = None
    religion: str | None = None
    caste: str | None = None
    community: str | None = None
    mother_tongue: str | None = None
    disability: str | None = None
    location: str = ""
    state: str | None = None
    country: str = ""
    education: str = ""
    employment_status: str | None = None
    occupation: str = ""
    salary: str | None = None
    height: str | None = None
    diet_preference: str | None = None
    drinking_habit: str | None = None
    smoking_habit: str | None = None
    manglik: bool | None = None
    has_readiness_badge: bool = False
    bio: str | None = None
    status: str = "pending"
    is_deleted: bool = False
    created_at: str | None = None
    updated_at: str | None = None
    last_activity_at: str | None = None
    last_login_at: str | None = None
    photos: list[str] = Field(default_factory=list)
    partner_preferences: PartnerPreferences | None = None

    @property
    def display_name(self) -> str:
        if self.full_name:
            return self.full_name
        return " ".join(part for part in (self.first_name, self.last_name) if part)


class Interest(CamelModel):
    id: str | None = None
    from_profile_id: str | None = None
    to_profile_id: str | None = None
    status: str = "pending"
    created_at: str | None = None


class ContactRequest(CamelModel):
    id: str | None = None
    from_profile_id: str | None = None
    to_profile_id: str | None = None
    status: str = "pending"
    created_at: str | None = None


class BlockedProfile(CamelModel):
    id: str | None = None
    blocker_profile_id: str | None = None
    blocked_profile_id: str | None = None
    is_unblocked: bool = False
    created_at: str | None = None


class DeclinedProfile(CamelModel):
    id: str | None = None
    decliner_profile_id: str | None = None
    declined_profile_id: str | None = None
    is_reconsidered: bool = False
    created_at: str | None = None


class ProfileView(CamelModel):
    viewer_profile_id: str | None = None
    viewed_profile_id: str | None = None
    viewed_at: str | None = None


class ExtendedFilters(CamelModel):
    caste: str | None = None
    community: str | None = None
    religions: list[str] | None = None
    mother_tongues: list[str] | None = None
    marital_statuses: list[str] | None = None
    education_levels: list[str] | None = None
    employment_statuses: list[str] | None = None
    occupation_type: str | None = None
    country: str | None = None
    state: str | None = None
    city: str | None = None
    diet_preference: str | None = None
    drinking_habit: str | None = None
    smoking_habit: str | None = None
    manglik: bool | None = None
    disability: str | None = None
    age_range: tuple[int, int] | None = None
    income_range: tuple[int, int] | None = None
    height_range: tuple[int, int] | None = None
    has_photo: bool = False
    is_verified: bool = False
    has_readiness_badge: bool = False
    recently_joined_days: int | None = None
    last_active_days: int | None = None
    profile_completeness: int = 0


class RelationshipLogs(CamelModel):
    interests: list[Interest] = Field(default_factory=list)
    contact_requests: list[ContactRequest] = Field(default_factory=list)
    blocked_profiles: list[BlockedProfile] = Field(default_factory=list)
    declined_profiles: list[DeclinedProfile] = Field(default_factory=list)
    profile_views: list[ProfileView] = Field(default_factory=list)


class MatchSearchRequest(CamelModel):
    viewer_profile_id: str
    profiles: list[Profile] = Field(default_factory=list)
    logs: RelationshipLogs = Field(default_factory=RelationshipLogs)
    filters: ExtendedFilters = Field(default_factory=ExtendedFilters)
    use_preferences: bool = True
    search: str = ""
    sort: Literal["newest", "age-asc", "age-desc", "name-asc", "compatibility"] = "newest"
    page: int = 1


class InteractionStatusOut(CamelModel):
    is_new: bool = True
    is_viewed: bool = False
    interest_sent: bool = False
    interest_received: bool = False
    interest_accepted: bool = False
    interest_expired: bool = False
    contact_request_sent: bool = False
    contact_request_received: bool = False
    contact_request_accepted: bool = False
    can_chat: bool = False


class RelationStatusOut(CamelModel):
    is_declined_by_me: bool = False
    is_declined_by_them: bool = False
    is_blocked: bool = False
    is_blocked_by_them: bool = False
    interaction: InteractionStatusOut = Field(default_factory=InteractionStatusOut)


class DiagnosticIssueOut(CamelModel):
    filter_key: str
    label: str
    match_count: int
    suggestion: str
    source: str


class DiagnosticsOut(CamelModel):
    reason: str
    base_pool_size: int
    issues: list[DiagnosticIssueOut] = Field(default_factory=list)


class MatchSearchResponse(CamelModel):
    profiles: list[dict[str, Any]]
    statuses: dict[str, RelationStatusOut]
    total: int
    page: int
    total_pages: int
    active_filter_count: int
    diagnostics: DiagnosticsOut | None = None
