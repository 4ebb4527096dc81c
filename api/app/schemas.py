from datetime import date
from typing import Any
from pydantic import BaseModel, Field


class ProfileSnapshotIn(BaseModel):
    id: str
    attributes: dict[str, Any] = Field(default_factory=dict)
    preferences: dict[str, Any] = Field(default_factory=dict)
    dealbreakers: dict[str, Any] = Field(default_factory=dict)
    # Optional; when given, age is derived from it as of the request date.
    date_of_birth: str | None = None


class ResolveRequest(BaseModel):
    profile_a: ProfileSnapshotIn
    profile_b: ProfileSnapshotIn
    as_of: date | None = None


class CompatibilityRequest(BaseModel):
    seeker: ProfileSnapshotIn
    candidate: ProfileSnapshotIn
    as_of: date | None = None


class MutualMatchResponse(BaseModel):
    profile_a_id: str
    profile_b_id: str
    mutual: bool
    block_reason: str | None = None
    block_message: str | None = None
    seeker_as_viewer_score: int | None = None
    seeker_as_candidate_score: int | None = None


class CriterionOut(BaseModel):
    name: str
    label: str
    matched: bool
    confidence: float
    seeker_preference: str
    candidate_value: str
    is_dealbreaker: bool


class CompatibilityResponse(BaseModel):
    seeker_id: str
    candidate_id: str
    passed: bool
    failed_category: str | None = None
    block_message: str | None = None
    score: int
    criteria: list[CriterionOut] = Field(default_factory=list)


class MatchListItem(BaseModel):
    profile_id: str
    seeker_as_viewer_score: int
    seeker_as_candidate_score: int


class MatchListResponse(BaseModel):
    profile_id: str
    evaluated: int
    matches: list[MatchListItem] = Field(default_factory=list)
