import logging
from datetime import date
from typing import Any

from fastapi import APIRouter, HTTPException

from ..config import MATCH_CANDIDATE_LIMIT
from ..database import SessionLocal
from .. import repo
from ..schemas import (
    CompatibilityRequest,
    CompatibilityResponse,
    MatchListResponse,
    MutualMatchResponse,
    ProfileSnapshotIn,
    ResolveRequest,
)
from ..services.categories import InputError, Profile
from ..services.explanations import build_criteria, describe_block_reason
from ..services.matching import evaluate_direction, find_mutual_matches, resolve
from ..snapshots import profile_from_row, profile_from_snapshot

logger = logging.getLogger(__name__)

router = APIRouter()
scaffold_router = APIRouter()


def _as_of(value: date | None) -> date:
    return value or date.today()


def _profile(payload: ProfileSnapshotIn, as_of: date) -> Profile:
    return profile_from_snapshot(
        payload.id,
        payload.attributes,
        payload.preferences,
        payload.dealbreakers,
        as_of=as_of,
        date_of_birth=payload.date_of_birth,
    )


def _resolve_response(profile_a: Profile, profile_b: Profile) -> dict[str, Any]:
    result = resolve(profile_a, profile_b)
    return {
        "profile_a_id": profile_a.id,
        "profile_b_id": profile_b.id,
        "mutual": result.mutual,
        "block_reason": result.block_reason,
        "block_message": describe_block_reason(result.block_reason),
        "seeker_as_viewer_score": result.seeker_as_viewer_score,
        "seeker_as_candidate_score": result.seeker_as_candidate_score,
    }


def _load_profile(db, profile_id: str, as_of: date) -> Profile:
    row = repo.fetch_profile_row(db, profile_id)
    if not row:
        raise HTTPException(status_code=404, detail="Profile not found")
    return profile_from_row(row, as_of)


@router.post("/match/resolve", response_model=MutualMatchResponse)
def match_resolve(payload: ResolveRequest) -> dict[str, Any]:
    as_of = _as_of(payload.as_of)
    try:
        return _resolve_response(_profile(payload.profile_a, as_of), _profile(payload.profile_b, as_of))
    except InputError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@router.post("/match/compatibility", response_model=CompatibilityResponse)
def match_compatibility(payload: CompatibilityRequest) -> dict[str, Any]:
    as_of = _as_of(payload.as_of)
    try:
        seeker = _profile(payload.seeker, as_of)
        candidate = _profile(payload.candidate, as_of)
        if seeker.id == candidate.id:
            raise InputError(f"cannot match profile {seeker.id} against itself")
        result = evaluate_direction(seeker, candidate)
        criteria = build_criteria(seeker, candidate)
    except InputError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return {
        "seeker_id": seeker.id,
        "candidate_id": candidate.id,
        "passed": result.passed,
        "failed_category": result.failed_category,
        "block_message": describe_block_reason(result.failed_category),
        "score": result.score,
        "criteria": criteria,
    }


@router.get("/profiles/{profile_id}/matches", response_model=MatchListResponse)
def profile_matches(profile_id: str, limit: int | None = None) -> dict[str, Any]:
    as_of = date.today()
    pool_limit = min(limit, MATCH_CANDIDATE_LIMIT) if limit and limit > 0 else MATCH_CANDIDATE_LIMIT
    with SessionLocal() as db:
        seeker_row = repo.fetch_profile_row(db, profile_id)
        if not seeker_row:
            raise HTTPException(status_code=404, detail="Profile not found")
        candidate_rows = repo.fetch_candidate_rows(db, seeker_row, pool_limit)

    seeker = profile_from_row(seeker_row, as_of)
    candidates = [profile_from_row(row, as_of) for row in candidate_rows]
    try:
        matches = find_mutual_matches(seeker, candidates, limit=pool_limit)
    except InputError as exc:
        logger.warning("[MATCH] rejected match list for profile=%s: %s", profile_id, exc)
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return {
        "profile_id": seeker.id,
        "evaluated": len(candidates),
        "matches": [
            {
                "profile_id": candidate.id,
                "seeker_as_viewer_score": result.seeker_as_viewer_score,
                "seeker_as_candidate_score": result.seeker_as_candidate_score,
            }
            for candidate, result in matches
        ],
    }


@router.get("/profiles/{profile_id}/match-score/{other_id}", response_model=MutualMatchResponse)
def profile_match_score(profile_id: str, other_id: str) -> dict[str, Any]:
    if profile_id == other_id:
        raise HTTPException(status_code=400, detail="Cannot score a profile against itself")
    as_of = date.today()
    with SessionLocal() as db:
        seeker = _load_profile(db, profile_id, as_of)
        other = _load_profile(db, other_id, as_of)
    try:
        return _resolve_response(seeker, other)
    except InputError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@scaffold_router.get("/health")
def match_scaffold_health() -> dict[str, str]:
    return {"status": "ok", "module": "match"}
