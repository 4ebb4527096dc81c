import logging
from typing import Any

from sqlalchemy import text

logger = logging.getLogger(__name__)


def _normalize_gender(value: Any) -> str | None:
    if value is None:
        return None
    v = str(value).strip().lower()
    return v or None


def _opposite_gender(value: Any) -> str | None:
    return {"male": "female", "female": "male", "m": "female", "f": "male"}.get(_normalize_gender(value) or "")


def fetch_profile_row(db, profile_id: str) -> dict[str, Any] | None:
    row = db.execute(
        text(
            """
            SELECT *
            FROM profile
            WHERE id = :profile_id
            LIMIT 1
            """
        ),
        {"profile_id": profile_id},
    ).mappings().first()
    if not row:
        logger.info("[REPO] profile not found id=%s", profile_id)
        return None
    return dict(row)


def fetch_candidate_rows(db, seeker_row: dict[str, Any], limit: int) -> list[dict[str, Any]]:
    """Approved, active profiles of the opposite gender, excluding the seeker."""
    gender = _opposite_gender(seeker_row.get("gender"))
    if gender is None:
        logger.warning("[REPO] seeker id=%s has no usable gender; no candidates", seeker_row.get("id"))
        return []
    rows = db.execute(
        text(
            """
            SELECT *
            FROM profile
            WHERE LOWER(TRIM(gender)) = :gender
              AND approval_status = 'approved'
              AND COALESCE(is_active, TRUE) = TRUE
              AND id <> :seeker_id
            ORDER BY id
            LIMIT :limit
            """
        ),
        {"gender": gender, "seeker_id": seeker_row.get("id"), "limit": int(limit)},
    ).mappings().all()
    logger.info("[REPO] seeker id=%s candidate_rows=%s", seeker_row.get("id"), len(rows))
    return [dict(r) for r in rows]
