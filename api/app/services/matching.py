from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields
from typing import Any, Iterable, Mapping

from .categories import (
    CATEGORY_ORDER,
    COMMUNITY,
    AttributeRecord,
    InputError,
    MatchOutcome,
    PreferenceRecord,
    Profile,
    validate_flags,
)
from .matchers import MATCHERS, match
from .normalization import ANY, normalize_attributes, normalize_preferences

logger = logging.getLogger(__name__)


@dataclass
class GateResult:
    passed: bool
    failed_category: str | None = None


@dataclass
class CompatibilityResult:
    passed: bool
    failed_category: str | None
    score: int
    breakdown: dict[str, MatchOutcome] = field(default_factory=dict)


@dataclass
class MutualMatchResult:
    mutual: bool
    block_reason: str | None
    # How well the other profile satisfies this one's preferences, and the reverse.
    seeker_as_viewer_score: int | None
    seeker_as_candidate_score: int | None


_PREFERENCE_FIELDS = frozenset(f.name for f in fields(PreferenceRecord))
_ATTRIBUTE_FIELDS = frozenset(f.name for f in fields(AttributeRecord))
_PREFERENCE_VARIANTS = tuple(MATCHERS)


def _is_prepared(preference: Any) -> bool:
    return preference is None or preference == ANY or isinstance(preference, _PREFERENCE_VARIANTS)


def _prepared_preferences(
    preferences: PreferenceRecord | Mapping[str, Any] | None, own: AttributeRecord | None
) -> dict[str, Any]:
    """Normalized preferences keyed by category.

    A mapping may hold either the output of ``normalize_preferences`` or raw
    ``PreferenceRecord`` fields; raw fields are normalized here.
    """
    if isinstance(preferences, PreferenceRecord):
        return normalize_preferences(preferences, own)
    mapping = dict(preferences or {})
    prepared = [key for key, value in mapping.items() if _is_prepared(value)]
    if len(prepared) == len(mapping):
        return mapping
    unknown = sorted(set(mapping) - _PREFERENCE_FIELDS)
    if unknown:
        raise InputError(f"unknown preference fields: {', '.join(unknown)}")
    if any(isinstance(mapping[key], _PREFERENCE_VARIANTS) for key in prepared):
        raise InputError("preference mapping mixes normalized and raw values")
    return normalize_preferences(PreferenceRecord(**mapping), own)


def _prepared_attributes(attributes: AttributeRecord | Mapping[str, Any] | None) -> dict[str, Any]:
    """Normalized candidate values keyed by category.

    Plain mappings go through the normalizer too; canonical values come back
    unchanged, so already-normalized input is safe here.
    """
    if isinstance(attributes, AttributeRecord):
        return normalize_attributes(attributes)
    mapping = dict(attributes or {})
    unknown = sorted(set(mapping) - _ATTRIBUTE_FIELDS)
    if unknown:
        raise InputError(f"unknown attribute fields: {', '.join(unknown)}")
    community = mapping.get(COMMUNITY)
    if isinstance(community, tuple):
        # Normalized form carries (community, sub_community) together.
        mapping[COMMUNITY], mapping["sub_community"] = community
    return normalize_attributes(AttributeRecord(**mapping))


def _is_constrained(preference: Any) -> bool:
    return preference is not None and not (isinstance(preference, str) and preference == ANY)


def _gate(prefs: dict[str, Any], flags: dict[str, bool], values: dict[str, Any]) -> GateResult:
    for category in CATEGORY_ORDER:
        preference = prefs.get(category, ANY)
        if not _is_constrained(preference):
            continue
        strict = flags.get(category, False)
        outcome = match(preference, values.get(category), strict=strict)
        if strict and not outcome.matched:
            logger.debug("[MATCH] gate blocked on category=%s", category)
            return GateResult(passed=False, failed_category=category)
    return GateResult(passed=True)


def _breakdown(prefs: dict[str, Any], values: dict[str, Any]) -> dict[str, MatchOutcome]:
    breakdown: dict[str, MatchOutcome] = {}
    for category in CATEGORY_ORDER:
        preference = prefs.get(category, ANY)
        if not _is_constrained(preference):
            continue
        breakdown[category] = match(preference, values.get(category), strict=False)
    return breakdown


def evaluate_gate(
    seeker_preferences: PreferenceRecord | Mapping[str, Any],
    seeker_flags: Mapping[str, Any] | None,
    candidate_attributes: AttributeRecord | Mapping[str, Any],
    *,
    seeker_attributes: AttributeRecord | None = None,
) -> GateResult:
    """Check the seeker's dealbreakers against a candidate, stopping at the first failure.

    ``seeker_attributes`` resolves "same as mine" preferences; without it they
    carry no constraint.
    """
    flags = validate_flags(seeker_flags)
    prefs = _prepared_preferences(seeker_preferences, seeker_attributes)
    return _gate(prefs, flags, _prepared_attributes(candidate_attributes))


def score_breakdown(
    seeker_preferences: PreferenceRecord | Mapping[str, Any],
    candidate_attributes: AttributeRecord | Mapping[str, Any],
    *,
    seeker_attributes: AttributeRecord | None = None,
) -> dict[str, MatchOutcome]:
    prefs = _prepared_preferences(seeker_preferences, seeker_attributes)
    return _breakdown(prefs, _prepared_attributes(candidate_attributes))


def _percentage(breakdown: dict[str, MatchOutcome]) -> int:
    if not breakdown:
        return 100
    numerator = sum(outcome.confidence for outcome in breakdown.values())
    return int(100.0 * numerator / max(len(breakdown), 1) + 0.5)


def score(
    seeker_preferences: PreferenceRecord | Mapping[str, Any],
    candidate_attributes: AttributeRecord | Mapping[str, Any],
    *,
    seeker_attributes: AttributeRecord | None = None,
) -> int:
    """0-100 share of the seeker's stated preferences the candidate satisfies.

    Categories without a preference are left out of the denominator; dealbreaker
    flags play no part here.
    """
    return _percentage(score_breakdown(seeker_preferences, candidate_attributes, seeker_attributes=seeker_attributes))


def evaluate_direction(seeker: Profile, candidate: Profile) -> CompatibilityResult:
    prefs = normalize_preferences(seeker.preferences, seeker.attributes)
    values = normalize_attributes(candidate.attributes)
    gate = _gate(prefs, validate_flags(seeker.dealbreakers), values)
    breakdown = _breakdown(prefs, values)
    return CompatibilityResult(
        passed=gate.passed,
        failed_category=gate.failed_category,
        score=_percentage(breakdown),
        breakdown=breakdown,
    )


def resolve(profile_a: Profile, profile_b: Profile) -> MutualMatchResult:
    if profile_a.id == profile_b.id:
        raise InputError(f"cannot match profile {profile_a.id} against itself")

    prefs_a = normalize_preferences(profile_a.preferences, profile_a.attributes)
    prefs_b = normalize_preferences(profile_b.preferences, profile_b.attributes)
    values_a = normalize_attributes(profile_a.attributes)
    values_b = normalize_attributes(profile_b.attributes)

    gate_a_on_b = _gate(prefs_a, validate_flags(profile_a.dealbreakers), values_b)
    gate_b_on_a = _gate(prefs_b, validate_flags(profile_b.dealbreakers), values_a)

    if not (gate_a_on_b.passed and gate_b_on_a.passed):
        block_reason = gate_a_on_b.failed_category if not gate_a_on_b.passed else gate_b_on_a.failed_category
        return MutualMatchResult(
            mutual=False,
            block_reason=block_reason,
            seeker_as_viewer_score=None,
            seeker_as_candidate_score=None,
        )

    return MutualMatchResult(
        mutual=True,
        block_reason=None,
        seeker_as_viewer_score=_percentage(_breakdown(prefs_a, values_b)),
        seeker_as_candidate_score=_percentage(_breakdown(prefs_b, values_a)),
    )


def _check_seeker(seeker: Profile) -> None:
    """Raise ``InputError`` for malformed seeker metadata before the pool is scanned."""
    validate_flags(seeker.dealbreakers)
    _breakdown(normalize_preferences(seeker.preferences, seeker.attributes), {})


def find_mutual_matches(
    seeker: Profile,
    candidates: Iterable[Profile],
    limit: int | None = None,
) -> list[tuple[Profile, MutualMatchResult]]:
    """Mutual matches for ``seeker`` from an already pre-filtered candidate pool.

    Malformed seeker metadata raises ``InputError``. A candidate with malformed
    metadata is logged and skipped so the rest of the pool is still served.
    """
    _check_seeker(seeker)
    matches: list[tuple[Profile, MutualMatchResult]] = []
    evaluated = 0
    rejected = 0
    blocked: dict[str, int] = {}
    for candidate in candidates:
        if candidate.id == seeker.id:
            continue
        if limit is not None and evaluated >= limit:
            break
        evaluated += 1
        try:
            result = resolve(seeker, candidate)
        except InputError as exc:
            rejected += 1
            logger.warning("[MATCH] skipping candidate=%s for seeker=%s: %s", candidate.id, seeker.id, exc)
            continue
        if result.mutual:
            matches.append((candidate, result))
        elif result.block_reason:
            blocked[result.block_reason] = blocked.get(result.block_reason, 0) + 1

    logger.info(
        "[MATCH] seeker=%s evaluated=%s mutual=%s blocked=%s rejected=%s",
        seeker.id,
        evaluated,
        len(matches),
        blocked,
        rejected,
    )
    matches.sort(
        key=lambda item: (
            -(item[1].seeker_as_viewer_score or 0),
            -(item[1].seeker_as_candidate_score or 0),
            item[0].id,
        )
    )
    return matches
