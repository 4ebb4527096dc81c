from __future__ import annotations

from typing import Any

from .categories import (
    AGE,
    CATEGORY_LABELS,
    CATEGORY_ORDER,
    COMMUNITY,
    HEIGHT,
    INCOME,
    CommunityPreference,
    ContainsPreference,
    EducationPreference,
    NegatedPreference,
    Profile,
    RangePreference,
    SetPreference,
    validate_flags,
)
from .matchers import match
from .normalization import ANY, as_values, normalize_attributes, normalize_preferences

NO_PREFERENCE = "Doesn't matter"
NOT_SPECIFIED = "Not specified"

_BLOCK_MESSAGES = {
    AGE: "Age is outside the preferred range.",
    HEIGHT: "Height is outside the preferred range.",
    INCOME: "Income is below or above the preferred range.",
}

_UNITS = {AGE: " years", HEIGHT: " in", INCOME: "k"}


def _label(category: str) -> str:
    return CATEGORY_LABELS.get(category, category.replace("_", " ").title())


def describe_block_reason(category: str | None) -> str | None:
    """One-line explanation for a blocked pair; None when nothing blocked."""
    if category is None:
        return None
    if category in _BLOCK_MESSAGES:
        return _BLOCK_MESSAGES[category]
    return f"{_label(category)} does not meet a deal-breaker preference."


def _fmt_number(value: float, category: str | None = None) -> str:
    text = str(int(value)) if float(value).is_integer() else f"{value:g}"
    return f"{text}{_UNITS.get(category, '')}" if category else text


def _titled(values: tuple[str, ...]) -> str:
    return ", ".join(str(v).replace("_", " ").title() for v in values)


def format_preference(category: str, preference: Any) -> str:
    if preference is None or preference == ANY:
        return NO_PREFERENCE
    if isinstance(preference, RangePreference):
        low, high = preference.minimum, preference.maximum
        if low is not None and high is not None:
            return f"{_fmt_number(low)} - {_fmt_number(high, category)}"
        if low is not None:
            return f"Min {_fmt_number(low, category)}"
        return f"Max {_fmt_number(high, category)}"
    if isinstance(preference, EducationPreference):
        return f"{preference.token.replace('_', ' ').title()} or higher"
    if isinstance(preference, CommunityPreference):
        text = _titled(preference.communities)
        if preference.sub_communities:
            text = f"{text} ({_titled(preference.sub_communities)})"
        return text
    if isinstance(preference, SetPreference):
        return _titled(preference.values) or NO_PREFERENCE
    if isinstance(preference, NegatedPreference):
        return f"Not {preference.excluded.title()}"
    if isinstance(preference, ContainsPreference):
        return _titled(preference.tokens)
    return str(preference)


def format_value(category: str, value: Any) -> str:
    if category == COMMUNITY and isinstance(value, tuple):
        top, sub = value
        if top is None:
            return NOT_SPECIFIED
        text = _titled(as_values(top))
        return f"{text} ({_titled(as_values(sub))})" if sub else text
    if value is None:
        return NOT_SPECIFIED
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return _fmt_number(value, category)
    return _titled(as_values(value))


def build_criteria(seeker: Profile, candidate: Profile) -> list[dict[str, Any]]:
    """Per-category view of how ``candidate`` measures up to ``seeker``'s preferences."""
    prefs = normalize_preferences(seeker.preferences, seeker.attributes)
    values = normalize_attributes(candidate.attributes)
    flags = validate_flags(seeker.dealbreakers)
    rows = []
    for category in CATEGORY_ORDER:
        preference = prefs.get(category, ANY)
        value = values.get(category)
        outcome = match(preference, value, strict=flags.get(category, False))
        rows.append(
            {
                "name": category,
                "label": _label(category),
                "matched": outcome.matched,
                "confidence": outcome.confidence,
                "seeker_preference": format_preference(category, preference),
                "candidate_value": format_value(category, value),
                "is_dealbreaker": flags.get(category, False),
            }
        )
    return rows
