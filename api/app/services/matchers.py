from __future__ import annotations

import re
from typing import Any, Callable

from ..config import UNKNOWN_VALUE_CONFIDENCE
from .categories import (
    CommunityPreference,
    ContainsPreference,
    EducationPreference,
    InputError,
    LocationPreference,
    MatchOutcome,
    NegatedPreference,
    RangePreference,
    SetPreference,
)
from .normalization import (
    ANY,
    LOCATION_REGIONS,
    OPEN_LOCATION_TOKENS,
    PROXIMITY_MARKERS,
    US_STATES,
    as_values,
    education_rank,
)

HIT = MatchOutcome(matched=True, confidence=1.0)
MISS = MatchOutcome(matched=False, confidence=0.0)

# Sub-groups historically stored in the top-level community field.
COMMUNITY_FAMILIES: dict[str, tuple[str, ...]] = {
    "brahmin": (
        "brahmin", "brahman", "bramin", "iyengar", "iyer", "aiyer", "aiyengar", "smartha", "smarta",
        "madhwa", "madhva", "sri vaishnava", "niyogi", "aruvela", "vaidiki", "namboodiri", "namboothiri",
        "deshastha", "chitpavan", "karhade", "saraswat", "havyaka", "hoysala", "shivalli", "sankethi",
        "kanyakubja", "saryupareen", "maithil", "bhumihar", "mohyal", "pandit", "gaud", "gaur",
        "audichya", "nagar", "shrimali", "srimali", "pushkarna", "velanadu", "mulukanadu", "kokanastha",
    ),
}

_NEGATION = re.compile(r"^(?:non|not|no)[\s_\-]+")
_PREFERENCE_NOISE = re.compile(r"^(?:prefer(?:ably)?|ideally)\s+|\s+(?:preferred|would be ideal|is ideal|ideally)$")
_US_MARKERS = ("usa", "united states", "u.s.", "america")


def _unknown(strict: bool) -> MatchOutcome:
    if strict:
        return MISS
    return MatchOutcome(matched=True, confidence=UNKNOWN_VALUE_CONFIDENCE)


def _outcome(matched: bool) -> MatchOutcome:
    return HIT if matched else MISS


def _split_negation(value: str) -> tuple[bool, str]:
    m = _NEGATION.match(value)
    if m:
        return True, value[m.end():]
    return False, value


def token_matches(preferred: str, candidate: str) -> bool:
    """Case-insensitive mutual containment that never lets "x" match "non-x"."""
    p = str(preferred).strip().lower()
    c = str(candidate).strip().lower()
    if not p or not c:
        return False
    if p == c:
        return True
    p_negated, p_base = _split_negation(p)
    c_negated, c_base = _split_negation(c)
    if p_negated != c_negated or not p_base or not c_base:
        return False
    return p_base in c_base or c_base in p_base


def match_range(preference: RangePreference, value: Any, strict: bool) -> MatchOutcome:
    low, high = preference.minimum, preference.maximum
    if low is not None and high is not None and low > high:
        raise InputError(f"range preference has min {low} greater than max {high}")
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return _unknown(strict)
    inside = (low is None or value >= low) and (high is None or value <= high)
    return _outcome(inside)


def match_education(preference: EducationPreference, value: Any, strict: bool) -> MatchOutcome:
    level, domain = education_rank(value)
    if level == 0:
        return _unknown(strict)
    if level < preference.min_level:
        return MISS
    if preference.domain is not None and domain != preference.domain:
        return MISS
    return HIT


def _community_matches(preferred: str, candidate: str) -> bool:
    if token_matches(preferred, candidate):
        return True
    family = COMMUNITY_FAMILIES.get(preferred.lower())
    if family is None:
        return False
    return any(member in candidate.lower() for member in family)


def match_community(preference: CommunityPreference, value: Any, strict: bool) -> MatchOutcome:
    top, sub = value if isinstance(value, tuple) and len(value) == 2 else (value, None)
    tops = as_values(top)
    if not tops:
        return _unknown(strict)
    if not any(_community_matches(p, t) for p in preference.communities for t in tops):
        return MISS
    if not preference.sub_communities:
        return HIT
    # Older rows stored the sub-community in the top-level field.
    subs = as_values(sub) or tops
    return _outcome(any(token_matches(p, s) for p in preference.sub_communities for s in subs))


def match_set(preference: SetPreference, value: Any, strict: bool) -> MatchOutcome:
    if not preference.values:
        return HIT
    values = as_values(value)
    if not values:
        return _unknown(strict)
    accepted = {v.lower() for v in preference.values}
    return _outcome(any(str(v).lower() in accepted for v in values))


def match_negated(preference: NegatedPreference, value: Any, strict: bool) -> MatchOutcome:
    excluded = preference.excluded.strip().lower()
    if not excluded or excluded == ANY:
        return HIT
    return _outcome(all(str(v).strip().lower() != excluded for v in as_values(value)))


def match_contains(preference: ContainsPreference, value: Any, strict: bool) -> MatchOutcome:
    values = as_values(value)
    if not values:
        return _unknown(strict)
    return _outcome(any(token_matches(p, str(v)) for p in preference.tokens for v in values))


def _has_words(text: str, phrase: str) -> bool:
    return re.search(rf"(?<![a-z]){re.escape(phrase)}(?![a-z])", text) is not None


def location_terms(location: str) -> str:
    """Candidate location text with trailing state abbreviations spelled out."""
    text = location.lower().replace("_", " ")
    extra = []
    for part in text.split(","):
        abbrev = part.strip()
        if abbrev in US_STATES:
            extra.append(US_STATES[abbrev])
    return ", ".join([text, *extra])


def _is_us(text: str) -> bool:
    if any(_has_words(text, marker) for marker in _US_MARKERS):
        return True
    return any(_has_words(text, state) for state in US_STATES.values())


def _location_token_matches(token: str, text: str) -> bool:
    pref = _PREFERENCE_NOISE.sub("", token.lower().replace("_", " ")).strip()
    if not pref:
        return False
    if pref in ("usa", "us", "united states", "america"):
        return _is_us(text)
    if pref in LOCATION_REGIONS:
        if _has_words(text, pref):
            return True
        # Region city names recur in other states ("Dublin, OH"); they only count inside California.
        return _has_words(text, "california") and any(_has_words(text, city) for city in LOCATION_REGIONS[pref])
    pref = US_STATES.get(pref, pref)
    if _has_words(text, pref):
        return True
    # Candidate gave a broader place than the preference names, e.g. "texas" vs "austin, texas".
    head = text.split(",")[0].strip()
    return bool(head) and _has_words(pref, head)


def match_location(preference: LocationPreference, value: Any, strict: bool) -> MatchOutcome:
    for token in preference.tokens:
        lowered = token.lower()
        if lowered.replace(" ", "_") in OPEN_LOCATION_TOKENS or any(m in lowered for m in PROXIMITY_MARKERS):
            return HIT
    values = as_values(value)
    if not values:
        return _unknown(strict)
    text = location_terms(", ".join(str(v) for v in values))
    return _outcome(any(_location_token_matches(t, text) for t in preference.tokens))


MATCHERS: dict[type, Callable[[Any, Any, bool], MatchOutcome]] = {
    RangePreference: match_range,
    EducationPreference: match_education,
    CommunityPreference: match_community,
    SetPreference: match_set,
    NegatedPreference: match_negated,
    ContainsPreference: match_contains,
    LocationPreference: match_location,
}


def match(preference: Any, value: Any, strict: bool = False) -> MatchOutcome:
    if preference is None or preference == ANY:
        return HIT
    matcher = MATCHERS.get(type(preference))
    if matcher is None:
        raise InputError(f"no matcher for preference of type {type(preference).__name__}")
    return matcher(preference, value, strict)
