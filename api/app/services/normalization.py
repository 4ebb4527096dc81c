"""Canonicalization of raw profile attribute and preference values.

Every function here is pure. Values the tables do not recognise are cleaned
(case-folded, whitespace collapsed) and passed through so that matchers can
treat them as unknown; nothing in this module raises for business data.
"""
from __future__ import annotations

import json
import logging
import re
from typing import Any

from .categories import (
    AGE,
    CATEGORY_ORDER,
    CITIZENSHIP,
    COMMUNITY,
    DIET,
    DRINKING,
    EDUCATION,
    FAMILY_VALUES,
    GOTRA,
    GREW_UP_IN,
    HEIGHT,
    INCOME,
    LIST_CATEGORIES,
    LOCATION_CATEGORIES,
    MARITAL_STATUS,
    PETS,
    RELIGION,
    RELOCATION,
    SMOKING,
    AttributeRecord,
    CommunityPreference,
    ContainsPreference,
    EducationPreference,
    LocationPreference,
    NegatedPreference,
    PreferenceRecord,
    RangePreference,
    SetPreference,
)

logger = logging.getLogger(__name__)

ANY = "any"
SAME_AS_MINE = "same_as_mine"

_SENTINELS = {
    "",
    "any",
    "doesnt_matter",
    "doesn't_matter",
    "doesnt matter",
    "doesn't matter",
    "no preference",
    "no_preference",
    "none specified",
}
_SAME_AS_MINE = {"same_as_mine", "same as mine", "same-as-mine"}
_SAME_GOTRA = {"same", "same gotra", "same_gotra", "same-gotra"}

# Categories whose values are enum-like tokens rather than free text.
_TOKEN_CATEGORIES = frozenset(
    {MARITAL_STATUS, RELIGION, DIET, SMOKING, DRINKING, RELOCATION, EDUCATION, FAMILY_VALUES, PETS}
)

DIET_ALIASES = {
    "veg": "vegetarian",
    "vegetarian": "vegetarian",
    "pure_veg": "vegetarian",
    "pure_vegetarian": "vegetarian",
    "non_veg": "non_vegetarian",
    "nonveg": "non_vegetarian",
    "non_vegetarian": "non_vegetarian",
    "nonvegetarian": "non_vegetarian",
    "meat_eater": "non_vegetarian",
    "occasionally_non_veg": "non_vegetarian",
    "egg": "eggetarian",
    "eggetarian": "eggetarian",
    "vegan": "vegan",
    "jain": "jain",
}

HABIT_ALIASES = {
    "no": "no",
    "never": "no",
    "none": "no",
    "non_smoker": "no",
    "non_drinker": "no",
    "doesnt_smoke": "no",
    "doesnt_drink": "no",
    "occasionally": "occasionally",
    "occasional": "occasionally",
    "socially": "occasionally",
    "social": "occasionally",
    "social_drinker": "occasionally",
    "yes": "yes",
    "regular": "yes",
    "regularly": "yes",
    "daily": "yes",
}

# Preference token -> candidate habits it accepts. "yes" accepts anyone.
HABIT_TOLERANCE: dict[str, tuple[str, ...] | None] = {
    "no": ("no",),
    "occasionally": ("no", "occasionally"),
    "yes": None,
}

# Diet preference -> candidate diets it accepts. A non-vegetarian preference accepts anyone.
DIET_TOLERANCE: dict[str, tuple[str, ...] | None] = {
    "vegetarian": ("vegetarian",),
    "eggetarian": ("eggetarian", "vegetarian", "non_vegetarian"),
    "non_vegetarian": None,
}

MARITAL_ALIASES = {
    "single": "never_married",
    "unmarried": "never_married",
    "never_married": "never_married",
    "divorced": "divorced",
    "widow": "widowed",
    "widower": "widowed",
    "widowed": "widowed",
    "separated": "separated",
    "awaiting_divorce": "awaiting_divorce",
    "annulled": "annulled",
}

RELIGION_ALIASES = {
    "hinduism": "hindu",
    "islam": "muslim",
    "christianity": "christian",
    "sikhism": "sikh",
    "jainism": "jain",
    "buddhism": "buddhist",
    "zoroastrian": "parsi",
    "judaism": "jewish",
}

RELOCATION_ALIASES = {
    "yes": "yes",
    "willing": "yes",
    "open": "yes",
    "open_to_relocation": "yes",
    "no": "no",
    "not_willing": "no",
    "maybe": "maybe",
    "open_to_discuss": "maybe",
    "depends": "maybe",
}

FAMILY_VALUES_ALIASES = {
    "orthodox": "traditional",
    "conservative": "traditional",
    "traditional": "traditional",
    "moderate": "moderate",
    "liberal": "liberal",
    "modern": "liberal",
}

# Canonical qualification token -> (level, domain).
# 1 = high school / diploma, 2 = undergrad, 3 = masters / professional, 4 = doctoral.
EDUCATION_LEVELS: dict[str, tuple[int, str | None]] = {
    "high_school": (1, None),
    "diploma": (1, None),
    "undergrad": (2, None),
    "undergrad_eng": (2, "engineering"),
    "undergrad_cs": (2, "cs"),
    "medical_undergrad": (2, "medical"),
    "mbbs": (2, "medical"),
    "bds": (2, "medical"),
    "law": (2, "law"),
    "llb": (2, "law"),
    "masters": (3, None),
    "masters_eng": (3, "engineering"),
    "masters_cs": (3, "cs"),
    "medical_masters": (3, "medical"),
    "md": (3, "medical"),
    "ms_medical": (3, "medical"),
    "mba": (3, "business"),
    "ca_cpa": (3, "finance"),
    "llm": (3, "law"),
    "phd": (4, None),
    "dm_mch": (4, "medical"),
}

EDUCATION_ALIASES = {
    "12th": "high_school",
    "high_school_diploma": "high_school",
    "hsc": "high_school",
    "associates": "diploma",
    "bachelors": "undergrad",
    "bachelor's": "undergrad",
    "bachelor": "undergrad",
    "undergraduate": "undergrad",
    "graduate": "undergrad",
    "bsc": "undergrad",
    "bcom": "undergrad",
    "ba": "undergrad",
    "bba": "undergrad",
    "bachelors_eng": "undergrad_eng",
    "eng_bachelor": "undergrad_eng",
    "eng_undergrad": "undergrad_eng",
    "engineering": "undergrad_eng",
    "be": "undergrad_eng",
    "btech": "undergrad_eng",
    "b.tech": "undergrad_eng",
    "bachelors_cs": "undergrad_cs",
    "cs_bachelor": "undergrad_cs",
    "cs_undergrad": "undergrad_cs",
    "bca": "undergrad_cs",
    "medical_bachelor": "medical_undergrad",
    "medical": "medical_undergrad",
    "masters": "masters",
    "master's": "masters",
    "master": "masters",
    "post_graduate": "masters",
    "postgraduate": "masters",
    "post_graduation": "masters",
    "msc": "masters",
    "mcom": "masters",
    "ma": "masters",
    "eng_master": "masters_eng",
    "eng_masters": "masters_eng",
    "me": "masters_eng",
    "mtech": "masters_eng",
    "m.tech": "masters_eng",
    "cs_master": "masters_cs",
    "cs_masters": "masters_cs",
    "mca": "masters_cs",
    "medical_master": "medical_masters",
    "ca": "ca_cpa",
    "cpa": "ca_cpa",
    "ca_professional": "ca_cpa",
    "doctorate": "phd",
    "ph.d": "phd",
    "ph.d.": "phd",
    "dm": "dm_mch",
    "mch": "dm_mch",
}

# Free-text fallback: longest alias found as a whole word wins.
_EDUCATION_KEYWORDS = sorted(
    [k for k in (*EDUCATION_ALIASES.keys(), *EDUCATION_LEVELS.keys()) if len(k) > 2],
    key=len,
    reverse=True,
)

# Representative annual income in thousands of USD.
INCOME_BANDS = {
    "student": 0.0,
    "homemaker": 0.0,
    "<50k": 25.0,
    "50k-75k": 62.0,
    "75k-100k": 87.0,
    "100k-150k": 125.0,
    "150k-200k": 175.0,
    ">200k": 250.0,
}
INCOME_THRESHOLDS = {
    "50k+": 50.0,
    "75k+": 75.0,
    "100k+": 100.0,
    "150k+": 150.0,
    "200k+": 200.0,
}

# Proximity phrasings that count as satisfied without any geographic computation.
PROXIMITY_MARKERS = ("within", "same area", "same_area", "same state", "same_state", "same city", "same_city", "nearby")
OPEN_LOCATION_TOKENS = {"open_to_relocation", "other_state", "anywhere"}

US_STATES = {
    "al": "alabama", "ak": "alaska", "az": "arizona", "ar": "arkansas", "ca": "california",
    "co": "colorado", "ct": "connecticut", "de": "delaware", "fl": "florida", "ga": "georgia",
    "hi": "hawaii", "id": "idaho", "il": "illinois", "in": "indiana", "ia": "iowa",
    "ks": "kansas", "ky": "kentucky", "la": "louisiana", "me": "maine", "md": "maryland",
    "ma": "massachusetts", "mi": "michigan", "mn": "minnesota", "ms": "mississippi", "mo": "missouri",
    "mt": "montana", "ne": "nebraska", "nv": "nevada", "nh": "new hampshire", "nj": "new jersey",
    "nm": "new mexico", "ny": "new york", "nc": "north carolina", "nd": "north dakota", "oh": "ohio",
    "ok": "oklahoma", "or": "oregon", "pa": "pennsylvania", "ri": "rhode island", "sc": "south carolina",
    "sd": "south dakota", "tn": "tennessee", "tx": "texas", "ut": "utah", "vt": "vermont",
    "va": "virginia", "wa": "washington", "wv": "west virginia", "wi": "wisconsin", "wy": "wyoming",
    "dc": "district of columbia",
}

LOCATION_REGIONS: dict[str, tuple[str, ...]] = {
    "bay area": (
        "bay area", "san francisco", "san jose", "oakland", "fremont", "sunnyvale", "santa clara",
        "hayward", "berkeley", "palo alto", "mountain view", "redwood city", "milpitas", "pleasanton",
        "livermore", "dublin", "union city", "cupertino", "san mateo", "san ramon", "walnut creek",
    ),
    "southern california": (
        "southern california", "los angeles", "san diego", "orange county", "irvine", "anaheim",
        "long beach", "pasadena", "riverside", "san bernardino",
    ),
}

HEIGHT_MIN_INCHES = 36.0
HEIGHT_MAX_INCHES = 96.0

_AGE_NUMBER = re.compile(r"^\s*(\d{1,3})(?:\s*(?:years?|yrs?))?\s*$")
_HEIGHT_FT_IN = re.compile(r"^\s*(\d(?:\.\d+)?)\s*(?:'|ft|feet|foot)\s*(?:(\d{1,2}(?:\.\d+)?)\s*(?:\"|''|in|inches)?)?\s*$")
_HEIGHT_CM = re.compile(r"^\s*(\d{2,3}(?:\.\d+)?)\s*cm\s*$")
_NUMBER = re.compile(r"^\s*\$?\s*(\d+(?:[.,]\d+)*)\s*(k)?\s*$")


def _clean_text(value: Any) -> str:
    return " ".join(str(value).replace("’", "'").split()).lower()


def _clean_token(value: Any) -> str:
    return re.sub(r"[\s\-]+", "_", _clean_text(value))


def is_sentinel(raw: Any) -> bool:
    if raw is None:
        return True
    if isinstance(raw, (list, tuple)):
        return len(raw) == 0
    if isinstance(raw, (int, float)):
        return False
    return _clean_text(raw) in _SENTINELS or _clean_token(raw) in _SENTINELS


def is_same_as_mine(raw: Any) -> bool:
    return isinstance(raw, str) and (_clean_text(raw) in _SAME_AS_MINE or _clean_token(raw) in _SAME_AS_MINE)


def split_list(raw: Any) -> list[str]:
    """Split a list-valued field into cleaned, non-empty string items."""
    if raw is None:
        return []
    if isinstance(raw, (list, tuple, set, frozenset)):
        return [str(item).strip() for item in raw if str(item).strip()]
    text = str(raw).strip()
    if not text:
        return []
    if text.startswith("[") and text.endswith("]"):
        try:
            parsed = json.loads(text)
        except json.JSONDecodeError:
            parsed = None
        if isinstance(parsed, list):
            return [str(item).strip() for item in parsed if str(item).strip()]
    return [item.strip() for item in text.split(",") if item.strip()]


def dedupe(values: list[str]) -> list[str]:
    seen: set[str] = set()
    out: list[str] = []
    for value in values:
        key = value.lower()
        if key in seen:
            continue
        seen.add(key)
        out.append(value)
    return out


def _plausible_height(inches: float) -> float | None:
    inches = round(inches, 1)
    if HEIGHT_MIN_INCHES <= inches <= HEIGHT_MAX_INCHES:
        return inches
    return None


def parse_height(raw: Any) -> float | None:
    """Height in inches from feet/inches, centimetre or bare numeric input.

    Bare numbers up to 8 are feet, above 100 centimetres, otherwise inches.
    Anything that lands outside 3 to 8 feet is rejected, so every result is
    already canonical and parses back to itself.
    """
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        value = float(raw)
    else:
        text = _clean_text(raw)
        m = _HEIGHT_FT_IN.match(text)
        if m:
            return _plausible_height(float(m.group(1)) * 12 + float(m.group(2) or 0))
        m = _HEIGHT_CM.match(text)
        if m:
            return _plausible_height(float(m.group(1)) / 2.54)
        try:
            value = float(text)
        except ValueError:
            return None
    if value <= 0:
        return None
    if value <= 8:
        return _plausible_height(value * 12)
    if value > 100:
        return _plausible_height(value / 2.54)
    return _plausible_height(value)


def parse_income(raw: Any) -> float | None:
    """Annual income in thousands of USD."""
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        value = float(raw)
        return value / 1000.0 if value >= 10000 else value
    text = _clean_text(raw).replace(" ", "")
    if text in INCOME_BANDS:
        return INCOME_BANDS[text]
    if text in INCOME_THRESHOLDS:
        return INCOME_THRESHOLDS[text]
    m = _NUMBER.match(text)
    if not m:
        return None
    value = float(m.group(1).replace(",", ""))
    if m.group(2):
        return value
    return value / 1000.0 if value >= 10000 else value


def parse_age(raw: Any) -> int | None:
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        return int(raw)
    m = _AGE_NUMBER.match(str(raw))
    return int(m.group(1)) if m else None


def parse_age_preference(text: str | None, seeker_age: int | None) -> tuple[int, int] | None:
    """Resolve a legacy free-text age preference into an absolute (min, max) range.

    Handles absolute ranges ("25-35"), relative differences ("between 3 to 5 years",
    "< 5 years", "3 years younger", "5"); relative forms need the seeker's age.
    """
    if not text or is_sentinel(text):
        return None
    pref = _clean_text(text)

    m = re.search(r"(\d{2,})\s*(?:-|–|to)\s*(\d{2,})", pref)
    if m and int(m.group(1)) >= 18:
        lo, hi = int(m.group(1)), int(m.group(2))
        return (min(lo, hi), max(lo, hi))

    if seeker_age is None:
        return None

    m = re.search(r"(?:between\s+)?(\d+)\s*(?:to|-|–)\s*(\d+)\s*years?", pref)
    if m:
        return (seeker_age + int(m.group(1)), seeker_age + int(m.group(2)))

    m = re.search(r"(?:<|less\s*than|within)\s*(\d+)\s*years?", pref)
    if m:
        diff = int(m.group(1))
        return (seeker_age - diff, seeker_age + diff)

    m = re.search(r"(\d+)\s*years?\s*(younger|older)", pref)
    if m:
        diff = int(m.group(1))
        if m.group(2) == "younger":
            return (seeker_age - diff, seeker_age)
        return (seeker_age, seeker_age + diff)

    m = re.fullmatch(r"(\d+)", pref)
    if m:
        diff = int(m.group(1))
        return (seeker_age - diff, seeker_age + diff)
    return None


def _normalize_education(token: str) -> str:
    if token in EDUCATION_LEVELS:
        return token
    if token in EDUCATION_ALIASES:
        return EDUCATION_ALIASES[token]
    words = token.replace("_", " ")
    for key in _EDUCATION_KEYWORDS:
        if re.search(rf"(?<![a-z]){re.escape(key.replace('_', ' '))}(?![a-z])", words):
            return EDUCATION_ALIASES.get(key, key)
    return token


def education_rank(value: Any) -> tuple[int, str | None]:
    """(level, domain) for a qualification; level 0 means unknown."""
    if value is None or is_sentinel(value):
        return (0, None)
    return EDUCATION_LEVELS.get(_normalize_education(_clean_token(value)), (0, None))


def _normalize_scalar(category: str, raw: Any) -> Any:
    if is_sentinel(raw):
        return ANY
    if is_same_as_mine(raw):
        return SAME_AS_MINE

    if category == AGE:
        value = parse_age(raw)
        return value if value is not None else _clean_text(raw)
    if category == HEIGHT:
        value = parse_height(raw)
        return value if value is not None else _clean_text(raw)
    if category == INCOME:
        value = parse_income(raw)
        return value if value is not None else _clean_text(raw)

    if category not in _TOKEN_CATEGORIES:
        return _clean_text(raw)

    token = _clean_token(raw)
    if category == DIET:
        return DIET_ALIASES.get(token, token)
    if category in (SMOKING, DRINKING):
        return HABIT_ALIASES.get(token, token)
    if category == MARITAL_STATUS:
        return MARITAL_ALIASES.get(token, token)
    if category == RELIGION:
        return RELIGION_ALIASES.get(token, token)
    if category == RELOCATION:
        return RELOCATION_ALIASES.get(token, token)
    if category == FAMILY_VALUES:
        return FAMILY_VALUES_ALIASES.get(token, token)
    if category == EDUCATION:
        return _normalize_education(token)
    return token


def _own_value(category: str, own: AttributeRecord | None) -> Any:
    if own is None:
        return None
    sources = {
        CITIZENSHIP: ("citizenship", "country"),
        GREW_UP_IN: ("grew_up_in", "country"),
    }.get(category, (category,))
    for key in sources:
        value = getattr(own, key, None)
        if value is not None and not is_sentinel(value):
            return value
    return None


def normalize(category: str, raw: Any, *, own: AttributeRecord | None = None) -> Any:
    """Map a raw value to its canonical form for ``category``.

    List-valued input (or comma/JSON list text in a list category) yields an
    ordered, de-duplicated tuple. When ``own`` is given, ``same_as_mine`` entries
    are replaced by the owner's own attribute value; with no source value they
    drop out, and an emptied preference degrades to ``ANY``.
    """
    if is_same_as_mine(raw) or raw == SAME_AS_MINE:
        if own is None:
            return SAME_AS_MINE
        source = _own_value(category, own)
        if source is None:
            return ANY
        return normalize(category, source)

    is_list = isinstance(raw, (list, tuple, set, frozenset))
    if not is_list and isinstance(raw, str) and category in LIST_CATEGORIES:
        items = split_list(raw)
        is_list = len(items) > 1 or raw.strip().startswith("[")
        if is_list:
            raw = items
    if not is_list:
        return _normalize_scalar(category, raw)

    out: list[str] = []
    for item in split_list(raw):
        if is_same_as_mine(item) or item == SAME_AS_MINE:
            if own is None:
                out.append(SAME_AS_MINE)
                continue
            source = _own_value(category, own)
            if source is None:
                continue
            resolved = normalize(category, source)
            out.extend(resolved if isinstance(resolved, tuple) else [resolved])
            continue
        value = _normalize_scalar(category, item)
        if value == ANY:
            return ANY
        out.append(str(value))
    out = dedupe(out)
    return tuple(out) if out else ANY


def as_values(value: Any) -> tuple[Any, ...]:
    if value is None or value == ANY:
        return ()
    if isinstance(value, tuple):
        return value
    return (value,)


def normalize_attributes(attrs: AttributeRecord) -> dict[str, Any]:
    """Canonical candidate-side values keyed by category; ``None`` when unknown."""
    out: dict[str, Any] = {}
    for category in CATEGORY_ORDER:
        if category == COMMUNITY:
            top = normalize(COMMUNITY, attrs.community)
            sub = normalize(COMMUNITY, attrs.sub_community)
            out[category] = (
                None if top == ANY else top,
                None if sub == ANY else sub,
            )
            continue
        raw = getattr(attrs, category, None)
        if category in LOCATION_CATEGORIES:
            # Keep "City, ST" whole so the state suffix stays attached to its city.
            value = _normalize_scalar(category, raw)
        else:
            value = normalize(category, raw)
        out[category] = None if value in (ANY, SAME_AS_MINE) else value
    return out


def _range(category: str, low: Any, high: Any) -> Any:
    lo = normalize(category, low)
    hi = normalize(category, high)
    bounds: list[float | None] = []
    for bound, raw in ((lo, low), (hi, high)):
        if bound == ANY:
            bounds.append(None)
        elif isinstance(bound, (int, float)):
            bounds.append(float(bound))
        else:
            logger.warning("[NORMALIZE] dropping unparseable %s bound %r", category, raw)
            bounds.append(None)
    if bounds[0] is None and bounds[1] is None:
        return ANY
    return RangePreference(minimum=bounds[0], maximum=bounds[1])


def _age_preference(prefs: PreferenceRecord, own: AttributeRecord | None) -> Any:
    if not is_sentinel(prefs.age_min) or not is_sentinel(prefs.age_max):
        return _range(AGE, prefs.age_min, prefs.age_max)
    seeker_age = own.age if own is not None else None
    parsed = parse_age_preference(prefs.age_range, seeker_age)
    if parsed is None:
        if prefs.age_range and not is_sentinel(prefs.age_range):
            logger.warning("[NORMALIZE] unresolvable age preference %r", prefs.age_range)
        return ANY
    return RangePreference(minimum=float(parsed[0]), maximum=float(parsed[1]))


def _income_preference(prefs: PreferenceRecord) -> Any:
    return _range(INCOME, prefs.income_min, prefs.income_max)


def _education_preference(raw: Any) -> Any:
    value = normalize(EDUCATION, raw)
    if value == ANY:
        return ANY
    token = value[0] if isinstance(value, tuple) else value
    level, domain = EDUCATION_LEVELS.get(token, (0, None))
    if level == 0:
        logger.warning("[NORMALIZE] unknown education preference %r treated as no constraint", raw)
        return ANY
    return EducationPreference(token=token, min_level=level, domain=domain)


def _gotra_preference(raw: Any, own: AttributeRecord | None) -> Any:
    if is_sentinel(raw):
        return ANY
    text = _clean_text(raw)
    if is_same_as_mine(raw) or text in _SAME_GOTRA:
        logger.warning("[NORMALIZE] gotra preference %r is not an exclusion; ignoring", raw)
        return ANY
    if text.startswith("different") or text in {"not same as mine", "not_same_as_mine"}:
        own_gotra = own.gotra if own is not None else None
        if own_gotra is None or is_sentinel(own_gotra):
            return ANY
        return NegatedPreference(excluded=_clean_text(own_gotra))
    text = re.sub(r"^(?:not\s+|not_|!\s*|exclude\s+)", "", text).strip()
    if not text or is_sentinel(text):
        return ANY
    return NegatedPreference(excluded=text)


def _tolerance_preference(
    category: str, raw: Any, own: AttributeRecord | None, tolerance_table: dict[str, tuple[str, ...] | None]
) -> Any:
    value = normalize(category, raw, own=own)
    if value == ANY or value == SAME_AS_MINE:
        return ANY
    accepted: list[str] = []
    for token in as_values(value):
        tolerance = tolerance_table.get(token, (token,))
        if tolerance is None:
            return ANY
        accepted.extend(tolerance)
    return ContainsPreference(tokens=tuple(dedupe(accepted)))


def _community_preference(prefs: PreferenceRecord, own: AttributeRecord | None) -> Any:
    communities = normalize(COMMUNITY, prefs.community, own=own)
    if is_same_as_mine(prefs.sub_community):
        source = own.sub_community if own is not None else None
        subs = ANY if source is None else normalize(COMMUNITY, source)
    else:
        subs = normalize(COMMUNITY, prefs.sub_community)
    if communities == ANY or communities == SAME_AS_MINE:
        return ANY
    sub_values = () if subs in (ANY, SAME_AS_MINE) else as_values(subs)
    return CommunityPreference(communities=as_values(communities), sub_communities=tuple(sub_values))


def build_preference(category: str, prefs: PreferenceRecord, own: AttributeRecord | None = None) -> Any:
    """Normalized, tagged preference for one category, or ``ANY``."""
    if category == AGE:
        return _age_preference(prefs, own)
    if category == HEIGHT:
        return _range(HEIGHT, prefs.height_min, prefs.height_max)
    if category == INCOME:
        return _income_preference(prefs)
    if category == EDUCATION:
        return _education_preference(prefs.education)
    if category == GOTRA:
        return _gotra_preference(prefs.gotra, own)
    if category == COMMUNITY:
        return _community_preference(prefs, own)
    if category in (SMOKING, DRINKING):
        return _tolerance_preference(category, getattr(prefs, category), own, HABIT_TOLERANCE)
    if category == DIET:
        return _tolerance_preference(DIET, prefs.diet, own, DIET_TOLERANCE)

    value = normalize(category, getattr(prefs, category, None), own=own)
    if value == ANY or value == SAME_AS_MINE:
        return ANY
    values = as_values(value)
    if category == RELIGION:
        return SetPreference(values=tuple(str(v) for v in values))
    if category in LOCATION_CATEGORIES:
        return LocationPreference(tokens=tuple(str(v) for v in values))
    return ContainsPreference(tokens=tuple(str(v) for v in values))


def normalize_preferences(prefs: PreferenceRecord, own: AttributeRecord | None = None) -> dict[str, Any]:
    return {category: build_preference(category, prefs, own) for category in CATEGORY_ORDER}


__all__ = [
    "ANY",
    "SAME_AS_MINE",
    "as_values",
    "build_preference",
    "education_rank",
    "is_sentinel",
    "normalize",
    "normalize_attributes",
    "normalize_preferences",
    "parse_age_preference",
    "parse_height",
    "parse_income",
    "split_list",
]
