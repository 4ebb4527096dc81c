"""Shape profile-store rows into matching snapshots.

Rows come from the ``profile`` table with snake_case columns, but older exports
and admin tooling still hand over the camelCase field names, so both spellings
are accepted everywhere.
"""
from __future__ import annotations

import logging
import re
from datetime import date, datetime
from typing import Any, Mapping

from .services.categories import (
    COMMUNITY,
    EDUCATION,
    INCOME,
    OCCUPATION,
    CATEGORY_ORDER,
    AttributeRecord,
    InputError,
    PreferenceRecord,
    Profile,
    is_flag_set,
    validate_flags,
)

logger = logging.getLogger(__name__)

_MMDDYYYY = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")
_MMYYYY = re.compile(r"^(\d{1,2})/(\d{4})$")

# Snapshot field -> row keys tried in order.
ATTRIBUTE_SOURCES: dict[str, tuple[str, ...]] = {
    "height": ("height",),
    "marital_status": ("marital_status", "maritalStatus"),
    "religion": ("religion",),
    "community": ("community", "caste"),
    "sub_community": ("sub_community", "subCommunity"),
    "gotra": ("gotra",),
    "diet": ("diet", "dietary_preference", "dietaryPreference"),
    "smoking": ("smoking",),
    "drinking": ("drinking",),
    "location": ("location", "current_location", "currentLocation"),
    "country": ("country",),
    "citizenship": ("citizenship",),
    "grew_up_in": ("grew_up_in", "grewUpIn"),
    "relocation": ("relocation", "open_to_relocation", "openToRelocation"),
    "education": ("education", "qualification"),
    "work_area": ("work_area", "workArea", "working_as", "workingAs"),
    "income": ("income", "annual_income", "annualIncome"),
    "occupation": ("occupation",),
    "family_values": ("family_values", "familyValues"),
    "family_location": ("family_location", "familyLocation"),
    "mother_tongue": ("mother_tongue", "motherTongue"),
    "pets": ("pets",),
}

PREFERENCE_SOURCES: dict[str, tuple[str, ...]] = {
    "age_min": ("pref_age_min", "prefAgeMin"),
    "age_max": ("pref_age_max", "prefAgeMax"),
    "age_range": ("pref_age_diff", "prefAgeDiff", "pref_age_range"),
    "height_min": ("pref_height_min", "prefHeightMin"),
    "height_max": ("pref_height_max", "prefHeightMax"),
    "income_min": ("pref_income_min", "pref_income", "prefIncome"),
    "income_max": ("pref_income_max",),
    "marital_status": ("pref_marital_status", "prefMaritalStatus"),
    "religion": ("pref_religion", "prefReligion"),
    "community": ("pref_community", "prefCommunity", "prefCaste"),
    "sub_community": ("pref_sub_community", "prefSubCommunity"),
    "gotra": ("pref_gotra", "prefGotra"),
    "diet": ("pref_diet", "prefDiet"),
    "smoking": ("pref_smoking", "prefSmoking"),
    "drinking": ("pref_drinking", "prefDrinking"),
    "location": ("pref_location", "prefLocationList", "prefLocation"),
    "citizenship": ("pref_citizenship", "prefCitizenship"),
    "grew_up_in": ("pref_grew_up_in", "prefGrewUpIn"),
    "relocation": ("pref_relocation", "prefRelocation"),
    "education": ("pref_education", "pref_qualification", "prefQualification"),
    "work_area": ("pref_work_area", "prefWorkArea"),
    "occupation": ("pref_occupation", "prefOccupationList", "prefOccupation"),
    "family_values": ("pref_family_values", "prefFamilyValues"),
    "family_location": ("pref_family_location", "prefFamilyLocation"),
    "mother_tongue": ("pref_mother_tongue", "prefMotherTongue"),
    "pets": ("pref_pets", "prefPets"),
}

# Flag column stems that differ from the category name.
_FLAG_STEMS: dict[str, tuple[str, ...]] = {
    EDUCATION: ("education", "qualification"),
    INCOME: ("income",),
    OCCUPATION: ("occupation",),
    # Sub-community has no flag of its own; it tightens the community gate.
    COMMUNITY: ("community", "sub_community"),
}


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def _first(row: Mapping[str, Any], keys: tuple[str, ...]) -> Any:
    for key in keys:
        value = row.get(key)
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return value
    return None


def calculate_age(dob: Any, as_of: date) -> int | None:
    """Whole years between ``dob`` and ``as_of``.

    Accepts date objects, ISO strings, ``MM/DD/YYYY`` and ``MM/YYYY`` (the last
    only for plausible birth years).
    """
    if dob is None:
        return None
    if isinstance(dob, datetime):
        born = dob.date()
    elif isinstance(dob, date):
        born = dob
    else:
        text = str(dob).strip()
        if not text:
            return None
        m = _MMDDYYYY.match(text)
        m_year = _MMYYYY.match(text)
        try:
            if m:
                born = date(int(m.group(3)), int(m.group(1)), int(m.group(2)))
            elif m_year:
                year = int(m_year.group(2))
                if 1900 < year < 2020:
                    return as_of.year - year
                return None
            else:
                born = datetime.fromisoformat(text.replace("Z", "+00:00")).date()
        except ValueError:
            logger.warning("[NORMALIZE] unparseable date of birth %r", dob)
            return None
    age = as_of.year - born.year
    if (as_of.month, as_of.day) < (born.month, born.day):
        age -= 1
    return age


def _dealbreakers(row: Mapping[str, Any]) -> dict[str, bool]:
    nested = row.get("dealbreakers")
    flags: dict[str, bool] = {}
    if isinstance(nested, Mapping):
        flags.update({str(k): is_flag_set(v) for k, v in nested.items()})
    for category in CATEGORY_ORDER:
        stems = _FLAG_STEMS.get(category, (category,))
        keys = []
        for stem in stems:
            keys.append(f"pref_{stem}_is_dealbreaker")
            keys.append(_camel(f"pref_{stem}_is_dealbreaker"))
        if any(is_flag_set(row.get(k)) for k in keys):
            flags[category] = True
    return {k: v for k, v in flags.items() if v}


def profile_from_row(row: Mapping[str, Any], as_of: date) -> Profile:
    """Build a Profile snapshot from a profile-store row as of ``as_of``."""
    attrs = {field: _first(row, keys) for field, keys in ATTRIBUTE_SOURCES.items()}
    age = calculate_age(_first(row, ("date_of_birth", "dateOfBirth", "dob")), as_of)
    if age is None:
        age = row.get("age")
    prefs = {field: _first(row, keys) for field, keys in PREFERENCE_SOURCES.items()}
    return Profile(
        id=str(row.get("id")),
        attributes=AttributeRecord(age=age, **attrs),
        preferences=PreferenceRecord(**prefs),
        dealbreakers=_dealbreakers(row),
    )


def _known_fields(record_type: type, values: Mapping[str, Any], kind: str) -> dict[str, Any]:
    allowed = set(record_type.__dataclass_fields__)
    unknown = sorted(k for k in values if k not in allowed)
    if unknown:
        raise InputError(f"unknown {kind} fields: {', '.join(unknown)}")
    return dict(values)


def profile_from_snapshot(
    profile_id: str,
    attributes: Mapping[str, Any],
    preferences: Mapping[str, Any],
    dealbreakers: Mapping[str, Any],
    *,
    as_of: date,
    date_of_birth: Any = None,
) -> Profile:
    """Build a Profile from an already snake_case snapshot payload."""
    attrs = _known_fields(AttributeRecord, attributes or {}, "attribute")
    if date_of_birth is not None:
        age = calculate_age(date_of_birth, as_of)
        if age is not None:
            attrs["age"] = age
    return Profile(
        id=str(profile_id),
        attributes=AttributeRecord(**attrs),
        preferences=PreferenceRecord(**_known_fields(PreferenceRecord, preferences or {}, "preference")),
        dealbreakers=validate_flags(dealbreakers),
    )
