from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


class InputError(ValueError):
    """Malformed matching input: bad category metadata or a self-comparison."""


AGE = "age"
HEIGHT = "height"
MARITAL_STATUS = "marital_status"
RELIGION = "religion"
COMMUNITY = "community"
GOTRA = "gotra"
DIET = "diet"
SMOKING = "smoking"
DRINKING = "drinking"
LOCATION = "location"
CITIZENSHIP = "citizenship"
GREW_UP_IN = "grew_up_in"
RELOCATION = "relocation"
EDUCATION = "education"
WORK_AREA = "work_area"
INCOME = "income"
OCCUPATION = "occupation"
FAMILY_VALUES = "family_values"
FAMILY_LOCATION = "family_location"
MOTHER_TONGUE = "mother_tongue"
PETS = "pets"

# Gate evaluation order. The first failing dealbreaker reported depends on it.
CATEGORY_ORDER: tuple[str, ...] = (
    AGE,
    HEIGHT,
    MARITAL_STATUS,
    RELIGION,
    COMMUNITY,
    GOTRA,
    DIET,
    SMOKING,
    DRINKING,
    LOCATION,
    CITIZENSHIP,
    GREW_UP_IN,
    RELOCATION,
    EDUCATION,
    WORK_AREA,
    INCOME,
    OCCUPATION,
    FAMILY_VALUES,
    FAMILY_LOCATION,
    MOTHER_TONGUE,
    PETS,
)

RANGE_CATEGORIES = frozenset({AGE, HEIGHT, INCOME})
LIST_CATEGORIES = frozenset(
    {MARITAL_STATUS, RELIGION, LOCATION, WORK_AREA, OCCUPATION, MOTHER_TONGUE, COMMUNITY}
)
LOCATION_CATEGORIES = frozenset({LOCATION, FAMILY_LOCATION})

CATEGORY_LABELS: dict[str, str] = {
    AGE: "Age",
    HEIGHT: "Height",
    MARITAL_STATUS: "Marital Status",
    RELIGION: "Religion",
    COMMUNITY: "Community",
    GOTRA: "Gotra",
    DIET: "Diet",
    SMOKING: "Smoking",
    DRINKING: "Drinking",
    LOCATION: "Location",
    CITIZENSHIP: "Citizenship",
    GREW_UP_IN: "Grew Up In",
    RELOCATION: "Relocation",
    EDUCATION: "Education",
    WORK_AREA: "Work Area",
    INCOME: "Income",
    OCCUPATION: "Occupation",
    FAMILY_VALUES: "Family Values",
    FAMILY_LOCATION: "Family Location",
    MOTHER_TONGUE: "Mother Tongue",
    PETS: "Pets",
}


@dataclass(frozen=True)
class AttributeRecord:
    age: int | None = None
    height: Any = None
    marital_status: str | None = None
    community: str | None = None
    sub_community: str | None = None
    gotra: str | None = None
    diet: str | None = None
    smoking: str | None = None
    drinking: str | None = None
    location: str | None = None
    country: str | None = None
    citizenship: str | None = None
    grew_up_in: str | None = None
    relocation: str | None = None
    education: str | None = None
    work_area: str | None = None
    income: Any = None
    occupation: str | None = None
    family_values: str | None = None
    family_location: str | None = None
    mother_tongue: Any = None
    pets: str | None = None
    religion: str | None = None


@dataclass(frozen=True)
class PreferenceRecord:
    age_min: Any = None
    age_max: Any = None
    # Legacy free-text age preference, e.g. "25-35" or "3 years younger".
    age_range: str | None = None
    height_min: Any = None
    height_max: Any = None
    income_min: Any = None
    income_max: Any = None
    marital_status: Any = None
    religion: Any = None
    community: Any = None
    sub_community: Any = None
    gotra: str | None = None
    diet: Any = None
    smoking: Any = None
    drinking: Any = None
    location: Any = None
    citizenship: Any = None
    grew_up_in: Any = None
    relocation: Any = None
    education: Any = None
    work_area: Any = None
    occupation: Any = None
    family_values: Any = None
    family_location: Any = None
    mother_tongue: Any = None
    pets: Any = None


@dataclass(frozen=True, eq=False)
class Profile:
    id: str
    attributes: AttributeRecord = field(default_factory=AttributeRecord)
    preferences: PreferenceRecord = field(default_factory=PreferenceRecord)
    dealbreakers: dict[str, bool] = field(default_factory=dict)


# Normalized preference variants, one per matcher kind.


@dataclass(frozen=True)
class RangePreference:
    minimum: float | None = None
    maximum: float | None = None


@dataclass(frozen=True)
class EducationPreference:
    token: str
    min_level: int
    domain: str | None = None


@dataclass(frozen=True)
class CommunityPreference:
    communities: tuple[str, ...]
    sub_communities: tuple[str, ...] = ()


@dataclass(frozen=True)
class SetPreference:
    values: tuple[str, ...] = ()


@dataclass(frozen=True)
class NegatedPreference:
    excluded: str


@dataclass(frozen=True)
class ContainsPreference:
    tokens: tuple[str, ...]


@dataclass(frozen=True)
class LocationPreference(ContainsPreference):
    pass


@dataclass(frozen=True)
class MatchOutcome:
    matched: bool
    confidence: float


def is_flag_set(value: Any) -> bool:
    """Only a real ``True`` or the string ``"true"`` marks a dealbreaker."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return False


def validate_flags(flags: dict[str, Any] | None) -> dict[str, bool]:
    flags = flags or {}
    unknown = sorted(k for k in flags if k not in CATEGORY_LABELS)
    if unknown:
        raise InputError(f"unknown dealbreaker categories: {', '.join(unknown)}")
    return {k: is_flag_set(v) for k, v in flags.items()}
