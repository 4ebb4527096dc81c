import pytest

from app.services.categories import (
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
from app.services.normalization import (
    ANY,
    SAME_AS_MINE,
    build_preference,
    education_rank,
    normalize,
    normalize_attributes,
    parse_age_preference,
    parse_height,
    parse_income,
    split_list,
)


@pytest.mark.parametrize("raw", [None, "", "  ", "Any", "doesnt_matter", "Doesn't matter", "No Preference", []])
def test_sentinel_family_collapses_to_any(raw):
    assert normalize("diet", raw) == ANY
    assert normalize("religion", raw) == ANY


def test_legacy_education_spellings_map_to_current_tokens():
    assert normalize("education", "bachelors") == "undergrad"
    assert normalize("education", "eng_bachelor") == "undergrad_eng"
    assert normalize("education", "medical_master") == "medical_masters"
    assert education_rank("eng_bachelor") == (2, "engineering")
    assert education_rank("medical_master") == (3, "medical")
    assert education_rank("Ph.D") == (4, None)
    assert education_rank("Bachelor of Technology in Mechanical Engineering")[0] == 2
    assert education_rank("something else entirely") == (0, None)
    assert education_rank(None) == (0, None)


def test_idempotent_across_categories():
    samples = {
        "age": ["31", 29, "thirty"],
        "height": ["5'6\"", "5 ft 10 in", "5.5 ft", "168 cm", 70, "tall", 0.5, 6, 6.0, 7.5, 20, 250],
        "income": ["100k-150k", "$85,000", 120000, ">200k", "ask me"],
        "marital_status": ["Never Married", "single", "Divorced, Widowed"],
        "religion": ["Hindu", "Hindu, Jain", '["Sikh","Hindu","sikh"]'],
        "community": ["Brahmin", "Iyer, Iyengar"],
        "gotra": ["Kashyapa", "Bharadwaj"],
        "diet": ["Veg", "Non Veg", "eggetarian", "Pescatarian"],
        "smoking": ["Never", "socially", "Regularly"],
        "location": ["San Jose, CA", "Bay Area, Austin"],
        "education": ["bachelors", "MBA", "Doctorate", "no idea"],
        "mother_tongue": ["Tamil, Telugu", "Kannada"],
        "pets": ["Dog lover", "no"],
    }
    for category, values in samples.items():
        for raw in values:
            once = normalize(category, raw)
            assert normalize(category, once) == once, (category, raw, once)


def test_list_fields_split_dedupe_and_keep_order():
    assert normalize("religion", "Hindu, Jain, hindu") == ("hindu", "jain")
    assert normalize("mother_tongue", '["Tamil", "Telugu"]') == ("tamil", "telugu")
    assert split_list("a, ,b") == ["a", "b"]
    assert normalize("religion", "Hindu, Any") == ANY


def test_same_as_mine_substitutes_own_value():
    own = AttributeRecord(religion="Hindu", mother_tongue="Tamil")
    assert normalize("religion", "same_as_mine", own=own) == "hindu"
    assert normalize("mother_tongue", "Same as mine, Telugu", own=own) == ("tamil", "telugu")
    assert normalize("religion", "same_as_mine") == SAME_AS_MINE


def test_same_as_mine_without_source_degrades_to_any():
    own = AttributeRecord()
    assert normalize("religion", "same_as_mine", own=own) == ANY
    assert normalize("mother_tongue", "same_as_mine, same as mine", own=own) == ANY


def test_citizenship_same_as_mine_falls_back_to_country():
    own = AttributeRecord(country="USA")
    assert normalize("citizenship", "same_as_mine", own=own) == "usa"
    own = AttributeRecord(citizenship="India", country="USA")
    assert normalize("citizenship", "same_as_mine", own=own) == "india"


def test_parse_height_variants():
    assert parse_height("5'6\"") == 66.0
    assert parse_height("5 ft 10 in") == 70.0
    assert parse_height("5.5") == 66.0
    assert parse_height("168 cm") == 66.1
    assert parse_height(170) == 66.9
    assert parse_height(68) == 68.0
    assert parse_height("tall") is None
    assert parse_height("5.5 ft") == 66.0
    assert parse_height("6 feet") == 72.0


def test_height_outside_human_range_is_not_converted():
    assert normalize("height", 6.0) == 72.0
    assert normalize("height", 72.0) == 72.0
    assert parse_height(0.5) is None
    assert parse_height(20) is None
    assert parse_height("250 cm") is None
    assert normalize("height", 0.5) == "0.5"
    assert normalize("height", "0.5") == "0.5"


def test_parse_income_bands_and_numbers():
    assert parse_income("100k-150k") == 125.0
    assert parse_income("150k+") == 150.0
    assert parse_income("student") == 0.0
    assert parse_income("$85,000") == 85.0
    assert parse_income("90k") == 90.0
    assert parse_income(120000) == 120.0
    assert parse_income("lots") is None


def test_age_preference_text_forms():
    assert parse_age_preference("25-35", None) == (25, 35)
    assert parse_age_preference("35 to 25 years", None) == (25, 35)
    assert parse_age_preference("between 3 to 5 years", 30) == (33, 35)
    assert parse_age_preference("< 5 years", 30) == (25, 35)
    assert parse_age_preference("3 years younger", 30) == (27, 30)
    assert parse_age_preference("4 years older", 30) == (30, 34)
    assert parse_age_preference("5", 30) == (25, 35)
    assert parse_age_preference("< 5 years", None) is None
    assert parse_age_preference("doesn't matter", 30) is None


def test_age_preference_prefers_explicit_bounds():
    prefs = PreferenceRecord(age_min="27", age_max=33, age_range="25-40")
    assert build_preference("age", prefs) == RangePreference(minimum=27.0, maximum=33.0)
    legacy = PreferenceRecord(age_range="3 years younger")
    assert build_preference("age", legacy, AttributeRecord(age=32)) == RangePreference(minimum=29.0, maximum=32.0)
    assert build_preference("age", legacy) == ANY


def test_range_drops_unparseable_bound():
    prefs = PreferenceRecord(height_min="5'4\"", height_max="very tall")
    assert build_preference("height", prefs) == RangePreference(minimum=64.0, maximum=None)


def test_education_preference_levels():
    assert build_preference("education", PreferenceRecord(education="bachelors")) == EducationPreference(
        token="undergrad", min_level=2, domain=None
    )
    assert build_preference("education", PreferenceRecord(education="medical_master")) == EducationPreference(
        token="medical_masters", min_level=3, domain="medical"
    )
    assert build_preference("education", PreferenceRecord(education="whatever")) == ANY


def test_gotra_preference_forms():
    own = AttributeRecord(gotra="Kashyapa")
    assert build_preference("gotra", PreferenceRecord(gotra="Not Kashyapa")) == NegatedPreference(excluded="kashyapa")
    assert build_preference("gotra", PreferenceRecord(gotra="!Vasishta")) == NegatedPreference(excluded="vasishta")
    assert build_preference("gotra", PreferenceRecord(gotra="Bharadwaj")) == NegatedPreference(excluded="bharadwaj")
    assert build_preference("gotra", PreferenceRecord(gotra="Different gotra"), own) == NegatedPreference(excluded="kashyapa")
    assert build_preference("gotra", PreferenceRecord(gotra="different"), AttributeRecord()) == ANY
    assert build_preference("gotra", PreferenceRecord(gotra="doesn't matter"), own) == ANY


def test_same_gotra_wording_is_not_an_exclusion():
    own = AttributeRecord(gotra="Kashyapa")
    for raw in ("Same gotra", "same_gotra", "same", "Same as mine"):
        assert build_preference("gotra", PreferenceRecord(gotra=raw), own) == ANY


def test_diet_preference_tolerance():
    assert build_preference("diet", PreferenceRecord(diet="Non-Veg")) == ANY
    assert build_preference("diet", PreferenceRecord(diet="eggetarian")) == ContainsPreference(
        tokens=("eggetarian", "vegetarian", "non_vegetarian")
    )
    assert build_preference("diet", PreferenceRecord(diet="Pure Veg")) == ContainsPreference(tokens=("vegetarian",))
    assert build_preference("diet", PreferenceRecord(diet="vegan")) == ContainsPreference(tokens=("vegan",))


def test_habit_preference_tolerance():
    assert build_preference("smoking", PreferenceRecord(smoking="Never")) == ContainsPreference(tokens=("no",))
    assert build_preference("drinking", PreferenceRecord(drinking="socially")) == ContainsPreference(
        tokens=("no", "occasionally")
    )
    assert build_preference("drinking", PreferenceRecord(drinking="yes")) == ANY


def test_preference_variants_by_category():
    prefs = PreferenceRecord(
        religion="Hindu, Jain",
        community="Brahmin",
        sub_community="Iyer",
        location="Bay Area",
        diet="veg",
    )
    assert build_preference("religion", prefs) == SetPreference(values=("hindu", "jain"))
    assert build_preference("community", prefs) == CommunityPreference(communities=("brahmin",), sub_communities=("iyer",))
    assert build_preference("location", prefs) == LocationPreference(tokens=("bay area",))
    assert build_preference("diet", prefs) == ContainsPreference(tokens=("vegetarian",))


def test_normalize_attributes_keeps_location_whole_and_pairs_community():
    values = normalize_attributes(
        AttributeRecord(
            location="San Jose,  CA",
            community="Brahmin",
            sub_community="Iyer",
            diet="Non Veg",
            education="B.Tech",
            height="5'8\"",
            income="75k-100k",
        )
    )
    assert values["location"] == "san jose, ca"
    assert values["community"] == ("brahmin", "iyer")
    assert values["diet"] == "non_vegetarian"
    assert values["education"] == "undergrad_eng"
    assert values["height"] == 68.0
    assert values["income"] == 87.0
    assert values["gotra"] is None
