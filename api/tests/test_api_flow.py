import pytest

pytest.importorskip("fastapi")
from fastapi.testclient import TestClient

import app.main as m
from app.routes import match as match_routes


class _DummySession:
    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        return False

    def execute(self, *args, **kwargs):
        raise AssertionError("repo functions are monkeypatched in these tests")


def _client(monkeypatch):
    monkeypatch.setattr(m, "wait_for_db", lambda *args, **kwargs: None)
    monkeypatch.setattr(match_routes, "SessionLocal", lambda: _DummySession())
    return TestClient(m.app)


ROWS = {
    "s": {
        "id": "s",
        "gender": "female",
        "dateOfBirth": "1994-01-01",
        "religion": "Hindu",
        "dietaryPreference": "Veg",
        "prefReligion": "Hindu",
        "prefReligionIsDealbreaker": "true",
        "prefDiet": "vegetarian",
    },
    "c1": {"id": "c1", "gender": "male", "religion": "Hindu", "dietaryPreference": "Non-Veg"},
    "c2": {"id": "c2", "gender": "male", "religion": "Hindu", "dietaryPreference": "Vegetarian"},
    "c3": {"id": "c3", "gender": "male", "religion": "Christian", "dietaryPreference": "Vegetarian"},
}


def _install_store(monkeypatch):
    seen_limits = []

    def fake_fetch_profile_row(db, profile_id):
        return ROWS.get(profile_id)

    def fake_fetch_candidate_rows(db, seeker_row, limit):
        seen_limits.append(limit)
        return [r for pid, r in ROWS.items() if pid != seeker_row["id"]]

    monkeypatch.setattr(match_routes.repo, "fetch_profile_row", fake_fetch_profile_row)
    monkeypatch.setattr(match_routes.repo, "fetch_candidate_rows", fake_fetch_candidate_rows)
    return seen_limits


def test_health_endpoints(monkeypatch):
    client = _client(monkeypatch)
    assert client.get("/health").json() == {"status": "ok"}
    assert client.get("/_scaffold/match/health").json() == {"status": "ok", "module": "match"}


def test_resolve_blocked_pair_returns_reason(monkeypatch):
    client = _client(monkeypatch)
    resp = client.post(
        "/match/resolve",
        json={
            "profile_a": {
                "id": "a",
                "attributes": {"community": "Brahmin"},
                "preferences": {"community": "Brahmin"},
                "dealbreakers": {"community": True},
            },
            "profile_b": {"id": "b", "attributes": {"community": "Kshatriya"}},
        },
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["mutual"] is False
    assert body["block_reason"] == "community"
    assert body["block_message"] == "Community does not meet a deal-breaker preference."
    assert body["seeker_as_viewer_score"] is None


def test_resolve_mutual_pair_returns_both_scores(monkeypatch):
    client = _client(monkeypatch)
    resp = client.post(
        "/match/resolve",
        json={
            "as_of": "2024-06-01",
            "profile_a": {
                "id": "a",
                "date_of_birth": "1992-02-02",
                "attributes": {"diet": "vegetarian", "education": "masters"},
                "preferences": {"education": "undergrad", "diet": "vegetarian"},
                "dealbreakers": {"education": True},
            },
            "profile_b": {
                "id": "b",
                "attributes": {"education": "phd", "diet": "non_vegetarian", "age": 33},
                "preferences": {"age_min": 30, "age_max": 35},
            },
        },
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["mutual"] is True
    assert body["block_reason"] is None
    assert body["seeker_as_viewer_score"] == 50
    assert body["seeker_as_candidate_score"] == 100


def test_resolve_rejects_bad_input(monkeypatch):
    client = _client(monkeypatch)
    same = {"id": "a"}
    assert client.post("/match/resolve", json={"profile_a": same, "profile_b": same}).status_code == 400

    bad_range = {"id": "a", "preferences": {"age_min": 40, "age_max": 30}}
    resp = client.post("/match/resolve", json={"profile_a": bad_range, "profile_b": {"id": "b", "attributes": {"age": 35}}})
    assert resp.status_code == 400

    bad_flag = {"id": "a", "dealbreakers": {"horoscope": True}}
    assert client.post("/match/resolve", json={"profile_a": bad_flag, "profile_b": {"id": "b"}}).status_code == 400


def test_compatibility_returns_breakdown(monkeypatch):
    client = _client(monkeypatch)
    resp = client.post(
        "/match/compatibility",
        json={
            "seeker": {
                "id": "a",
                "preferences": {"diet": "vegetarian", "religion": "Hindu"},
                "dealbreakers": {"diet": False},
            },
            "candidate": {"id": "b", "attributes": {"diet": "non_vegetarian", "religion": "Hindu"}},
        },
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["passed"] is True
    assert body["score"] == 50
    criteria = {c["name"]: c for c in body["criteria"]}
    assert criteria["diet"]["matched"] is False
    assert criteria["religion"]["matched"] is True
    assert criteria["age"]["seeker_preference"] == "Doesn't matter"


def test_profile_matches_from_store(monkeypatch):
    client = _client(monkeypatch)
    seen_limits = _install_store(monkeypatch)
    resp = client.get("/profiles/s/matches")
    assert resp.status_code == 200
    body = resp.json()
    assert body["evaluated"] == 3
    assert [item["profile_id"] for item in body["matches"]] == ["c2", "c1"]
    assert body["matches"][0]["seeker_as_viewer_score"] == 100
    assert body["matches"][1]["seeker_as_viewer_score"] == 50
    assert seen_limits == [match_routes.MATCH_CANDIDATE_LIMIT]


def test_profile_match_score_and_missing_profiles(monkeypatch):
    client = _client(monkeypatch)
    _install_store(monkeypatch)
    ok = client.get("/profiles/s/match-score/c3")
    assert ok.status_code == 200
    assert ok.json()["block_reason"] == "religion"

    assert client.get("/profiles/nope/matches").status_code == 404
    assert client.get("/profiles/s/match-score/nope").status_code == 404
    assert client.get("/profiles/s/match-score/s").status_code == 400


def test_profile_matches_skips_malformed_candidate(monkeypatch):
    client = _client(monkeypatch)
    rows = dict(ROWS)
    rows["c4"] = {"id": "c4", "gender": "male", "religion": "Hindu", "prefAgeMin": "40", "prefAgeMax": "30"}
    monkeypatch.setattr(match_routes.repo, "fetch_profile_row", lambda db, profile_id: rows.get(profile_id))
    monkeypatch.setattr(
        match_routes.repo,
        "fetch_candidate_rows",
        lambda db, seeker_row, limit: [r for pid, r in rows.items() if pid != seeker_row["id"]],
    )
    resp = client.get("/profiles/s/matches")
    assert resp.status_code == 200
    assert [item["profile_id"] for item in resp.json()["matches"]] == ["c2", "c1"]

    rows["s"] = dict(ROWS["s"], prefAgeMin="40", prefAgeMax="30")
    assert client.get("/profiles/s/matches").status_code == 400
