"""
HTTP control plane tests against an in-memory application.
"""

import pytest
from fastapi.testclient import TestClient

from bootcamp.domain import LocalDate, PersistenceError, Session
from bootcamp.main import app
from bootcamp.repositories.memory import InMemorySessionRepository
from bootcamp.routes.dependencies import get_application

client = TestClient(app)


class UnavailableSessionRepository(InMemorySessionRepository):
    async def load_all(self):
        raise PersistenceError("connection refused", operation="hgetall")


@pytest.fixture
def use_application():
    def _use(application):
        app.dependency_overrides[get_application] = lambda: application
        return application

    yield _use
    app.dependency_overrides.clear()


@pytest.fixture
def api(application, use_application):
    return use_application(application)


@pytest.fixture
def seeded(make_application, use_application):
    """Serve an application whose store starts with the given sessions."""

    def _seed(*sessions):
        repository = InMemorySessionRepository(list(sessions))
        use_application(make_application(sessions=repository))
        return repository

    return _seed


def test_reconcile_then_list(api):
    response = client.post("/sessions/reconcile")

    assert response.status_code == 200
    data = response.json()
    assert [(s["date"], s["time"]) for s in data["created"]] == [
        ("2025-06-02", "17:00"),
        ("2025-06-03", "07:00"),
    ]
    assert data["errors"] == []

    listed = client.get("/sessions").json()
    assert [s["weekday"] for s in listed] == ["Monday", "Tuesday"]
    assert all(s["ts"] for s in listed)

    again = client.post("/sessions/reconcile").json()
    assert again["created"] == []
    assert again["skipped_count"] == 2


def test_join_and_quit_by_id(seeded):
    seeded(Session(session_id="mon-pm", date=LocalDate(2025, 6, 2), hour=17, minute=0))

    first = client.post("/sessions/mon-pm/join", json={"user_id": "U1"})
    second = client.post("/sessions/mon-pm/join", json={"user_id": "U1"})

    assert first.status_code == 200
    assert first.json()["changed"] is True
    assert second.json()["changed"] is False
    assert second.json()["session"]["participants"] == ["U1"]

    quit_response = client.post("/sessions/mon-pm/quit", json={"user_id": "U1"})
    assert quit_response.json()["changed"] is True
    assert quit_response.json()["session"]["participants"] == []


def test_join_full_session_conflicts(seeded):
    seeded(
        Session(
            session_id="full",
            date=LocalDate(2025, 6, 2),
            hour=17,
            minute=0,
            participants=["A", "B"],
            limit=2,
        )
    )

    response = client.post("/sessions/full/join", json={"user_id": "C"})

    assert response.status_code == 409
    assert "full" in response.json()["detail"]


def test_join_unknown_session_not_found(api):
    response = client.post("/sessions/nope/join", json={"user_id": "U1"})

    assert response.status_code == 404


def test_join_requires_user_id(api):
    response = client.post("/sessions/nope/join", json={})

    assert response.status_code == 422


def test_join_and_quit_by_date(api):
    client.post("/sessions/reconcile")

    joined = client.post("/sessions/join-by-date", json={"user_id": "U1", "date": "tomorrow"})
    assert joined.status_code == 200
    assert joined.json()["session"]["time"] == "07:00"

    next_session = client.post("/sessions/join-by-date", json={"user_id": "U2"})
    assert next_session.json()["session"]["date"] == "2025-06-02"

    quit_response = client.post("/sessions/quit-by-date", json={"user_id": "U1", "date": "tomorrow"})
    assert quit_response.json()["changed"] is True

    bad_date = client.post("/sessions/join-by-date", json={"user_id": "U1", "date": "whenever"})
    assert bad_date.status_code == 400


def test_put_get_delete_session(api):
    body = {"date": "2025-06-05", "hour": 17, "minute": 0, "participants": ["U1", "U1"], "limit": 5}

    put_response = client.put("/sessions/manual", json=body)
    assert put_response.status_code == 200
    assert put_response.json()["participants"] == ["U1"]

    fetched = client.get("/sessions/manual").json()
    assert fetched["weekday"] == "Thursday"
    assert fetched["limit"] == 5

    assert client.delete("/sessions/manual").status_code == 204
    assert client.get("/sessions/manual").status_code == 404


def test_put_session_rejects_bad_date(api):
    response = client.put("/sessions/manual", json={"date": "2025-02-30"})

    assert response.status_code == 422


def test_schedules_lifecycle(api):
    created = client.put("/schedules/U1", json={"weekday": "tue"})
    assert created.status_code == 200
    assert created.json() == {"user": "U1", "weekday": "Tuesday"}

    assert client.get("/schedules").json() == [{"user": "U1", "weekday": "Tuesday"}]
    assert client.get("/schedules/U1").json()["weekday"] == "Tuesday"

    assert client.delete("/schedules/U1/tuesday").status_code == 204
    assert client.get("/schedules/U1").status_code == 404


def test_subscribe_unknown_weekday_is_bad_request(api):
    response = client.put("/schedules/U1", json={"weekday": "funday"})

    assert response.status_code == 400


def test_subscribe_when_disabled_is_forbidden(make_application, use_application):
    use_application(make_application(schedules_enabled=False))

    response = client.put("/schedules/U1", json={"weekday": "monday"})

    assert response.status_code == 403


def test_leaderboard(seeded):
    seeded(
        Session(
            session_id="a",
            date=LocalDate(2025, 6, 3),
            hour=7,
            minute=0,
            participants=["U1", "U2"],
        ),
        Session(session_id="b", date=LocalDate(2025, 6, 3), hour=17, minute=0, participants=["U1"]),
    )

    board = client.get("/leaderboard/2025/6").json()
    assert board["total_attendances"] == 3
    assert [(e["rank"], e["participant"], e["attendances"]) for e in board["levels"]] == [
        (1, "U1", 2),
        (2, "U2", 1),
    ]

    assert client.get("/leaderboard/2025/6/U2").json()["rank"] == 2
    assert client.get("/leaderboard/2025/6/U9").status_code == 404
    assert client.get("/leaderboard/2025/13").status_code == 422


def test_storage_failure_is_service_unavailable(make_application, use_application):
    use_application(make_application(sessions=UnavailableSessionRepository()))

    response = client.get("/sessions")

    assert response.status_code == 503
    assert response.json()["detail"] == "Storage unavailable"


def test_routes_unavailable_before_startup():
    response = client.get("/sessions")

    assert response.status_code == 503
