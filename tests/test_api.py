from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

import api.main as api_main
from core.session import DashboardSession, SessionStore


@pytest.fixture
def client(monkeypatch, data_ctx):
    monkeypatch.setattr(api_main, "load_dashboard_data", lambda: data_ctx)
    monkeypatch.setattr(api_main, "sessions", SessionStore(lambda: DashboardSession(data_ctx)))
    return TestClient(api_main.app)


def test_meta_years(client):
    body = client.get("/meta/years").json()
    assert body["years"] == [2019, 2022]
    assert body["selectable"] == [2012, 2014, 2016, 2019, 2022]


def test_meta_states_and_sexes(client):
    assert "Selangor" in client.get("/meta/states").json()["values"]
    assert client.get("/meta/sexes").json()["values"] == ["both", "female", "male"]


def test_combined_endpoint(client):
    resp = client.post("/combined", json={"diverging_year": 2022}, params={"selected_state": "Perlis"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "ok"
    assert body["selection"] == "Perlis"
    assert "combined" in body["charts"]


def test_combined_endpoint_reports_missing_year(client):
    body = client.post("/combined", json={"diverging_year": 2099}).json()
    assert body["status"] == "unavailable"
    assert body["available_years"] == [2019, 2022]


def test_dashboard_endpoint_returns_all_views(client):
    body = client.post("/dashboard", json={"sex": "female"}).json()
    assert set(body["views"]) == {"combined", "heatmap", "trend", "maps"}
    assert body["filters"]["sex"] == "female"


def test_session_events_toggle_selection(client):
    resp = client.post("/sessions/s1/events", json={"event": {"type": "entity_clicked", "state": "Selangor"}})
    assert resp.status_code == 200
    assert resp.json()["selection"] == "Selangor"
    assert client.get("/sessions/s1/selection").json()["selected"] == "Selangor"
    assert client.get("/sessions/s2/selection").json()["selected"] is None

    client.post("/sessions/s1/events", json={"event": {"type": "selection_cleared"}})
    assert client.get("/sessions/s1/selection").json()["selected"] is None


def test_session_year_event(client):
    body = client.post(
        "/sessions/s1/events", json={"event": {"type": "year_changed", "view": "diverging", "year": 2019}}
    ).json()
    assert body["filters"]["diverging_year"] == 2019
    assert body["views"]["combined"]["diverging_year"] == 2019


def test_session_event_validation(client):
    resp = client.post("/sessions/s1/events", json={"event": {"type": "year_changed", "view": "nowhere", "year": 1}})
    assert resp.status_code == 422


def test_export(client):
    resp = client.get("/export/income")
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/csv")
    assert resp.text.splitlines()[0] == "state,date,income_mean,income_median,income_percentile"
    assert client.get("/export/bogus").status_code == 404


def test_endpoint_failure_returns_json_error(client, monkeypatch):
    def boom():
        raise RuntimeError("disk on fire")

    monkeypatch.setattr(api_main, "load_dashboard_data", boom)
    resp = client.post("/heatmap", json={})
    assert resp.status_code == 500
    assert resp.json() == {"error": "disk on fire", "type": "RuntimeError"}


def test_unknown_session_is_not_created_by_reads(client):
    for i in range(5):
        assert client.get(f"/sessions/nobody-{i}/selection").json()["selected"] is None
    resp = client.get("/sessions/nobody-0")
    assert resp.status_code == 404
    assert len(api_main.sessions) == 0

    client.post("/sessions/s1/events", json={"event": {"type": "entity_clicked", "state": "Perlis"}})
    body = client.get("/sessions/s1").json()
    assert body["session_id"] == "s1"
    assert body["selection"] == "Perlis"


def test_openapi_documents_meta_and_selection_models(client):
    paths = client.get("/openapi.json").json()["paths"]
    years_schema = paths["/meta/years"]["get"]["responses"]["200"]["content"]["application/json"]["schema"]
    selection_schema = paths["/sessions/{session_id}/selection"]["get"]["responses"]["200"]["content"]["application/json"]["schema"]
    assert years_schema["$ref"].endswith("/MetaYearsResponse")
    assert selection_schema["$ref"].endswith("/SelectionResponse")
