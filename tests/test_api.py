from fastapi.testclient import TestClient

from api.main import app
from api.schemas import DashboardFiltersModel

client = TestClient(app)


def test_filters_model_defaults():
    model = DashboardFiltersModel()
    assert model.start_date is None
    assert model.recent_limit == 10


def test_meta_endpoints(data_dir):
    resp = client.get("/meta/dates")
    assert resp.status_code == 200
    assert resp.json() == {"dates": ["2024-01-05", "2024-01-06"]}

    status = client.get("/meta/status").json()
    assert status["status"] == "ready"
    assert status["files"] == ["activities.csv", "daily_stats.csv", "sleep_data.csv"]


def test_summary_endpoint(data_dir):
    resp = client.post("/summary", json={})
    assert resp.status_code == 200
    body = resp.json()
    assert body["summary"]["total_activities"] == 3
    assert body["display"]["total_distance"] == "25.0"


def test_summary_endpoint_encodes_nan_as_null(empty_data_dir):
    body = client.post("/summary", json={}).json()
    assert body["summary"]["total_activities"] == 0
    assert body["summary"]["avg_heart_rate"] is None
    assert body["display"]["avg_heart_rate"] == "nan"


def test_date_range_applies_to_tab_payloads(data_dir):
    body = client.post("/overview", json={"start_date": "2024-01-06", "end_date": "2024-01-06"}).json()
    assert body["summary"]["total_activities"] == 1
    assert body["filters"]["start_date"] == "2024-01-06"


def test_tab_endpoints(data_dir):
    for tab in ("overview", "activities", "health", "sleep"):
        resp = client.post(f"/tabs/{tab}", json={})
        assert resp.status_code == 200
        assert resp.json()["tab"] == tab
    assert client.post("/sleep", json={}).json()["sleep"][0]["total_hours"] == "8.0"
    assert client.post("/activities", json={"recent_limit": 1}).json()["recent"][0]["name"] == "Morning Run"


def test_unknown_tab_is_404(data_dir):
    resp = client.post("/tabs/bogus", json={})
    assert resp.status_code == 404
    assert resp.json()["type"] == "ValueError"


def test_invalid_recent_limit_is_rejected(data_dir):
    assert client.post("/activities", json={"recent_limit": 0}).status_code == 422


def test_export_daily_activities(data_dir):
    resp = client.post("/export/daily_activities", json={})
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/csv")
    lines = resp.text.strip().splitlines()
    assert lines[0] == "date,count,distance,duration,calories"
    assert lines[1].startswith("2024-01-05,1,5.0,")


def test_sleep_score_is_returned_as_integer(data_dir):
    body = client.post("/sleep", json={}).json()
    assert body["sleep"][0]["score"] == 85
    assert isinstance(body["sleep"][0]["score"], int)
