from unittest.mock import patch


def test_health_and_version(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json().get("status") == "ok"

    v = client.get("/version")
    assert v.status_code == 200
    assert v.json().get("app") == "attendance-api"


def test_attendance_list(client, seed_attendance):
    seed_attendance([
        {"date": 1000, "year": 2024, "month": 1, "day": 1, "hour": 0, "minute": 0, "count": 3},
        {"date": 2000, "year": 2024, "month": 1, "day": 1, "hour": 0, "minute": 0, "count": 4},
        {"date": 3000, "year": 2024, "month": 1, "day": 1, "hour": 0, "minute": 0, "count": 5},
    ])
    res = client.get("/api/attendance", params={"limit": 2, "offset": 1})
    assert res.status_code == 200
    assert [it["date"] for it in res.json()["items"]] == [2000, 1000]

    res = client.get("/api/attendance", params={"date_from": 2000})
    assert [it["count"] for it in res.json()["items"]] == [5, 4]


def test_attendance_list_validates_paging(client):
    assert client.get("/api/attendance", params={"limit": 0}).status_code == 422
    assert client.get("/api/attendance", params={"limit": 1001}).status_code == 422


@patch("attendance.routes.attendance.list_attendance")
def test_attendance_list_maps_errors(mock_list, client):
    mock_list.side_effect = RuntimeError("attendance_query_failed")
    res = client.get("/api/attendance")
    assert res.status_code == 500
    assert res.json()["detail"] == "attendance_query_failed"

    mock_list.side_effect = ValueError("offset_must_not_be_negative")
    assert client.get("/api/attendance").status_code == 400
