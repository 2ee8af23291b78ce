def test_list_requires_date(client):
    resp = client.get("/api/entries")
    assert resp.status_code == 400
    assert resp.json() == {
        "success": False,
        "error": "date query parameter is required (format: YYYY-MM-DD)",
    }


def test_list_rejects_bad_date_format(client):
    resp = client.get("/api/entries", params={"date": "2024/01/01"})
    assert resp.status_code == 400
    assert resp.json()["error"] == "Invalid date format. Use YYYY-MM-DD"


def test_date_is_checked_by_shape_only(client):
    resp = client.get("/api/entries", params={"date": "2024-13-40"})
    assert resp.status_code == 200
    assert resp.json() == {"success": True, "data": []}


def test_create_and_list_sorted(client, add_entry):
    add_entry("10:00", "开会")
    created = add_entry("09:00", "写代码", thought="顺利")

    assert created["startTime"] == "09:00"
    assert created["endTime"] == "09:30"
    assert created["thought"] == "顺利"
    assert created["isSameAsPrevious"] is False
    assert created["id"]

    body = client.get("/api/entries", params={"date": "2024-01-01"}).json()
    assert body["success"] is True
    assert [e["startTime"] for e in body["data"]] == ["09:00", "10:00"]


def test_create_returns_201(client):
    resp = client.post("/api/entries", json={
        "date": "2024-01-01", "startTime": "08:00", "endTime": "08:30", "activity": "跑步",
    })
    assert resp.status_code == 201
    assert resp.json()["data"]["activity"] == "跑步"


def test_create_missing_fields(client):
    resp = client.post("/api/entries", json={"date": "2024-01-01", "activity": "x"})
    assert resp.status_code == 400
    assert resp.json()["error"] == "Missing required fields: date, startTime, endTime"


def test_create_bad_time(client):
    resp = client.post("/api/entries", json={
        "date": "2024-01-01", "startTime": "9:00", "endTime": "09:30", "activity": "x",
    })
    assert resp.status_code == 400
    assert resp.json()["error"] == "Invalid time format. Use HH:MM"


def test_empty_save_is_a_noop(client):
    resp = client.post("/api/entries", json={
        "date": "2024-01-01", "startTime": "09:00", "endTime": "09:30",
        "activity": "", "thought": "",
    })
    assert resp.status_code == 200
    assert resp.json() == {"success": True, "data": None}
    assert client.get("/api/entries", params={"date": "2024-01-01"}).json()["data"] == []


def test_marker_without_activity_is_stored(client, add_entry):
    created = add_entry("09:30", "", isSameAsPrevious=True)
    assert created["activity"] == ""
    assert created["isSameAsPrevious"] is True


def test_post_on_occupied_slot_updates(client, add_entry):
    first = add_entry("09:00", "写代码")
    resp = client.post("/api/entries", json={
        "date": "2024-01-01", "startTime": "09:00", "endTime": "09:30", "activity": "读书",
    })
    assert resp.status_code == 200
    assert resp.json()["data"]["id"] == first["id"]
    assert resp.json()["data"]["activity"] == "读书"

    data = client.get("/api/entries", params={"date": "2024-01-01"}).json()["data"]
    assert len(data) == 1


def test_previous_lookup(client, add_entry):
    add_entry("09:00", "写代码")

    resp = client.get("/api/entries/previous", params={"date": "2024-01-01", "startTime": "09:30"})
    assert resp.status_code == 200
    assert resp.json()["data"]["activity"] == "写代码"

    resp = client.get("/api/entries/previous", params={"date": "2024-01-01", "startTime": "10:00"})
    assert resp.json() == {"success": True, "data": None}


def test_previous_crosses_midnight(client, add_entry):
    add_entry("23:30", "睡觉", date="2024-01-01")
    resp = client.get("/api/entries/previous", params={"date": "2024-01-02", "startTime": "00:00"})
    assert resp.json()["data"]["date"] == "2024-01-01"
    assert resp.json()["data"]["endTime"] == "24:00"


def test_previous_requires_params(client):
    resp = client.get("/api/entries/previous", params={"date": "2024-01-01"})
    assert resp.status_code == 400
    assert resp.json()["error"] == "Date and startTime query parameters are required"


def test_get_update_delete_by_id(client, add_entry):
    created = add_entry("09:00", "写代码", thought="想法")
    entry_id = created["id"]

    assert client.get(f"/api/entries/{entry_id}").json()["data"]["activity"] == "写代码"

    resp = client.put(f"/api/entries/{entry_id}", json={"isSameAsPrevious": True})
    data = resp.json()["data"]
    assert resp.status_code == 200
    assert data["isSameAsPrevious"] is True
    assert data["activity"] == "写代码"
    assert data["thought"] == "想法"

    resp = client.put(f"/api/entries/{entry_id}", json={"thought": ""})
    assert resp.json()["data"]["thought"] is None

    resp = client.delete(f"/api/entries/{entry_id}")
    assert resp.status_code == 200
    assert resp.json() == {"success": True, "data": {"message": "Time entry deleted successfully"}}
    assert client.get(f"/api/entries/{entry_id}").status_code == 404


def test_unknown_id_is_404(client):
    for method in ("get", "put", "delete"):
        kwargs = {"json": {"activity": "x"}} if method == "put" else {}
        resp = getattr(client, method)("/api/entries/missing", **kwargs)
        assert resp.status_code == 404
        assert resp.json() == {"success": False, "error": "Time entry not found"}


def test_open_when_no_token_configured(client, configure):
    configure(zhipu_api_key="k")
    assert client.get("/api/entries", params={"date": "2024-01-01"}).status_code == 200


def test_token_gate(client, configure):
    configure(access_token="secret")
    params = {"date": "2024-01-01"}

    resp = client.get("/api/entries", params=params)
    assert resp.status_code == 401
    assert resp.json() == {"success": False, "error": "Unauthorized"}

    assert client.get("/api/entries", params=params, headers={"x-app-token": "wrong"}).status_code == 401
    assert client.get("/api/entries", params=params, headers={"x-app-token": "secret"}).status_code == 200
    assert client.get(
        "/api/entries", params=params, headers={"Authorization": "Bearer secret"}
    ).status_code == 200
