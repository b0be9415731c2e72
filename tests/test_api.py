from fastapi.testclient import TestClient


def _create_room(client: TestClient, admin_name="Ann"):
    response = client.post("/api/rooms", json={"admin_name": admin_name})
    assert response.status_code == 200
    return response.json()


def _upload(client, code, keys=("A-1", "A-2"), parent_key=None):
    tickets = [
        {"id": f"id-{k}", "key": k, "summary": f"Summary {k}", "parent_key": parent_key}
        for k in keys
    ]
    return client.post(f"/api/rooms/{code}/tickets", json={"tickets": tickets})


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}


def test_create_and_get_room(client):
    data = _create_room(client)
    room = data["room"]

    assert len(room["code"]) == 6
    assert room["status"] == "active"
    assert room["participants"] == [{"id": data["admin_id"], "name": "Ann", "is_admin": True}]

    fetched = client.get(f"/api/rooms/{room['code'].lower()}")
    assert fetched.status_code == 200
    assert fetched.json()["code"] == room["code"]


def test_create_room_requires_name(client):
    assert client.post("/api/rooms", json={"admin_name": "   "}).status_code == 422


def test_unknown_room_is_404(client):
    assert client.get("/api/rooms/NOPE22").status_code == 404
    assert client.post("/api/rooms/NOPE22/reveal").status_code == 404
    assert client.post("/api/rooms/NOPE22/join", json={"name": "Bob"}).status_code == 404


def test_join_generates_id_and_reconnects_by_name(client):
    code = _create_room(client)["room"]["code"]

    first = client.post(f"/api/rooms/{code}/join", json={"name": "Bob"}).json()
    assert first["is_reconnect"] is False
    bob_id = first["participant"]["id"]
    assert bob_id

    again = client.post(f"/api/rooms/{code}/join", json={"id": "lost", "name": "BOB"}).json()
    assert again["is_reconnect"] is True
    assert again["participant"]["id"] == bob_id
    assert len(again["room"]["participants"]) == 2


def test_admin_reconnect_restores_admin(client):
    data = _create_room(client)
    code = data["room"]["code"]

    joined = client.post(f"/api/rooms/{code}/join", json={"id": "new-device", "name": "ann"}).json()
    assert joined["participant"]["id"] == data["admin_id"]
    assert joined["participant"]["is_admin"] is True


def test_full_voting_round(client):
    code = _create_room(client)["room"]["code"]
    assert _upload(client, code).status_code == 200
    assert client.post(f"/api/rooms/{code}/start").json()["planning_started"] is True

    for voter, value in (("p1", 4), ("p2", 8)):
        response = client.post(
            f"/api/rooms/{code}/vote",
            json={"voter_id": voter, "voter_name": voter.upper(), "value": value},
        )
        assert response.status_code == 200

    assert client.get(f"/api/rooms/{code}/stats").json() is None
    room = client.post(f"/api/rooms/{code}/reveal").json()
    assert room["tickets"][0]["is_revealed"] is True

    stats = client.get(f"/api/rooms/{code}/stats").json()
    assert stats["average"] == 6.0
    assert stats["most_common"] == 4
    assert stats["vote_count"] == 2

    room = client.post(f"/api/rooms/{code}/agree", json={"points": 5}).json()
    assert room["tickets"][0]["agreed_points"] == 5
    assert client.post(f"/api/rooms/{code}/next").json()["current_ticket_index"] == 1
    assert client.post(f"/api/rooms/{code}/next").json()["current_ticket_index"] == 1
    assert client.post(f"/api/rooms/{code}/prev").json()["current_ticket_index"] == 0

    summary = client.get(f"/api/rooms/{code}/summary").json()
    assert summary["estimated_tickets"] == 1
    assert summary["total_points"] == 5


def test_vote_value_must_be_on_scale(client):
    code = _create_room(client)["room"]["code"]
    _upload(client, code)
    response = client.post(
        f"/api/rooms/{code}/vote",
        json={"voter_id": "p1", "voter_name": "P1", "value": 5},
    )
    assert response.status_code == 422


def test_precondition_failures_are_409(client):
    code = _create_room(client)["room"]["code"]

    assert client.post(f"/api/rooms/{code}/reveal").status_code == 409
    assert client.post(f"/api/rooms/{code}/start").status_code == 409
    assert client.post(f"/api/rooms/{code}/resume").status_code == 409

    _upload(client, code)
    assert client.post(f"/api/rooms/{code}/agree", json={"points": 5}).status_code == 409

    client.post(f"/api/rooms/{code}/pause")
    vote = {"voter_id": "p1", "voter_name": "P1", "value": 4}
    assert client.post(f"/api/rooms/{code}/vote", json=vote).status_code == 409
    assert client.post(f"/api/rooms/{code}/resume").json()["status"] == "active"
    assert client.post(f"/api/rooms/{code}/vote", json=vote).status_code == 200

    assert client.post(f"/api/rooms/{code}/end").json()["status"] == "completed"
    assert client.post(f"/api/rooms/{code}/pause").status_code == 409


def test_negative_agreed_points_rejected(client):
    code = _create_room(client)["room"]["code"]
    assert client.post(f"/api/rooms/{code}/agree", json={"points": -1}).status_code == 422


def test_reorder_validation_and_lock(client):
    code = _create_room(client)["room"]["code"]
    _upload(client, code, keys=("A-1", "A-2", "A-3"))

    bad = client.post(f"/api/rooms/{code}/reorder", json={"ticket_ids": ["id-A-1"]})
    assert bad.status_code == 400

    ok = client.post(f"/api/rooms/{code}/reorder", json={"ticket_ids": ["id-A-3", "id-A-2", "id-A-1"]})
    assert [t["key"] for t in ok.json()["tickets"]] == ["A-3", "A-2", "A-1"]

    client.post(f"/api/rooms/{code}/start")
    locked = client.post(f"/api/rooms/{code}/reorder", json={"ticket_ids": ["id-A-1", "id-A-2", "id-A-3"]})
    assert locked.status_code == 409


def test_empty_upload_rejected(client):
    code = _create_room(client)["room"]["code"]
    assert client.post(f"/api/rooms/{code}/tickets", json={"tickets": []}).status_code == 422


def test_csv_upload(client):
    code = _create_room(client)["room"]["code"]
    content = "Issue key,Summary,Parent key,Parent summary\nPP-1,One,,\nPP-2,Two,EPIC-1,Epic\n"

    room = client.post(f"/api/rooms/{code}/tickets/csv", json={"content": content}).json()
    assert [t["key"] for t in room["tickets"]] == ["PP-2", "PP-1"]

    bad = client.post(f"/api/rooms/{code}/tickets/csv", json={"content": "Key,Title\n"})
    assert bad.status_code == 400


def test_csv_upload_with_repeated_issue_id_rejected(client):
    code = _create_room(client)["room"]["code"]
    content = "Issue key,Issue id,Summary\nPP-1,100,One\nPP-2,100,Two\n"

    response = client.post(f"/api/rooms/{code}/tickets/csv", json={"content": content})
    assert response.status_code == 400
    assert client.get(f"/api/rooms/{code}").json()["tickets"] == []


def test_reports_lifecycle(client):
    code = _create_room(client)["room"]["code"]

    missing = client.post("/api/reports", json={"room_code": code, "name": "Sprint 1"})
    assert missing.status_code == 409

    _upload(client, code)
    saved = client.post(
        "/api/reports", json={"room_code": code, "name": "Sprint 1", "admin_name": "Ann"}
    ).json()
    assert saved["created_by"] == "Ann"
    assert saved["total_tickets"] == 2

    listed = client.get("/api/reports").json()
    assert [r["id"] for r in listed] == [saved["id"]]
    assert "tickets" not in listed[0]

    assert client.get(f"/api/reports/{saved['id']}").json()["name"] == "Sprint 1"

    exported = client.get(f"/api/reports/{saved['id']}/csv")
    assert exported.status_code == 200
    assert exported.headers["content-type"].startswith("text/csv")
    assert exported.text.splitlines()[0].startswith("Issue key,Summary")

    assert client.delete(f"/api/reports/{saved['id']}").json() == {"deleted": True}
    assert client.get(f"/api/reports/{saved['id']}").status_code == 404
    assert client.delete(f"/api/reports/{saved['id']}").json() == {"deleted": True}
    assert client.get("/api/reports").json() == []


def test_save_report_for_unknown_room(client):
    response = client.post("/api/reports", json={"room_code": "NOPE22", "name": "X"})
    assert response.status_code == 404
