from conftest import auth_headers


def create_task(client, requester, **overrides):
    payload = {"title": "Review the onboarding doc", "tags": ["Docs"], "estimated_hours": 2}
    payload.update(overrides)
    response = client.post("/tasks", json=payload, headers=auth_headers(requester))
    assert response.status_code == 200
    return response.json()


def test_create_and_list(client, make_profile):
    alice = make_profile("Alice")
    task = create_task(client, alice)
    assert task["status"] == "open"
    assert task["tags"] == ["docs"]
    assert task["requester_id"] == alice.id

    listed = client.get("/tasks", params={"status": "open"}, headers=auth_headers(alice)).json()
    assert [t["id"] for t in listed] == [task["id"]]
    assert client.get("/tasks", params={"status": "completed"}, headers=auth_headers(alice)).json() == []


def test_duplicate_application_is_rejected(client, make_profile):
    alice, bob = make_profile("Alice"), make_profile("Bob")
    task = create_task(client, alice)

    first = client.post(f"/tasks/{task['id']}/apply", headers=auth_headers(bob))
    assert first.status_code == 200
    assert first.json()["status"] == "applied"

    second = client.post(f"/tasks/{task['id']}/apply", headers=auth_headers(bob))
    assert second.status_code == 409
    assert second.json()["error"] == "Already applied"


def test_withdraw_then_apply_again(client, make_profile):
    alice, bob = make_profile("Alice"), make_profile("Bob")
    task = create_task(client, alice)
    application = client.post(f"/tasks/{task['id']}/apply", headers=auth_headers(bob)).json()

    assert client.post(f"/applications/{application['id']}/withdraw", headers=auth_headers(alice)).status_code == 403
    withdrawn = client.post(f"/applications/{application['id']}/withdraw", headers=auth_headers(bob))
    assert withdrawn.json()["status"] == "withdrawn"
    assert client.post(f"/applications/{application['id']}/withdraw", headers=auth_headers(bob)).status_code == 409

    again = client.post(f"/tasks/{task['id']}/apply", headers=auth_headers(bob))
    assert again.status_code == 200

    detail = client.get(f"/tasks/{task['id']}", headers=auth_headers(bob)).json()
    assert len(detail["applications"]) == 2
    assert detail["my_application"]["id"] == again.json()["id"]
    assert detail["is_requester"] is False


def test_requester_cannot_apply_to_own_task(client, make_profile):
    alice = make_profile("Alice")
    task = create_task(client, alice)
    assert client.post(f"/tasks/{task['id']}/apply", headers=auth_headers(alice)).status_code == 403


def test_status_transitions(client, make_profile):
    alice, bob = make_profile("Alice"), make_profile("Bob")
    task = create_task(client, alice)
    url = f"/tasks/{task['id']}/status"

    assert client.patch(url, json={"status": "cancelled"}, headers=auth_headers(bob)).status_code == 403
    assert client.patch(url, json={"status": "cancelled"}, headers=auth_headers(alice)).json()["status"] == "cancelled"
    # cancelled tasks take no applications
    assert client.post(f"/tasks/{task['id']}/apply", headers=auth_headers(bob)).status_code == 409
    assert client.patch(url, json={"status": "open"}, headers=auth_headers(alice)).json()["status"] == "open"
    assert client.patch(url, json={"status": "completed"}, headers=auth_headers(alice)).status_code == 200

    rejected = client.patch(url, json={"status": "open"}, headers=auth_headers(alice))
    assert rejected.status_code == 409
    assert rejected.json()["success"] is False

    assert client.patch(url, json={"status": "archived"}, headers=auth_headers(alice)).status_code == 422


def test_soft_deleted_tasks_disappear(client, make_profile):
    alice, bob = make_profile("Alice"), make_profile("Bob")
    task = create_task(client, alice)

    assert client.delete(f"/tasks/{task['id']}", headers=auth_headers(bob)).status_code == 403
    assert client.delete(f"/tasks/{task['id']}", headers=auth_headers(alice)).status_code == 200

    assert client.get(f"/tasks/{task['id']}", headers=auth_headers(alice)).status_code == 404
    assert client.get("/tasks", headers=auth_headers(alice)).json() == []
    assert client.post(f"/tasks/{task['id']}/apply", headers=auth_headers(bob)).status_code == 404
