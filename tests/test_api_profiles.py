from conftest import auth_headers


def test_admin_manages_invites_and_guilds(client, make_profile):
    admin = make_profile("Admin", role="admin")
    alice = make_profile("Alice")

    revoked = client.patch(f"/profiles/{alice.id}", json={"active": False}, headers=auth_headers(admin))
    assert revoked.status_code == 200
    assert revoked.json()["active"] is False
    assert client.get("/profiles", headers=auth_headers(alice)).status_code == 403

    guild = client.post("/guilds", json={"name": "Platform"}, headers=auth_headers(admin))
    assert guild.status_code == 200
    assert client.post("/guilds", json={"name": "Platform"}, headers=auth_headers(admin)).status_code == 409


def test_members_cannot_administer(client, make_profile):
    alice, bob = make_profile("Alice"), make_profile("Bob")
    assert client.patch(f"/profiles/{bob.id}", json={"role": "admin"}, headers=auth_headers(alice)).status_code == 403
    assert client.post("/guilds", json={"name": "Ops"}, headers=auth_headers(alice)).status_code == 403


def test_admin_cannot_demote_self(client, make_profile):
    admin = make_profile("Admin", role="admin")
    response = client.patch(f"/profiles/{admin.id}", json={"role": "member"}, headers=auth_headers(admin))
    assert response.status_code == 400


def test_recipient_options_list_active_users_then_guilds(client, make_profile):
    admin = make_profile("Admin", role="admin")
    make_profile("Bob")
    make_profile("Gone", active=False)
    client.post("/guilds", json={"name": "Platform"}, headers=auth_headers(admin))

    options = client.get("/recipients/options", headers=auth_headers(admin)).json()
    assert [(o["name"], o["type"]) for o in options] == [("Admin", "user"), ("Bob", "user"), ("Platform", "guild")]


def test_quarterly_reflection(client, make_profile):
    alice = make_profile("Alice")
    headers = auth_headers(alice)
    assert client.get("/quarterly/latest", headers=headers).status_code == 404

    payload = {
        "quarter_start": "2025-01-01",
        "quarter_end": "2025-03-31",
        "achievement_rate": 80,
        "actions": [
            {"action_text": "No deadline"},
            {"action_text": "Later", "deadline": "2025-06-30"},
            {"action_text": "Sooner", "deadline": "2025-04-15"},
            {"action_text": "Latest", "deadline": "2025-09-30"},
        ],
    }
    created = client.post("/quarterly", json=payload, headers=headers)
    assert created.status_code == 200
    assert [a["action_text"] for a in created.json()["actions"]] == ["Sooner", "Later", "Latest"]

    latest = client.get("/quarterly/latest", headers=headers).json()
    assert latest["achievement_rate"] == 80
    assert [a["action_text"] for a in latest["actions"]] == ["Sooner", "Later", "Latest"]

    dashboard = client.get("/dashboard", headers=headers).json()
    assert dashboard["quarterly_summary"]["id"] == latest["id"]


def test_quarter_end_before_start(client, make_profile):
    alice = make_profile("Alice")
    response = client.post(
        "/quarterly",
        json={"quarter_start": "2025-04-01", "quarter_end": "2025-03-31"},
        headers=auth_headers(alice),
    )
    assert response.status_code == 422
