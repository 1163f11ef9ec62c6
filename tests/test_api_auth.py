import re
import smtplib

from conftest import RecordingSMTP, auth_headers
from timebank.config import settings


def code_from(msg) -> str:
    return re.search(r"\b(\d{6})\b", msg.get_content()).group(1)


def sign_in(client, outbox, email):
    client.post("/auth/otp", json={"email": email})
    return client.post("/auth/verify", json={"email": email, "code": code_from(outbox[-1])})


def test_login_code_is_emailed(client, make_profile, outbox):
    alice = make_profile("Alice")
    response = client.post("/auth/otp", json={"email": alice.email})
    assert response.status_code == 200
    assert len(outbox) == 1
    assert outbox[0]["To"] == alice.email
    assert outbox[0]["From"] == "timebank@example.com"
    assert re.fullmatch(r"\d{6}", code_from(outbox[0]))


def test_code_exchange_issues_tokens(client, make_profile, outbox):
    alice = make_profile("Alice")
    response = sign_in(client, outbox, alice.email)
    assert response.status_code == 200
    body = response.json()
    assert body["token_type"] == "bearer"
    assert body["user"]["id"] == alice.id

    me = client.get("/auth/me", headers={"Authorization": f"Bearer {body['access_token']}"})
    assert me.json()["display_name"] == "Alice"


def test_codes_are_single_use(client, make_profile, outbox):
    alice = make_profile("Alice")
    assert sign_in(client, outbox, alice.email).status_code == 200
    reused = client.post("/auth/verify", json={"email": alice.email, "code": code_from(outbox[-1])})
    assert reused.status_code == 401


def test_wrong_code(client, make_profile, outbox):
    alice = make_profile("Alice")
    client.post("/auth/otp", json={"email": alice.email})
    wrong = "000000" if code_from(outbox[-1]) != "000000" else "111111"
    assert client.post("/auth/verify", json={"email": alice.email, "code": wrong}).status_code == 401


def test_uninvited_address_gets_the_same_answer(client, make_profile, outbox):
    make_profile("Alice")
    known = client.post("/auth/otp", json={"email": "alice@example.com"}).json()
    unknown = client.post("/auth/otp", json={"email": "stranger@example.com"}).json()
    assert known == unknown
    assert [msg["To"] for msg in outbox] == ["alice@example.com"]


def test_without_smtp_no_code_is_issued(client, make_profile, monkeypatch):
    monkeypatch.setattr(settings, "SMTP_HOST", None)
    alice = make_profile("Alice")
    response = client.post("/auth/otp", json={"email": alice.email})
    assert response.status_code == 503
    assert "SMTP_HOST" in response.json()["error"]

    status = client.get("/integrations", headers=auth_headers(alice)).json()
    email = next(s for s in status if s["name"] == "email")
    assert email["configured"] is False


def test_failed_delivery_is_reported(client, make_profile, outbox, monkeypatch):
    def refuse(self, msg):
        raise smtplib.SMTPRecipientsRefused({msg["To"]: (550, b"no such user")})

    monkeypatch.setattr(RecordingSMTP, "send_message", refuse)
    alice = make_profile("Alice")
    response = client.post("/auth/otp", json={"email": alice.email})
    assert response.status_code == 502
    assert response.json()["success"] is False


def test_inactive_profiles_are_refused(client, make_profile):
    revoked = make_profile("Revoked", active=False)
    response = client.get("/entries", headers=auth_headers(revoked))
    assert response.status_code == 403
    assert response.json()["error"] == "not_invited"


def test_revoked_address_cannot_exchange_a_code(client, make_profile, outbox):
    admin = make_profile("Admin", role="admin")
    alice = make_profile("Alice")
    client.post("/auth/otp", json={"email": alice.email})
    code = code_from(outbox[-1])
    client.patch(f"/profiles/{alice.id}", json={"active": False}, headers=auth_headers(admin))

    revoked = client.post("/auth/verify", json={"email": alice.email, "code": code})
    unknown = client.post("/auth/verify", json={"email": "stranger@example.com", "code": code})
    assert revoked.status_code == unknown.status_code == 401
    assert revoked.json() == unknown.json()


def test_refresh_and_logout(client, make_profile, outbox):
    alice = make_profile("Alice")
    tokens = sign_in(client, outbox, alice.email).json()

    # access tokens are not accepted as refresh tokens
    assert client.post("/auth/refresh", json={"refresh_token": tokens["access_token"]}).status_code == 401

    refreshed = client.post("/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
    assert refreshed.status_code == 200
    headers = {"Authorization": f"Bearer {refreshed.json()['access_token']}"}

    assert client.post("/auth/logout", headers=headers).status_code == 200
    assert client.get("/auth/me", headers=headers).status_code == 401
    assert client.post("/auth/refresh", json={"refresh_token": tokens["refresh_token"]}).status_code == 401


def test_garbage_token(client):
    response = client.get("/auth/me", headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == 401
