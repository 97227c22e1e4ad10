import re
from datetime import datetime, timedelta

from app.core.security import verify_password
from app.services.tokens import ResetTokenStore


def register(client, email="reader@example.com", password="secret123"):
    r = client.post("/api/auth/register", json={"email": email, "password": password, "full_name": "Reader"})
    assert r.status_code == 200, r.text
    return r.json()


def reset_token_from(mail):
    m = re.search(r"https://shop\.test/reset-password\?token=([A-Za-z0-9_\-]+)", mail["html"])
    assert m, mail["html"]
    return m.group(1)


def test_register_hides_password_hash(client, db):
    user = register(client)
    assert user["email"] == "reader@example.com"
    assert "password_hash" not in user
    row = db.get_record("users", "id", user["id"])
    assert verify_password("secret123", row["password_hash"])


def test_register_rejects_duplicate_email(client):
    register(client)
    r = client.post("/api/auth/register", json={"email": "Reader@Example.com", "password": "another1"})
    assert r.status_code == 400


def test_forgot_and_reset_password(client, mailer, db):
    user = register(client)
    r = client.post("/api/auth/forgot-password", json={"email": "reader@example.com"})
    assert r.status_code == 200, r.text

    assert len(mailer.sent) == 1
    assert mailer.sent[0]["to"] == "reader@example.com"
    assert "30 minutes" in mailer.sent[0]["html"]
    token = reset_token_from(mailer.sent[0])

    r = client.post("/api/auth/reset-password", json={"token": token, "new_password": "brand-new-pw"})
    assert r.status_code == 200, r.text
    row = db.get_record("users", "id", user["id"])
    assert verify_password("brand-new-pw", row["password_hash"])

    # single use
    r = client.post("/api/auth/reset-password", json={"token": token, "new_password": "third-pw-1"})
    assert r.status_code == 400


def test_forgot_password_unknown_email_looks_the_same(client, mailer):
    register(client)
    known = client.post("/api/auth/forgot-password", json={"email": "reader@example.com"}).json()
    unknown = client.post("/api/auth/forgot-password", json={"email": "ghost@example.com"})
    assert unknown.status_code == 200
    assert unknown.json() == known
    assert len(mailer.sent) == 1


def test_reset_with_unknown_token(client):
    r = client.post("/api/auth/reset-password", json={"token": "made-up", "new_password": "whatever1"})
    assert r.status_code == 400
    assert r.json()["detail"] == "Invalid or expired token"


def test_reset_password_length_is_validated(client):
    r = client.post("/api/auth/reset-password", json={"token": "t", "new_password": "123"})
    assert r.status_code == 422


def test_expired_token_is_rejected_and_removed(client, db):
    user = register(client)
    token = ResetTokenStore(db, expire_minutes=-5).issue(user["id"])
    r = client.post("/api/auth/reset-password", json={"token": token, "new_password": "brand-new-pw"})
    assert r.status_code == 400
    assert db.list_records("reset_tokens") == []


def test_token_store_only_persists_digests(db):
    store = ResetTokenStore(db, expire_minutes=30)
    token = store.issue("u1")
    rows = db.list_records("reset_tokens")
    assert len(rows) == 1
    assert token not in rows[0].values()
    assert datetime.fromisoformat(rows[0]["expires_at"]) > datetime.utcnow() + timedelta(minutes=29)

    assert store.consume(token) == "u1"
    assert store.consume(token) is None
    assert store.consume("") is None
