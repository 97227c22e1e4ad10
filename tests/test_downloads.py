import pytest


@pytest.fixture
def ebook(seed_product, storage):
    row = seed_product(id="p1", title="My Ebook", price="19.99", file_path="p1/1700-ebook.pdf")
    storage.objects[("products-files", "p1/1700-ebook.pdf")] = (b"%PDF-1.7 content", "application/pdf")
    return row


def test_download_link(client, ebook):
    r = client.get("/api/download-link/p1")
    assert r.status_code == 200, r.text
    assert r.json() == {"url": "https://storage.test/products-files/p1/1700-ebook.pdf?expires=3600", "expires_in": 3600}


def test_download_product_streams_attachment(client, ebook):
    r = client.get("/api/download-product/p1")
    assert r.status_code == 200, r.text
    assert r.content == b"%PDF-1.7 content"
    assert r.headers["content-type"] == "application/octet-stream"
    assert r.headers["content-disposition"] == 'attachment; filename="My Ebook.pdf"'


def test_download_non_ascii_title(client, seed_product, storage):
    seed_product(id="p2", title="Café Pack", price="3", file_path="p2/pack.zip")
    storage.objects[("products-files", "p2/pack.zip")] = (b"zip", None)
    r = client.get("/api/download-product/p2")
    assert r.status_code == 200
    assert r.headers["content-disposition"] == "attachment; filename=\"Caf Pack.zip\"; filename*=UTF-8''Caf%C3%A9%20Pack.zip"


def test_download_unknown_or_fileless_product(client, seed_product):
    seed_product(id="nofile", title="Sticker", price="1")
    assert client.get("/api/download-product/missing").status_code == 404
    assert client.get("/api/download-product/nofile").status_code == 404
    assert client.get("/api/download-link/nofile").status_code == 404


def test_download_missing_object(client, seed_product):
    seed_product(id="p3", title="Lost", price="1", file_path="p3/lost.zip")
    r = client.get("/api/download-product/p3")
    assert r.status_code == 404


def test_download_storage_failure(client, ebook, storage):
    storage.fail = True
    assert client.get("/api/download-product/p1").status_code == 500
    r = client.get("/api/download-link/p1")
    assert r.status_code == 500
    assert r.json()["detail"] == "Failed to generate download link"


def test_send_receipt(client, ebook, mailer):
    r = client.post("/api/send-receipt", json={"buyerEmail": "buyer@example.com", "productId": "p1"})
    assert r.status_code == 200, r.text
    assert r.json() == {"success": True, "message": "Email sent"}

    sent = mailer.sent[0]
    assert sent["to"] == "buyer@example.com"
    assert sent["subject"] == "Your Purchase Receipt & Download Link"
    assert "My Ebook" in sent["html"]
    assert "$19.99" in sent["html"]
    assert "https://storage.test/products-files/p1/1700-ebook.pdf?expires=86400" in sent["html"]
    assert "24 hours" in sent["html"]


def test_send_receipt_validation(client, ebook, mailer):
    assert client.post("/api/send-receipt", json={"productId": "p1"}).status_code == 400
    assert client.post("/api/send-receipt", json={"buyerEmail": "a@b.com"}).status_code == 400
    assert client.post("/api/send-receipt", json={"buyerEmail": "a@b.com", "productId": "zzz"}).status_code == 404
    assert mailer.sent == []


def test_send_receipt_mail_failure(client, ebook, mailer):
    mailer.result = False
    r = client.post("/api/send-receipt", json={"buyerEmail": "buyer@example.com", "productId": "p1"})
    assert r.status_code == 500
    assert r.json()["detail"] == "Failed to send receipt email"


def test_send_receipt_short_link_lifetime_rounds_up(client, ebook, mailer, storefront_settings, monkeypatch):
    monkeypatch.setattr(storefront_settings, "RECEIPT_LINK_EXPIRES_SECONDS", 1800)
    r = client.post("/api/send-receipt", json={"buyerEmail": "buyer@example.com", "productId": "p1"})
    assert r.status_code == 200, r.text

    html = mailer.sent[0]["html"]
    assert "?expires=1800" in html
    assert "expire in 1 hour." in html
    assert "0 hours" not in html
