# tests/conftest.py
import io
import os
import sys
import tempfile
from typing import Dict, List, Optional, Tuple

import pytest
from PIL import Image
from fastapi.testclient import TestClient

# ensure project root is importable
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

# point settings at a throwaway data dir before anything under app/ is imported
os.environ.setdefault("DATA_DIR", tempfile.mkdtemp(prefix="test_data_"))

from app import database as app_database  # noqa: E402
from app.api import deps  # noqa: E402
from app.config import settings  # noqa: E402
from app.main import app  # noqa: E402
from app.models.cart import CheckoutSession  # noqa: E402
from app.services.email_service import Mailer  # noqa: E402
from app.services.payment import PaymentError  # noqa: E402
from app.services.pricing import PriceLookupError  # noqa: E402
from app.services.storage import ObjectExists, StorageError, StorageNotFound  # noqa: E402

ADMIN_KEY = "test-admin-key"


class FakePaymentService:
    def __init__(self):
        self.calls: List[dict] = []
        self.fail = False

    def create_session(self, line_items, customer_email, success_url, cancel_url):
        self.calls.append(
            {
                "line_items": list(line_items),
                "customer_email": customer_email,
                "success_url": success_url,
                "cancel_url": cancel_url,
            }
        )
        if self.fail:
            raise PaymentError("card network unavailable")
        return CheckoutSession(url="https://checkout.stripe.test/c/pay/cs_test_123", id="cs_test_123")


class FakePriceStore:
    def __init__(self, prices=None):
        self.prices = dict(prices or {})
        self.calls: List[set] = []
        self.fail = False

    def fetch_prices(self, ids):
        ids = set(ids)
        self.calls.append(ids)
        if self.fail:
            raise PriceLookupError("catalog unreachable")
        return {k: v for k, v in self.prices.items() if k in ids}


class FakeStorage:
    def __init__(self, public_base="https://cdn.test"):
        self.public_base = public_base
        self.objects: Dict[Tuple[str, str], Tuple[bytes, Optional[str]]] = {}
        self.fail = False

    def exists(self, bucket, key):
        return (bucket, key) in self.objects

    def upload(self, bucket, key, data, content_type=None):
        if self.fail:
            raise StorageError("bucket unavailable")
        if self.exists(bucket, key):
            raise ObjectExists(f"Object already exists: {bucket}/{key}")
        self.objects[(bucket, key)] = (data, content_type)
        return key

    def download(self, bucket, key):
        if self.fail:
            raise StorageError("bucket unavailable")
        if (bucket, key) not in self.objects:
            raise StorageNotFound(f"File not found: {bucket}/{key}")
        return self.objects[(bucket, key)][0]

    def public_url(self, bucket, key):
        return f"{self.public_base}/{bucket}/{key}"

    def signed_url(self, bucket, key, expires_in=3600):
        if self.fail:
            raise StorageError("signing failed")
        return f"https://storage.test/{bucket}/{key}?expires={expires_in}"


class FakeMailer(Mailer):
    """Real template rendering, recorded delivery."""

    def __init__(self):
        super().__init__(api_key="test", sender_email="shop@example.com", sender_name="Test Shop")
        self.sent: List[dict] = []
        self.result = True

    def send(self, to, subject, html):
        self.sent.append({"to": to, "subject": subject, "html": html})
        return self.result


@pytest.fixture(autouse=True)
def data_dir(tmp_path, monkeypatch):
    """
    Every test gets an empty record store under its own tmp_path.
    """
    monkeypatch.setattr(app_database.db, "data_dir", tmp_path)
    return tmp_path


@pytest.fixture
def db():
    return app_database.db


@pytest.fixture(autouse=True)
def storefront_settings(monkeypatch):
    monkeypatch.setattr(settings, "FRONTEND_URL", "https://shop.test")
    monkeypatch.setattr(settings, "ADMIN_API_KEY", ADMIN_KEY)
    monkeypatch.setattr(settings, "ALLOW_CLIENT_PRICE_FALLBACK", True)
    monkeypatch.setattr(settings, "STORE_NAME", "Test Shop")
    return settings


@pytest.fixture
def payment_service():
    return FakePaymentService()


@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture
def mailer():
    return FakeMailer()


@pytest.fixture
def client(payment_service, storage, mailer):
    app.dependency_overrides[deps.get_payment_service] = lambda: payment_service
    app.dependency_overrides[deps.get_storage] = lambda: storage
    app.dependency_overrides[deps.get_mailer] = lambda: mailer
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def admin_header():
    return {"X-Admin-Key": ADMIN_KEY}


@pytest.fixture
def seed_product(db):
    """
    Insert a catalog row directly.
    Usage: row = seed_product(id="p1", title="Widget", price="19.99", file_path="p1/file.zip")
    """
    def _fn(id=None, title="Widget", price="19.99", file_path="", description="", image_url=""):
        data = {
            "title": title,
            "description": description,
            "price": price,
            "file_path": file_path,
            "image_url": image_url,
            "created_at": "",
        }
        if id is not None:
            data["id"] = id
        return db.create_record("products", data, id_field="id")
    return _fn


@pytest.fixture
def make_sample_jpeg_bytes():
    """
    Return a callable that generates JPEG bytes for tests that need image uploads.
    Usage: jpg = make_sample_jpeg_bytes(size=(200,200))
    """
    def _fn(size=(200, 200), color=(180, 120, 60)):
        bio = io.BytesIO()
        im = Image.new("RGB", size, color)
        im.save(bio, format="JPEG", quality=85)
        bio.seek(0)
        return bio.read()
    return _fn
