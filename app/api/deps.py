# app/api/deps.py
"""
Service providers for route handlers.

Each external collaborator is built once per process (lru_cache) and handed
to handlers through Depends(...). Tests replace any of them with
app.dependency_overrides.
"""
import secrets
from functools import lru_cache
from typing import Optional

from fastapi import Depends, Header, HTTPException, status

from app.config import Settings, get_settings
from app.database import db, FileBackedDB
from app.services.checkout import CheckoutBuilder
from app.services.email_service import Mailer
from app.services.payment import StripePaymentService
from app.services.pricing import CatalogPriceStore, PriceStore
from app.services.storage import ObjectStorage, make_s3_client
from app.services.tokens import ResetTokenStore


def get_db() -> FileBackedDB:
    """
    Dependency that returns the file-backed DB object.
    Usage:
        db = Depends(get_db)
    """
    return db


def get_price_store(db: FileBackedDB = Depends(get_db)) -> PriceStore:
    return CatalogPriceStore(db)


@lru_cache()
def _stripe_service() -> StripePaymentService:
    s = get_settings()
    return StripePaymentService(api_key=s.STRIPE_SECRET_KEY, currency=s.CURRENCY)


def get_payment_service() -> StripePaymentService:
    return _stripe_service()


@lru_cache()
def _object_storage() -> ObjectStorage:
    s = get_settings()
    client = make_s3_client(
        endpoint_url=s.STORAGE_ENDPOINT_URL,
        access_key_id=s.STORAGE_ACCESS_KEY_ID,
        secret_access_key=s.STORAGE_SECRET_ACCESS_KEY,
        region_name=s.STORAGE_REGION,
    )
    return ObjectStorage(client, public_base=s.STORAGE_PUBLIC_BASE)


def get_storage() -> ObjectStorage:
    return _object_storage()


@lru_cache()
def _mailer() -> Mailer:
    s = get_settings()
    return Mailer(api_key=s.BREVO_API_KEY, sender_email=s.MAIL_FROM, sender_name=s.STORE_NAME)


def get_mailer() -> Mailer:
    return _mailer()


def get_token_store(db: FileBackedDB = Depends(get_db), settings: Settings = Depends(get_settings)) -> ResetTokenStore:
    return ResetTokenStore(db, expire_minutes=settings.RESET_TOKEN_EXPIRE_MINUTES)


def get_checkout_builder(
    price_store: PriceStore = Depends(get_price_store),
    payment_service=Depends(get_payment_service),
    settings: Settings = Depends(get_settings),
) -> CheckoutBuilder:
    return CheckoutBuilder(
        price_store=price_store,
        payment_service=payment_service,
        frontend_url=settings.FRONTEND_URL,
        allow_client_price_fallback=settings.ALLOW_CLIENT_PRICE_FALLBACK,
    )


def require_admin(
    x_admin_key: Optional[str] = Header(None),
    settings: Settings = Depends(get_settings),
) -> None:
    """
    Dependency guarding catalog management. Raises 403 unless the X-Admin-Key
    header matches ADMIN_API_KEY (and always when no key is configured).
    """
    expected = settings.ADMIN_API_KEY
    if not expected or not x_admin_key or not secrets.compare_digest(x_admin_key, expected):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin privileges required")
