# app/config.py
from pydantic_settings import BaseSettings
from pydantic import ConfigDict
from pathlib import Path
from functools import lru_cache
from typing import Optional


class Settings(BaseSettings):
    ENV: str = "development"
    DATA_DIR: Path = Path("data")  # where CSV / XLSX files will live
    USERS_FILE: str = "users.csv"
    PRODUCTS_FILE: str = "products.csv"
    RESET_TOKENS_FILE: str = "reset_tokens.csv"

    # storefront (frontend) base address used for checkout redirects and reset links
    FRONTEND_URL: str = "https://pyxelane-frontend.onrender.com"
    CORS_ORIGINS: str = ""

    # payments
    STRIPE_SECRET_KEY: Optional[str] = None
    CURRENCY: str = "usd"
    # when the price lookup fails, price the cart from client-supplied values
    ALLOW_CLIENT_PRICE_FALLBACK: bool = True

    # S3-compatible object storage (R2 / Supabase S3 endpoint / AWS)
    STORAGE_ENDPOINT_URL: Optional[str] = None
    STORAGE_ACCESS_KEY_ID: Optional[str] = None
    STORAGE_SECRET_ACCESS_KEY: Optional[str] = None
    STORAGE_REGION: str = "auto"
    STORAGE_PUBLIC_BASE: str = ""
    PRODUCTS_BUCKET: str = "products-files"
    PROFILE_PICTURES_BUCKET: str = "profile-pictures"
    DOWNLOAD_LINK_EXPIRES_SECONDS: int = 60 * 60
    RECEIPT_LINK_EXPIRES_SECONDS: int = 60 * 60 * 24

    # mail (Brevo)
    BREVO_API_KEY: Optional[str] = None
    MAIL_FROM: str = "no-reply@example.com"
    STORE_NAME: str = "My Store"

    RESET_TOKEN_EXPIRE_MINUTES: int = 30

    # shared secret for the product management endpoints (X-Admin-Key header)
    ADMIN_API_KEY: Optional[str] = None

    # Example .env:
    # DATA_DIR=./data
    # STRIPE_SECRET_KEY=sk_test_...
    # STORAGE_ENDPOINT_URL=https://<account>.r2.cloudflarestorage.com

    model_config = ConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def frontend_base(self) -> str:
        return self.FRONTEND_URL.rstrip("/")

@lru_cache()
def get_settings() -> Settings:
    """Return cached Settings instance."""
    return Settings()

settings = get_settings()
