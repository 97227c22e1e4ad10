# app/main.py
from fastapi import FastAPI
import logging
from contextlib import asynccontextmanager

from app.config import settings
from app.database import db
from app.api.routes import auth as auth_routes
from app.api.routes import checkout as checkout_routes
from app.api.routes import downloads as download_routes
from app.api.routes import products as product_routes
from app.api.routes import receipts as receipt_routes
from app.api.routes import uploads as upload_routes
from app.middleware.cors_config import configure_cors
from app.middleware.security_headers import add_security_headers


logger = logging.getLogger("uvicorn.error")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context: report missing configuration before the app starts serving.
    """
    logger.info("Data directory: %s", db.data_dir)
    if not settings.STRIPE_SECRET_KEY:
        logger.error("STRIPE_SECRET_KEY is missing!")
    if not settings.STORAGE_ENDPOINT_URL:
        logger.warning("STORAGE_ENDPOINT_URL is not set; boto3 will use the default AWS endpoint")
    if not settings.BREVO_API_KEY:
        logger.warning("BREVO_API_KEY is not set; receipt and reset emails will not be sent")
    if not settings.ALLOW_CLIENT_PRICE_FALLBACK:
        logger.info("Client price fallback disabled: checkout fails when catalog prices are unavailable")

    yield
    logger.info("Shutting down Storefront API")


app = FastAPI(title="Storefront API", version="0.1.0", lifespan=lifespan)
configure_cors(app)
add_security_headers(app)

app.include_router(checkout_routes.router)
app.include_router(upload_routes.router)
app.include_router(product_routes.router)
app.include_router(download_routes.router)
app.include_router(receipt_routes.router)
app.include_router(auth_routes.router)


@app.get("/", tags=["root"])
async def root():
    return {"status": "ok", "service": "Storefront API"}
