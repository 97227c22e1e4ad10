# app/api/routes/downloads.py
import logging
from urllib.parse import quote

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response

from app.api.deps import get_db, get_storage
from app.api.schemas.product import DownloadLink
from app.config import Settings, get_settings
from app.database import FileBackedDB
from app.models.product import Product
from app.services.storage import ObjectStorage, StorageError, StorageNotFound

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["downloads"])


def get_downloadable_product(product_id: str, db: FileBackedDB) -> Product:
    """Product with a stored file, or 404."""
    row = db.get_record("products", "id", product_id)
    product = Product.from_dict(row) if row else None
    if product is None or not product.file_path:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


@router.get("/download-link/{product_id}", response_model=DownloadLink)
def get_download_link(
    product_id: str,
    db: FileBackedDB = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
    settings: Settings = Depends(get_settings),
):
    """Time-limited signed URL for the product's file."""
    product = get_downloadable_product(product_id, db)
    expires_in = settings.DOWNLOAD_LINK_EXPIRES_SECONDS
    try:
        url = storage.signed_url(settings.PRODUCTS_BUCKET, product.file_path, expires_in=expires_in)
    except StorageError as e:
        logger.error("Signed URL failed for %s: %s", product_id, e)
        raise HTTPException(status_code=500, detail="Failed to generate download link")
    return {"url": url, "expires_in": expires_in}


@router.get("/download-product/{product_id}")
def download_product(
    product_id: str,
    db: FileBackedDB = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
    settings: Settings = Depends(get_settings),
):
    """Stream the product file back as an attachment named after the product."""
    product = get_downloadable_product(product_id, db)
    try:
        contents = storage.download(settings.PRODUCTS_BUCKET, product.file_path)
    except StorageNotFound:
        raise HTTPException(status_code=404, detail="Product file not found")
    except StorageError as e:
        logger.error("Download error for %s: %s", product_id, e)
        raise HTTPException(status_code=500, detail="Failed to download product")

    return Response(
        content=contents,
        media_type="application/octet-stream",
        headers={"Content-Disposition": content_disposition(product.download_name())},
    )


def content_disposition(filename: str) -> str:
    filename = filename.replace('"', "")
    ascii_name = filename.encode("ascii", "ignore").decode("ascii") or "download"
    if ascii_name == filename:
        return f'attachment; filename="{filename}"'
    # non-ASCII titles: RFC 6266 extended parameter, plain fallback for old clients
    return f"attachment; filename=\"{ascii_name}\"; filename*=UTF-8''{quote(filename)}"
