# app/api/routes/receipts.py
import logging
import math

from fastapi import APIRouter, Depends, HTTPException

from app.api.deps import get_db, get_mailer, get_storage
from app.api.routes.downloads import get_downloadable_product
from app.api.schemas.checkout import ReceiptRequest
from app.config import Settings, get_settings
from app.database import FileBackedDB
from app.services.email_service import Mailer
from app.services.storage import ObjectStorage, StorageError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["receipts"])


@router.post("/send-receipt")
def send_receipt(
    payload: ReceiptRequest,
    db: FileBackedDB = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
    mailer: Mailer = Depends(get_mailer),
    settings: Settings = Depends(get_settings),
):
    """
    Email the buyer a receipt containing a download link for the purchased product.
    The link stays valid for RECEIPT_LINK_EXPIRES_SECONDS (24 hours by default).
    """
    if not payload.buyerEmail or not payload.productId:
        raise HTTPException(status_code=400, detail="Missing email or productId")

    product = get_downloadable_product(payload.productId, db)

    expires_in = settings.RECEIPT_LINK_EXPIRES_SECONDS
    try:
        url = storage.signed_url(settings.PRODUCTS_BUCKET, product.file_path, expires_in=expires_in)
    except StorageError as e:
        logger.error("Signed URL failed for %s: %s", product.id, e)
        raise HTTPException(status_code=500, detail="Failed to generate download link")

    sent = mailer.send_receipt(
        to=payload.buyerEmail,
        product_title=product.title,
        price=product.price,
        download_url=url,
        link_hours=math.ceil(expires_in / 3600),
        store_name=settings.STORE_NAME,
    )
    if not sent:
        raise HTTPException(status_code=500, detail="Failed to send receipt email")
    return {"success": True, "message": "Email sent"}
