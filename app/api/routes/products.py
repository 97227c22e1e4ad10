# app/api/routes/products.py
import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile, status

from app.api.deps import get_db, get_storage, require_admin
from app.api.schemas.product import ProductCreate, ProductOut
from app.config import Settings, get_settings
from app.database import FileBackedDB
from app.models.product import Product
from app.services.storage import ObjectStorage, StorageError
from app.utils.images import safe_file_name

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/products", tags=["products"])


def _row_to_product_out(row: dict) -> ProductOut:
    product = Product.from_dict(row)
    return ProductOut(
        id=product.id or "",
        title=product.title,
        description=product.description or "",
        price=product.price,
        image_url=product.image_url,
        has_file=bool(product.file_path),
        created_at=row.get("created_at") or None,
    )


@router.get("/", response_model=List[ProductOut])
def list_products(
    q: Optional[str] = Query(None, description="search query (title)"),
    limit: int = 100,
    offset: int = 0,
    db: FileBackedDB = Depends(get_db),
):
    """
    List products. Supports optional title substring search via `q`.
    """
    results = []
    for r in db.list_records("products"):
        title = str(r.get("title") or "")
        if q and q.lower() not in title.lower():
            continue
        results.append(_row_to_product_out(r))
    return results[offset : offset + limit]


@router.get("/{product_id}", response_model=ProductOut)
def get_product(product_id: str, db: FileBackedDB = Depends(get_db)):
    row = db.get_record("products", "id", product_id)
    if not row:
        raise HTTPException(status_code=404, detail="Product not found")
    return _row_to_product_out(row)


@router.post("/", response_model=ProductOut, dependencies=[Depends(require_admin)])
def create_product(payload: ProductCreate, db: FileBackedDB = Depends(get_db)):
    product = Product(
        title=payload.title,
        description=payload.description or "",
        price=payload.price,
        image_url=payload.image_url,
        created_at=datetime.utcnow(),
    )
    data = product.to_dict()
    data.pop("id", None)
    saved = db.create_record("products", data, id_field="id")
    return _row_to_product_out(saved)


@router.post("/{product_id}/file", response_model=ProductOut, dependencies=[Depends(require_admin)])
def upload_product_file(
    product_id: str,
    file: UploadFile = File(...),
    db: FileBackedDB = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
    settings: Settings = Depends(get_settings),
):
    """
    Upload the purchasable file for a product into the private products bucket
    and record its key as the product's file_path.
    """
    row = db.get_record("products", "id", product_id)
    if not row:
        raise HTTPException(status_code=404, detail="Product not found")

    contents = file.file.read()
    if not contents:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No file uploaded")

    key = f"{product_id}/{safe_file_name(file.filename or 'file')}"
    try:
        storage.upload(settings.PRODUCTS_BUCKET, key, contents, content_type=file.content_type)
    except StorageError as e:
        logger.error("Product file upload failed for %s: %s", product_id, e)
        raise HTTPException(status_code=500, detail="File upload failed")

    updated = db.update_record("products", "id", product_id, {"file_path": key})
    if not updated:
        raise HTTPException(status_code=500, detail="Failed to update")
    return _row_to_product_out(updated)
