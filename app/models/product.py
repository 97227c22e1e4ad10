# app/models/product.py
from __future__ import annotations
from dataclasses import dataclass, asdict
from typing import Optional, Dict, Any
from datetime import datetime
import os


@dataclass
class Product:
    """
    Digital product. CSV-backed store will usually store everything as strings,
    so these helpers convert to proper types. `file_path` is the object key of
    the purchasable file inside the products bucket.
    """
    id: Optional[str] = None
    title: str = ""
    description: Optional[str] = ""
    price: float = 0.0
    file_path: Optional[str] = None
    image_url: Optional[str] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Product":
        if d is None:
            raise ValueError("Cannot construct Product from None")
        id_val = d.get("id") or None
        price_raw = d.get("price", 0)
        try:
            price = float(price_raw) if price_raw not in (None, "") else 0.0
        except (TypeError, ValueError):
            price = 0.0

        file_path = (d.get("file_path") or "").strip() or None

        created_at_raw = d.get("created_at")
        created_at = None
        if created_at_raw:
            if isinstance(created_at_raw, datetime):
                created_at = created_at_raw
            else:
                try:
                    created_at = datetime.fromisoformat(str(created_at_raw))
                except ValueError:
                    created_at = None

        return cls(
            id=id_val,
            title=str(d.get("title") or ""),
            description=str(d.get("description") or ""),
            price=price,
            file_path=file_path,
            image_url=d.get("image_url") or None,
            created_at=created_at,
        )

    def to_dict(self) -> Dict[str, Any]:
        out = asdict(self)
        if self.created_at and isinstance(self.created_at, datetime):
            out["created_at"] = self.created_at.isoformat(sep=" ")
        else:
            out["created_at"] = ""
        out["price"] = float(self.price) if self.price is not None else 0.0
        out["file_path"] = self.file_path or ""
        out["image_url"] = self.image_url or ""
        return out

    def download_name(self) -> str:
        """Attachment file name: product title (or id) plus the stored file's extension."""
        ext = os.path.splitext(self.file_path or "")[1]
        return f"{self.title or self.id}{ext}"
