# app/models/cart.py
from __future__ import annotations
from dataclasses import dataclass, asdict, field
from typing import List, Dict, Any, Optional


@dataclass
class CartItem:
    """
    One client-submitted cart line. Everything here comes straight from the
    browser: `price` and `quantity` are kept raw and only interpreted by the
    checkout builder.
    """
    id: Optional[str] = None
    name: Optional[str] = None
    title: Optional[str] = None
    price: Any = None
    quantity: Any = None
    image_url: Optional[str] = None

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "CartItem":
        if d is None:
            raise ValueError("Cannot construct CartItem from None")
        raw_id = d.get("id")
        # 0 is a usable id, "" and None are not
        item_id = None if raw_id is None or raw_id == "" else str(raw_id)
        return cls(
            id=item_id,
            name=d.get("name") or None,
            title=d.get("title") or None,
            price=d.get("price"),
            quantity=d.get("quantity"),
            image_url=d.get("image_url") or None,
        )


@dataclass
class LineItem:
    """Normalized, price-authoritative line submitted to the payment session."""
    name: str
    unit_amount: int  # minor currency units (cents)
    quantity: int = 1
    images: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class CheckoutSession:
    url: str
    id: str

    def to_dict(self) -> Dict[str, Any]:
        return {"url": self.url, "id": self.id}
