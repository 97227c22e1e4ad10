from typing import Any, List, Optional, Union
from pydantic import BaseModel, Field


class CartItemIn(BaseModel):
    id: Optional[Union[str, int]] = None
    name: Optional[str] = None
    title: Optional[str] = None
    # untrusted; interpreted by the checkout builder
    price: Any = None
    quantity: Any = None
    image_url: Optional[str] = None


class CheckoutRequest(BaseModel):
    """Older storefront builds post the cart as `cartItems` or `cart` instead of `items`."""
    items: Optional[List[CartItemIn]] = None
    cartItems: Optional[List[CartItemIn]] = None
    cart: Optional[List[CartItemIn]] = None
    email: Optional[str] = None

    def cart_items(self) -> List[CartItemIn]:
        return self.items or self.cartItems or self.cart or []


class CheckoutResponse(BaseModel):
    url: str
    id: str


class ReceiptRequest(BaseModel):
    buyerEmail: Optional[str] = Field(None, description="Where to send the receipt")
    productId: Optional[str] = Field(None, description="Purchased product id")
