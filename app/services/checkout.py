# app/services/checkout.py
"""
Checkout line-item construction.

Turns a client cart into price-authoritative line items and asks the payment
service for a hosted checkout session:

    builder = CheckoutBuilder(price_store, payment_service, frontend_url="https://shop.example")
    session = builder.create_session(items, email="buyer@example.com")

Prices come from the catalog whenever the item carries a known id; the
client-supplied price is used only for items without an id, for ids the
catalog does not know, and (when allowed) when the catalog cannot be read.
Any line that resolves to a non-positive or non-numeric amount rejects the
whole cart; a partial session is never created.
"""
import logging
from decimal import Decimal, DecimalException, InvalidOperation, ROUND_HALF_UP
from typing import Any, Dict, List, Optional, Protocol, Sequence, Tuple
from urllib.parse import quote

from app.models.cart import CartItem, CheckoutSession, LineItem
from app.services.payment import PaymentError
from app.services.pricing import PriceLookupError, PriceStore

logger = logging.getLogger(__name__)

# quantities with more integer digits than this are treated as garbage
MAX_QUANTITY_DIGITS = 18

# Stripe substitutes the real session id into this placeholder on redirect
SESSION_ID_PLACEHOLDER = "{CHECKOUT_SESSION_ID}"


class CheckoutError(Exception):
    pass


class EmptyCartError(CheckoutError):
    def __init__(self):
        super().__init__("Cart is empty")


class InvalidPriceError(CheckoutError):
    def __init__(self, item_name: str):
        self.item_name = item_name
        super().__init__(f'Invalid price for item "{item_name}"')


class CheckoutSessionError(CheckoutError):
    pass


class PaymentSessionService(Protocol):
    def create_session(
        self,
        line_items: List[LineItem],
        customer_email: Optional[str],
        success_url: str,
        cancel_url: str,
    ) -> CheckoutSession:
        ...


def resolve_name(item: CartItem, index: int) -> str:
    return item.name or item.title or f"Item {index + 1}"


def resolve_quantity(raw: Any) -> int:
    """Positive whole quantities pass through; anything else becomes 1."""
    if isinstance(raw, bool) or raw is None:
        return 1
    try:
        qty = Decimal(str(raw).strip())
    except InvalidOperation:
        return 1
    if not qty.is_finite() or qty <= 0:
        return 1
    # "1e20000000" is a valid Decimal; int() on it would never finish
    if qty.adjusted() >= MAX_QUANTITY_DIGITS or qty != qty.to_integral_value():
        return 1
    return int(qty)


def to_decimal(raw: Any) -> Optional[Decimal]:
    """Coerce a client-supplied price to a Decimal; None when it is not a number."""
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, Decimal):
        return raw
    try:
        return Decimal(str(raw).strip())
    except InvalidOperation:
        return None


def to_minor_units(price: Optional[Decimal]) -> Optional[int]:
    """Major -> minor currency units, rounded half-up. None for non-finite or oversized input."""
    if price is None or not price.is_finite():
        return None
    try:
        return int((price * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    except DecimalException:
        # result needs more digits or a larger exponent than the decimal context allows
        return None


class CheckoutBuilder:
    def __init__(
        self,
        price_store: PriceStore,
        payment_service: PaymentSessionService,
        frontend_url: str,
        allow_client_price_fallback: bool = True,
    ):
        self.price_store = price_store
        self.payment_service = payment_service
        self.frontend_url = frontend_url.rstrip("/")
        self.allow_client_price_fallback = allow_client_price_fallback

    def _authoritative_prices(self, items: Sequence[CartItem]) -> Dict[str, Decimal]:
        ids = {it.id for it in items if it.id}
        if not ids:
            return {}
        try:
            return self.price_store.fetch_prices(ids)
        except PriceLookupError as e:
            if not self.allow_client_price_fallback:
                raise
            logger.warning("Price lookup failed, using client-supplied prices: %s", e)
            return {}

    def build_line_items(self, items: Sequence[CartItem]) -> List[LineItem]:
        if not items:
            raise EmptyCartError()

        price_by_id = self._authoritative_prices(items)

        line_items: List[LineItem] = []
        for idx, item in enumerate(items):
            name = resolve_name(item, idx)
            quantity = resolve_quantity(item.quantity)
            if item.id and item.id in price_by_id:
                price = price_by_id[item.id]
            else:
                price = to_decimal(item.price)
            unit_amount = to_minor_units(price)
            if unit_amount is None or unit_amount <= 0:
                raise InvalidPriceError(name)
            images = [item.image_url] if item.image_url else []
            line_items.append(LineItem(name=name, unit_amount=unit_amount, quantity=quantity, images=images))
        return line_items

    def redirect_urls(self, items: Sequence[CartItem], email: Optional[str]) -> Tuple[str, str]:
        first_id = items[0].id if items and items[0].id else ""
        # same escaping rules as JavaScript's encodeURIComponent
        encoded_email = quote(email or "", safe="!~*'()")
        success_url = (
            f"{self.frontend_url}/thank-you/{first_id}"
            f"?session_id={SESSION_ID_PLACEHOLDER}&email={encoded_email}"
        )
        cancel_url = f"{self.frontend_url}/cart"
        return success_url, cancel_url

    def create_session(self, items: Sequence[CartItem], email: Optional[str] = None) -> CheckoutSession:
        line_items = self.build_line_items(items)
        success_url, cancel_url = self.redirect_urls(items, email)
        try:
            return self.payment_service.create_session(
                line_items=line_items,
                customer_email=email or None,
                success_url=success_url,
                cancel_url=cancel_url,
            )
        except PaymentError as e:
            logger.error("Checkout session creation failed: %s", e)
            raise CheckoutSessionError("Failed to create checkout session") from e
