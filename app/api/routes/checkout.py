# app/api/routes/checkout.py
import logging

from fastapi import APIRouter, Depends, HTTPException, status

from app.api.deps import get_checkout_builder
from app.api.schemas.checkout import CheckoutRequest, CheckoutResponse
from app.models.cart import CartItem
from app.services.checkout import CheckoutBuilder, CheckoutSessionError, InvalidPriceError
from app.services.pricing import PriceLookupError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["checkout"])


@router.post("/create-checkout-session", response_model=CheckoutResponse)
def create_checkout_session(payload: CheckoutRequest, builder: CheckoutBuilder = Depends(get_checkout_builder)):
    """
    Create a hosted checkout session for the posted cart.

    Payload: { "items" | "cartItems" | "cart": [ {id?, name?, title?, price?, quantity?, image_url?}, ... ],
               "email": "<buyer email>" }
    Returns: { "url": <redirect url>, "id": <session id> }
    """
    incoming = payload.cart_items()
    if not incoming:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Cart is empty")

    items = [CartItem.from_dict(it.model_dump()) for it in incoming]
    try:
        session = builder.create_session(items, email=payload.email)
    except InvalidPriceError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except PriceLookupError as e:
        logger.error("Checkout aborted, catalog prices unavailable: %s", e)
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Product prices are unavailable")
    except CheckoutSessionError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))
    return session.to_dict()
