# module medicare.cart.views

"""Endpoints du panier (utilisateur connecté).
- GET /api/v1/cart, POST /api/v1/cart {"medicine_id", "quantity"}
- PATCH /api/v1/cart/{medicine_id} {"quantity"}, DELETE /api/v1/cart/{medicine_id}, DELETE /api/v1/cart
- POST /api/v1/cart/checkout: ouvre la session Stripe pour le contenu du panier
"""
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request

from medicare.cart import service as cart_service
from medicare.medicines.sources import MedicineDataSource, get_medicine_source
from medicare.utils.errors import CheckoutValidationError
from medicare.utils.rate_limit import optional_rate_limit
from medicare.utils.responses import ok
from medicare.utils.security import require_user

router = APIRouter(prefix="/api/v1/cart", tags=["Cart API"])

async def _json_body(request: Request) -> Dict[str, Any]:
    try:
        body = await request.json()
    except Exception:
        body = None
    if not isinstance(body, dict):
        raise CheckoutValidationError("Invalid JSON body")
    return body


@router.get("")
def get_cart(user: dict = Depends(require_user), source: MedicineDataSource = Depends(get_medicine_source)):
    return ok(cart_service.list_cart(user, source))


@router.post("")
async def add_to_cart(request: Request, user: dict = Depends(require_user), source: MedicineDataSource = Depends(get_medicine_source)):
    body = await _json_body(request)
    medicine_id = str(body.get("medicine_id") or "").strip()
    if not medicine_id:
        raise CheckoutValidationError("medicine_id is required")
    return ok(cart_service.add_item(user, medicine_id, body.get("quantity", 1), source))


@router.delete("")
def clear_cart(user: dict = Depends(require_user)):
    cart_service.clear(user)
    return ok(None)


@router.post("/checkout", dependencies=[Depends(optional_rate_limit(times=10, seconds=60))])
async def checkout_cart(request: Request, user: dict = Depends(require_user), source: MedicineDataSource = Depends(get_medicine_source)):
    """Corps facultatif: {"currency"?, "payment_method_types"?, "shipping_address"?}."""
    try:
        body = await request.json()
    except Exception:
        body = {}
    body = body if isinstance(body, dict) else {}
    result = cart_service.checkout(
        user,
        source,
        currency=body.get("currency"),
        payment_method_types=body.get("payment_method_types"),
        shipping_address=body.get("shipping_address"),
        origin=request.headers.get("origin"),
    )
    return ok(result)


@router.patch("/{medicine_id}")
async def update_cart_item(medicine_id: str, request: Request, user: dict = Depends(require_user)):
    body = await _json_body(request)
    return ok(cart_service.set_quantity(user, medicine_id, body.get("quantity")))


@router.delete("/{medicine_id}")
def remove_cart_item(medicine_id: str, user: dict = Depends(require_user)):
    cart_service.remove_item(user, medicine_id)
    return ok(None)
