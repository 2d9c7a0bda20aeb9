import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Request, Depends, Response

from medicare.utils.errors import CheckoutValidationError
from medicare.utils.rate_limit import optional_rate_limit
from medicare.utils.responses import ok
from medicare.utils.security import get_optional_user
from medicare.payments import service as payments_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/payments", tags=["Payments API"])

async def _json_body(request: Request) -> Dict[str, Any]:
    try:
        body = await request.json()
    except Exception:
        raise CheckoutValidationError("Invalid JSON body")
    if not isinstance(body, dict):
        raise CheckoutValidationError("Invalid JSON body")
    return body

# module medicare.payments.views
@router.options("/checkout", include_in_schema=False)
@router.options("/verify", include_in_schema=False)
def payments_preflight():
    return Response(status_code=200)

@router.post("/checkout", dependencies=[Depends(optional_rate_limit(times=10, seconds=60))])
async def create_checkout_session(request: Request, user: Optional[dict] = Depends(get_optional_user)):
    """
    Crée une commande 'pending' et une session Checkout Stripe (checkout invité autorisé).
    - Entrée JSON: {"items": [{"name", "price", "quantity", "image_url"?}], "currency"?,
      "payment_method_types"?, "shipping_address"?}
    - Identité: Bearer facultatif (user_id null sinon)
    - Réponse: {"code": "SUCCESS", "data": {"url", "sessionId", "orderId"}}
    - Erreurs: 400 panier invalide, 500 configuration/persistance, 502 Stripe
    """
    body = await _json_body(request)
    result = payments_service.create_checkout_session(
        items=body.get("items"),
        currency=body.get("currency"),
        payment_method_types=body.get("payment_method_types"),
        shipping_address=body.get("shipping_address"),
        user_id=(user or {}).get("id"),
        origin=request.headers.get("origin"),
    )
    return ok(result)

@router.post("/verify", dependencies=[Depends(optional_rate_limit(times=30, seconds=60))])
async def verify_payment(request: Request):
    """
    Vérifie le paiement d'une session Stripe et complète la commande au plus une fois.
    - Entrée JSON: {"sessionId": "cs_..."}
    - Réponse: {"verified", "status", "sessionId", ... , "orderUpdated"?}
    - Appels répétés sûrs (rafraîchissement de la page de succès)
    """
    body = await _json_body(request)
    result = payments_service.verify_payment(body.get("sessionId"))
    logger.info(
        "payments.verify session_id=%s verified=%s order_updated=%s",
        result.get("sessionId"), result.get("verified"), result.get("orderUpdated"),
    )
    return ok(result)
