# module medicare.orders.views

"""Endpoints de l’user story Commandes (client connecté).
- GET /api/v1/orders: commandes de l'utilisateur
- GET /api/v1/orders/{order_id}: détail (propriétaire ou admin)
- POST /api/v1/orders/{order_id}/refresh: relance la vérification de paiement (« rafraîchir le statut »)
"""
from fastapi import APIRouter, Depends, Query
import logging

from medicare.utils.security import require_user
from medicare.utils.rate_limit import optional_rate_limit
from medicare.utils.responses import ok
from medicare.orders import service as orders_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/orders", tags=["Orders API"])


@router.get("")
def list_my_orders(limit: int = Query(default=50, ge=1, le=200), user: dict = Depends(require_user)):
    return ok(orders_service.list_user_orders(user["id"], limit=limit))


@router.get("/{order_id}")
def get_my_order(order_id: str, user: dict = Depends(require_user)):
    return ok(orders_service.get_order_for_user(order_id, user))


@router.post("/{order_id}/refresh", dependencies=[Depends(optional_rate_limit(times=30, seconds=60))])
def refresh_my_order(order_id: str, user: dict = Depends(require_user)):
    """Relit la session Stripe de la commande et la complète si le paiement est confirmé."""
    return ok(orders_service.refresh_order(order_id, user))
