"""Couche service de l’user story Commandes.
Rôles:
- Lister/consulter les commandes (propriétaire ou admin).
- Rafraîchir le statut d'une commande via le vérificateur de paiement (action manuelle).
- Changer le statut selon la table des transitions autorisées (back-office).
- Réconcilier les commandes 'pending' anciennes (outil d'exploitation).
"""
from typing import Any, Dict, List, Optional
import logging

from medicare.orders import repository
from medicare.orders.models import OrderStatus, parse_status, can_transition
from medicare.payments import service as payments_service
from medicare.payments import stripe_client
from medicare.utils.errors import (
    CheckoutValidationError,
    InvalidTransitionError,
    NotFoundError,
    PermissionDeniedError,
    StorefrontError,
)

logger = logging.getLogger(__name__)

# Statut Stripe d'une session Checkout abandonnée (plus aucun paiement possible)
SESSION_EXPIRED = "expired"

def list_user_orders(user_id: str, limit: int = 50) -> List[Dict[str, Any]]:
    return repository.fetch_user_orders(user_id, limit=limit)

def list_all_orders(limit: int = 100, status: Optional[str] = None) -> List[Dict[str, Any]]:
    if status:
        try:
            status = parse_status(status).value
        except ValueError:
            raise CheckoutValidationError(f"Unknown order status: {status}")
    return repository.fetch_all_orders(limit=limit, status=status)

def get_order_for_user(order_id: str, user: Dict[str, Any]) -> Dict[str, Any]:
    """Commande visible par son propriétaire ou par un admin (404 sinon, 403 si autre utilisateur)."""
    order = repository.get_order(order_id)
    if not order:
        raise NotFoundError("Order", order_id)
    if user.get("role") != "admin" and order.get("user_id") != user.get("id"):
        raise PermissionDeniedError("Order belongs to another user")
    return order

def refresh_order(order_id: str, user: Dict[str, Any]) -> Dict[str, Any]:
    """
    Relance la vérification de paiement sur la session stockée de la commande.
    - Commande sans session: renvoyée telle quelle avec verification = None
    """
    order = get_order_for_user(order_id, user)
    session_id = order.get("stripe_session_id")
    if not session_id:
        return {"order": order, "verification": None}
    verification = payments_service.verify_payment(session_id)
    return {"order": repository.get_order(order_id) or order, "verification": verification}

def change_status(order_id: str, target: str) -> Dict[str, Any]:
    """
    Applique une transition de statut autorisée (écriture conditionnée sur le statut lu).
    - 400 statut inconnu, 404 commande absente, 409 transition interdite ou ligne modifiée entre-temps
    """
    try:
        target_status = parse_status(target)
    except ValueError:
        raise CheckoutValidationError(f"Unknown order status: {target}")
    order = repository.get_order(order_id)
    if not order:
        raise NotFoundError("Order", order_id)
    current = parse_status(order.get("status"))
    if not can_transition(current, target_status):
        raise InvalidTransitionError(f"Cannot change order status from {current.value} to {target_status.value}")
    updated = repository.update_status_if(order_id, expected=current, target=target_status)
    if not updated:
        raise InvalidTransitionError("Order status changed concurrently, please retry")
    logger.info("orders.change_status order_id=%s %s -> %s", order_id, current.value, target_status.value)
    return updated

def _cancel_stale(order_id: str, counts: Dict[str, int]) -> None:
    updated = repository.update_status_if(order_id, expected=OrderStatus.PENDING, target=OrderStatus.CANCELLED)
    counts["cancelled" if updated else "unchanged"] += 1

def reconcile_stale_orders(older_than_minutes: int, limit: int = 100, dry_run: bool = False) -> Dict[str, int]:
    """
    Réconcilie les commandes 'pending' anciennes:
    - session Stripe payée: vérification du paiement (commande complétée)
    - session Stripe expirée (checkout abandonné): annulée (pending -> cancelled)
    - sans session (échec Stripe au checkout): annulée
    - session encore ouverte: inchangée, mais marquée vérifiée (updated_at) pour que le
      passage suivant traite d'abord les commandes jamais vérifiées
    Une erreur sur une commande est loggée et n'interrompt pas le lot.
    """
    counts = {"checked": 0, "completed": 0, "cancelled": 0, "unchanged": 0, "errors": 0}
    for order in repository.fetch_stale_pending_orders(older_than_minutes, limit=limit):
        counts["checked"] += 1
        order_id = str(order.get("id"))
        session_id = order.get("stripe_session_id")
        try:
            if not session_id:
                if dry_run:
                    counts["cancelled"] += 1
                else:
                    _cancel_stale(order_id, counts)
                continue
            if dry_run:
                counts["unchanged"] += 1
                continue
            session = stripe_client.get_session(session_id)
            if session.get("payment_status") == payments_service.PAID:
                result = payments_service.verify_payment(session_id)
                counts["completed" if result.get("orderUpdated") else "unchanged"] += 1
            elif session.get("status") == SESSION_EXPIRED:
                logger.info("orders.reconcile session expired order_id=%s session_id=%s", order_id, session_id)
                _cancel_stale(order_id, counts)
            else:
                repository.touch_pending_order(order_id)
                counts["unchanged"] += 1
        except StorefrontError as e:
            counts["errors"] += 1
            logger.error("orders.reconcile failed order_id=%s: %s", order_id, e.message)
    logger.info("orders.reconcile done %s", counts)
    return counts
