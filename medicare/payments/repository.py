"""
Accès aux données pour la feature 'payments' (table orders, client service-role).

Les écritures du flux de paiement lèvent PersistenceError en cas d'échec:
le service doit pouvoir interrompre le checkout avant tout appel Stripe.
"""
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
import logging

import medicare.infra.supabase_client as supabase_client
from medicare.orders.models import ORDERS_TABLE, ORDER_COLUMNS, OrderStatus
from medicare.utils.errors import PersistenceError

logger = logging.getLogger(__name__)

def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()

# module medicare.payments.repository
def insert_pending_order(
    *,
    user_id: Optional[str],
    items: List[Dict[str, Any]],
    total_amount: int,
    currency: str,
    shipping_address: Optional[str],
) -> Dict[str, Any]:
    """
    Insère une commande 'pending' et retourne la ligne créée (avec son id généré).
    """
    payload = {
        "user_id": user_id,
        "items": items,
        "total_amount": total_amount,
        "currency": currency,
        "status": OrderStatus.PENDING.value,
        "shipping_address": shipping_address or None,
    }
    try:
        res = supabase_client.get_service_supabase().table(ORDERS_TABLE).insert(payload).execute()
    except Exception as e:
        logger.exception("payments.repository.insert_pending_order failed user_id=%s", user_id)
        raise PersistenceError(f"Failed to create order: {e}")
    rows = res.data or []
    if not rows or not rows[0].get("id"):
        raise PersistenceError("Failed to create order: no row returned")
    return rows[0]

def attach_session(order_id: str, *, session_id: str, payment_intent_id: Optional[str]) -> None:
    """Stocke l'identifiant de session Stripe (et le payment_intent si connu) sur la commande."""
    values: Dict[str, Any] = {"stripe_session_id": session_id, "updated_at": _now_iso()}
    if payment_intent_id:
        values["stripe_payment_intent_id"] = payment_intent_id
    try:
        (
            supabase_client.get_service_supabase()
            .table(ORDERS_TABLE)
            .update(values)
            .eq("id", order_id)
            .execute()
        )
    except Exception as e:
        logger.exception("payments.repository.attach_session failed order_id=%s session_id=%s", order_id, session_id)
        raise PersistenceError(f"Failed to attach payment session to order: {e}")

def find_order_by_session_id(session_id: str) -> Optional[Dict[str, Any]]:
    """Retourne la commande liée à la session Stripe, None si aucune."""
    try:
        res = (
            supabase_client.get_service_supabase()
            .table(ORDERS_TABLE)
            .select(ORDER_COLUMNS)
            .eq("stripe_session_id", session_id)
            .limit(1)
            .execute()
        )
    except Exception as e:
        logger.exception("payments.repository.find_order_by_session_id failed session_id=%s", session_id)
        raise PersistenceError(f"Failed to fetch order: {e}")
    rows = res.data or []
    return rows[0] if rows else None

def complete_order_if_pending(
    order_id: str,
    *,
    customer_email: Optional[str],
    customer_name: Optional[str],
    payment_intent_id: Optional[str],
) -> bool:
    """
    Passe la commande de 'pending' à 'completed' en une seule écriture conditionnelle
    (UPDATE ... WHERE id = :id AND status = 'pending').
    Retour: True si une ligne a été modifiée par cet appel, False sinon.
    """
    now = _now_iso()
    values: Dict[str, Any] = {
        "status": OrderStatus.COMPLETED.value,
        "completed_at": now,
        "updated_at": now,
        "customer_email": customer_email,
        "customer_name": customer_name,
    }
    if payment_intent_id:
        values["stripe_payment_intent_id"] = payment_intent_id
    try:
        res = (
            supabase_client.get_service_supabase()
            .table(ORDERS_TABLE)
            .update(values)
            .eq("id", order_id)
            .eq("status", OrderStatus.PENDING.value)
            .execute()
        )
    except Exception as e:
        logger.exception("payments.repository.complete_order_if_pending failed order_id=%s", order_id)
        raise PersistenceError(f"Failed to update order: {e}")
    return bool(res.data)

def get_order_status(order_id: str) -> Optional[str]:
    """Relit le statut courant (utilisé après une écriture conditionnelle sans effet); None si la ligne a disparu."""
    try:
        res = (
            supabase_client.get_service_supabase()
            .table(ORDERS_TABLE)
            .select("id, status")
            .eq("id", order_id)
            .limit(1)
            .execute()
        )
    except Exception as e:
        logger.exception("payments.repository.get_order_status failed order_id=%s", order_id)
        raise PersistenceError(f"Failed to fetch order: {e}")
    rows = res.data or []
    return rows[0].get("status") if rows else None
