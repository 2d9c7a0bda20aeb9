"""Couche d’accès aux données (Supabase) pour le domaine Commandes.
- Lectures « listing » tolérantes: en cas d'erreur, liste vide (UX non bloquée)
- Changements de statut: écriture conditionnée sur le statut courant (aucun read-then-write)
"""
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional
import logging

import medicare.infra.supabase_client as supabase_client
from medicare.orders.models import ORDERS_TABLE, ORDER_COLUMNS, OrderStatus
from medicare.utils.errors import PersistenceError

logger = logging.getLogger(__name__)

def fetch_user_orders(user_id: str, limit: int = 50) -> List[Dict[str, Any]]:
    """Commandes de l'utilisateur, plus récentes d'abord."""
    if not user_id:
        return []
    try:
        res = (
            supabase_client.get_service_supabase()
            .table(ORDERS_TABLE)
            .select(ORDER_COLUMNS)
            .eq("user_id", user_id)
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
        )
        return res.data or []
    except Exception:
        logger.exception("orders.repository.fetch_user_orders failed user_id=%s", user_id)
        return []

def fetch_all_orders(limit: int = 100, status: Optional[str] = None) -> List[Dict[str, Any]]:
    """Commandes pour l'admin (filtre de statut facultatif)."""
    try:
        query = supabase_client.get_service_supabase().table(ORDERS_TABLE).select(ORDER_COLUMNS)
        if status:
            query = query.eq("status", status)
        res = query.order("created_at", desc=True).limit(limit).execute()
        return res.data or []
    except Exception:
        logger.exception("orders.repository.fetch_all_orders failed status=%s", status)
        return []

def get_order(order_id: str) -> Optional[Dict[str, Any]]:
    try:
        res = (
            supabase_client.get_service_supabase()
            .table(ORDERS_TABLE)
            .select(ORDER_COLUMNS)
            .eq("id", order_id)
            .limit(1)
            .execute()
        )
    except Exception as e:
        logger.exception("orders.repository.get_order failed order_id=%s", order_id)
        raise PersistenceError(f"Failed to fetch order: {e}")
    rows = res.data or []
    return rows[0] if rows else None

def update_status_if(order_id: str, *, expected: OrderStatus, target: OrderStatus) -> Optional[Dict[str, Any]]:
    """
    UPDATE orders SET status = :target WHERE id = :id AND status = :expected.
    Le passage à 'completed' renseigne aussi completed_at.
    Retour: la ligne mise à jour, None si aucune ligne ne correspondait.
    """
    now = datetime.now(timezone.utc).isoformat()
    values: Dict[str, Any] = {
        "status": target.value,
        "updated_at": now,
    }
    if target is OrderStatus.COMPLETED:
        values["completed_at"] = now
    try:
        res = (
            supabase_client.get_service_supabase()
            .table(ORDERS_TABLE)
            .update(values)
            .eq("id", order_id)
            .eq("status", expected.value)
            .execute()
        )
    except Exception as e:
        logger.exception("orders.repository.update_status_if failed order_id=%s target=%s", order_id, target.value)
        raise PersistenceError(f"Failed to update order: {e}")
    rows = res.data or []
    return rows[0] if rows else None

def fetch_stale_pending_orders(older_than_minutes: int, limit: int = 100) -> List[Dict[str, Any]]:
    """
    Commandes 'pending' créées il y a plus de N minutes.
    Ordre: updated_at croissant (jamais vérifiées d'abord), pour que chaque passage
    avance sur le lot suivant au lieu de relire toujours les mêmes lignes.
    """
    cutoff = datetime.now(timezone.utc) - timedelta(minutes=older_than_minutes)
    try:
        res = (
            supabase_client.get_service_supabase()
            .table(ORDERS_TABLE)
            .select(ORDER_COLUMNS)
            .eq("status", OrderStatus.PENDING.value)
            .lt("created_at", cutoff.isoformat())
            .order("updated_at", desc=False, nullsfirst=True)
            .order("created_at", desc=False)
            .limit(limit)
            .execute()
        )
    except Exception as e:
        logger.exception("orders.repository.fetch_stale_pending_orders failed")
        raise PersistenceError(f"Failed to fetch pending orders: {e}")
    return res.data or []

def touch_pending_order(order_id: str) -> bool:
    """Marque une commande 'pending' comme vérifiée (updated_at = maintenant), sans changer son statut."""
    try:
        res = (
            supabase_client.get_service_supabase()
            .table(ORDERS_TABLE)
            .update({"updated_at": datetime.now(timezone.utc).isoformat()})
            .eq("id", order_id)
            .eq("status", OrderStatus.PENDING.value)
            .execute()
        )
    except Exception as e:
        logger.exception("orders.repository.touch_pending_order failed order_id=%s", order_id)
        raise PersistenceError(f"Failed to update order: {e}")
    return bool(res.data)
