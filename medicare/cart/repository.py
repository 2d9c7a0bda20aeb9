"""
Accès aux données du panier (table cart_items).
Toutes les opérations passent par le client utilisateur (token Bearer, RLS actif).
"""
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
import logging

import medicare.infra.supabase_client as supabase_client
from medicare.utils.errors import PersistenceError

logger = logging.getLogger(__name__)

CART_TABLE = "cart_items"

# module medicare.cart.repository
def list_cart_items(user_id: str, *, user_token: str) -> List[Dict[str, Any]]:
    try:
        res = (
            supabase_client.get_user_supabase(user_token)
            .table(CART_TABLE)
            .select("id, user_id, medicine_id, quantity, created_at, updated_at")
            .eq("user_id", user_id)
            .order("created_at", desc=True)
            .execute()
        )
    except Exception as e:
        logger.exception("cart.repository.list_cart_items failed user_id=%s", user_id)
        raise PersistenceError(f"Failed to load cart: {e}")
    return res.data or []

def get_cart_item(user_id: str, medicine_id: str, *, user_token: str) -> Optional[Dict[str, Any]]:
    try:
        res = (
            supabase_client.get_user_supabase(user_token)
            .table(CART_TABLE)
            .select("id, user_id, medicine_id, quantity")
            .eq("user_id", user_id)
            .eq("medicine_id", medicine_id)
            .limit(1)
            .execute()
        )
    except Exception as e:
        logger.exception("cart.repository.get_cart_item failed user_id=%s medicine_id=%s", user_id, medicine_id)
        raise PersistenceError(f"Failed to load cart item: {e}")
    rows = res.data or []
    return rows[0] if rows else None

def insert_cart_item(user_id: str, medicine_id: str, quantity: int, *, user_token: str) -> Dict[str, Any]:
    try:
        res = (
            supabase_client.get_user_supabase(user_token)
            .table(CART_TABLE)
            .insert({"user_id": user_id, "medicine_id": medicine_id, "quantity": quantity})
            .execute()
        )
    except Exception as e:
        logger.exception("cart.repository.insert_cart_item failed user_id=%s medicine_id=%s", user_id, medicine_id)
        raise PersistenceError(f"Failed to add to cart: {e}")
    rows = res.data or []
    return rows[0] if rows else {"user_id": user_id, "medicine_id": medicine_id, "quantity": quantity}

def update_cart_item_quantity(item_id: str, quantity: int, *, user_token: str) -> Optional[Dict[str, Any]]:
    try:
        res = (
            supabase_client.get_user_supabase(user_token)
            .table(CART_TABLE)
            .update({"quantity": quantity, "updated_at": datetime.now(timezone.utc).isoformat()})
            .eq("id", item_id)
            .execute()
        )
    except Exception as e:
        logger.exception("cart.repository.update_cart_item_quantity failed item_id=%s", item_id)
        raise PersistenceError(f"Failed to update cart: {e}")
    rows = res.data or []
    return rows[0] if rows else None

def delete_cart_item(user_id: str, medicine_id: str, *, user_token: str) -> None:
    try:
        (
            supabase_client.get_user_supabase(user_token)
            .table(CART_TABLE)
            .delete()
            .eq("user_id", user_id)
            .eq("medicine_id", medicine_id)
            .execute()
        )
    except Exception as e:
        logger.exception("cart.repository.delete_cart_item failed user_id=%s medicine_id=%s", user_id, medicine_id)
        raise PersistenceError(f"Failed to remove from cart: {e}")

def clear_cart(user_id: str, *, user_token: str) -> None:
    try:
        supabase_client.get_user_supabase(user_token).table(CART_TABLE).delete().eq("user_id", user_id).execute()
    except Exception as e:
        logger.exception("cart.repository.clear_cart failed user_id=%s", user_id)
        raise PersistenceError(f"Failed to clear cart: {e}")
