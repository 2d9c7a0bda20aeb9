# module medicare.orders.models
"""Modèle des commandes.
- Table Supabase: orders (une ligne par tentative de checkout, lignes d'articles embarquées en JSON)
- Statuts et transitions autorisées: pending -> completed | cancelled, completed -> refunded
"""
from enum import Enum
from typing import Dict, FrozenSet

ORDERS_TABLE = "orders"

ORDER_COLUMNS = (
    "id, user_id, items, total_amount, currency, status, stripe_session_id, "
    "stripe_payment_intent_id, customer_email, customer_name, shipping_address, "
    "completed_at, created_at, updated_at"
)


class OrderStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


ALLOWED_TRANSITIONS: Dict[OrderStatus, FrozenSet[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.COMPLETED, OrderStatus.CANCELLED}),
    OrderStatus.COMPLETED: frozenset({OrderStatus.REFUNDED}),
    OrderStatus.CANCELLED: frozenset(),
    OrderStatus.REFUNDED: frozenset(),
}


def parse_status(value: str) -> OrderStatus:
    """Convertit une chaîne en OrderStatus (ValueError si inconnue)."""
    return OrderStatus(str(value or "").strip().lower())


def can_transition(current: OrderStatus, target: OrderStatus) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, frozenset())
