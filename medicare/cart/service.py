"""Couche service du panier (orchestration côté serveur).
- Panier persistant par utilisateur (table cart_items), prix toujours relus depuis le catalogue.
- checkout: assemble les lignes {name, price, quantity, image_url} puis délègue au
  créateur de session de paiement, et vide le panier une fois la session ouverte.
"""
from typing import Any, Dict, List, Optional
import math
import logging

from medicare.cart import repository
from medicare.medicines.sources import MedicineDataSource
from medicare.payments import service as payments_service
from medicare.utils.errors import CheckoutValidationError, NotFoundError, PersistenceError

logger = logging.getLogger(__name__)

def _parse_quantity(quantity: Any, *, allow_zero: bool = False) -> int:
    if isinstance(quantity, bool) or not isinstance(quantity, (int, float)) or not math.isfinite(quantity) or int(quantity) != quantity:
        raise CheckoutValidationError("quantity must be an integer")
    quantity = int(quantity)
    if quantity < 0 or (quantity == 0 and not allow_zero):
        raise CheckoutValidationError("quantity must be positive")
    return quantity

def list_cart(user: Dict[str, Any], source: MedicineDataSource) -> List[Dict[str, Any]]:
    """Lignes du panier enrichies du médicament correspondant (None si retiré du catalogue)."""
    rows = repository.list_cart_items(user["id"], user_token=user["token"])
    return [{**row, "medicine": source.get_medicine(row["medicine_id"])} for row in rows]

def add_item(user: Dict[str, Any], medicine_id: str, quantity: Any, source: MedicineDataSource) -> Dict[str, Any]:
    """Ajoute un médicament; si déjà présent, incrémente la quantité."""
    qty = _parse_quantity(quantity)
    if not source.get_medicine(medicine_id):
        raise NotFoundError("Medicine", medicine_id)
    existing = repository.get_cart_item(user["id"], medicine_id, user_token=user["token"])
    if existing:
        return repository.update_cart_item_quantity(
            existing["id"], int(existing.get("quantity") or 0) + qty, user_token=user["token"]
        ) or existing
    return repository.insert_cart_item(user["id"], medicine_id, qty, user_token=user["token"])

def set_quantity(user: Dict[str, Any], medicine_id: str, quantity: Any) -> Optional[Dict[str, Any]]:
    """Fixe la quantité; 0 retire la ligne (retour None)."""
    qty = _parse_quantity(quantity, allow_zero=True)
    if qty == 0:
        repository.delete_cart_item(user["id"], medicine_id, user_token=user["token"])
        return None
    existing = repository.get_cart_item(user["id"], medicine_id, user_token=user["token"])
    if not existing:
        raise NotFoundError("Cart item", medicine_id)
    return repository.update_cart_item_quantity(existing["id"], qty, user_token=user["token"])

def remove_item(user: Dict[str, Any], medicine_id: str) -> None:
    repository.delete_cart_item(user["id"], medicine_id, user_token=user["token"])

def clear(user: Dict[str, Any]) -> None:
    repository.clear_cart(user["id"], user_token=user["token"])

def build_checkout_items(user: Dict[str, Any], source: MedicineDataSource) -> List[Dict[str, Any]]:
    """
    Transforme le panier en lignes de checkout.
    - Panier vide, médicament introuvable ou en rupture: CheckoutValidationError
    """
    rows = repository.list_cart_items(user["id"], user_token=user["token"])
    if not rows:
        raise CheckoutValidationError("Cart is empty")
    items: List[Dict[str, Any]] = []
    for row in rows:
        medicine = source.get_medicine(row["medicine_id"])
        if not medicine:
            raise CheckoutValidationError(f"Medicine no longer available: {row['medicine_id']}")
        if medicine.get("stock_available") is False:
            raise CheckoutValidationError(f"Out of stock: {medicine.get('name')}")
        item = {
            "name": medicine.get("name") or "",
            "price": medicine.get("price"),
            "quantity": row.get("quantity"),
        }
        if medicine.get("image_url"):
            item["image_url"] = medicine["image_url"]
        items.append(item)
    return items

def checkout(
    user: Dict[str, Any],
    source: MedicineDataSource,
    *,
    currency: Optional[str] = None,
    payment_method_types: Any = None,
    shipping_address: Optional[str] = None,
    origin: Optional[str] = None,
) -> Dict[str, Any]:
    """Ouvre une session de paiement pour le panier de l'utilisateur puis vide le panier."""
    items = build_checkout_items(user, source)
    result = payments_service.create_checkout_session(
        items=items,
        currency=currency,
        payment_method_types=payment_method_types,
        shipping_address=shipping_address,
        user_id=user["id"],
        origin=origin,
    )
    try:
        clear(user)
    except PersistenceError:
        # La session est ouverte: le panier restant n'empêche pas le paiement
        logger.warning("cart.checkout cart not cleared user_id=%s order_id=%s", user["id"], result.get("orderId"))
    return result
