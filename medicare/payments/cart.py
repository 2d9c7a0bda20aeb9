"""
Logique panier pure (pas de Stripe, pas de DB).

Toute conversion montant -> unités mineures passe par to_minor_units: le total stocké
sur la commande et les unit_amount envoyés à Stripe dérivent des mêmes lignes normalisées.
"""
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import List, Dict, Any, Optional
import re

from medicare import config
from medicare.utils.errors import CheckoutValidationError

_CURRENCY_RE = re.compile(r"^[a-z]{3}$")

# module medicare.payments.cart
def to_minor_units(amount: Any) -> int:
    """
    Convertit un montant décimal (ex: 15.99) en unités mineures entières (1599).
    - Passe par Decimal(str(...)) pour éviter les erreurs binaires (1.005 -> 101)
    - Arrondi demi-supérieur, identique partout où un montant est dérivé
    """
    try:
        value = Decimal(str(amount))
    except (InvalidOperation, ValueError):
        raise CheckoutValidationError("Invalid item information")
    if not value.is_finite():
        raise CheckoutValidationError("Invalid item information")
    return int((value * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))

def _is_number(v: Any) -> bool:
    return isinstance(v, (int, float, Decimal)) and not isinstance(v, bool)

def validate_items(items: Any) -> List[Dict[str, Any]]:
    """
    Valide le panier brut sans rien normaliser.
    - Soulève CheckoutValidationError si la liste est vide ou absente
    - Chaque ligne: name non vide, price > 0, quantity entier > 0
    """
    if not isinstance(items, list) or not items:
        raise CheckoutValidationError("Items cannot be empty")
    for it in items:
        if not isinstance(it, dict):
            raise CheckoutValidationError("Invalid item information")
        name = it.get("name")
        price = it.get("price")
        qty = it.get("quantity")
        if not isinstance(name, str) or not name.strip():
            raise CheckoutValidationError("Invalid item information")
        if not _is_number(price) or price <= 0:
            raise CheckoutValidationError("Invalid item information")
        if not _is_number(qty) or qty <= 0 or int(qty) != qty:
            raise CheckoutValidationError("Invalid item information")
        image_url = it.get("image_url")
        if image_url is not None and not isinstance(image_url, str):
            raise CheckoutValidationError("Invalid item information")
    return items

def normalize_currency(currency: Optional[str]) -> str:
    value = (currency or config.DEFAULT_CURRENCY).strip().lower()
    if not _CURRENCY_RE.match(value):
        raise CheckoutValidationError(f"Invalid currency: {currency}")
    return value

def normalize_payment_method_types(methods: Any) -> List[str]:
    if methods is None:
        return list(config.DEFAULT_PAYMENT_METHOD_TYPES)
    if not isinstance(methods, list) or not methods:
        raise CheckoutValidationError("payment_method_types must be a non-empty list")
    cleaned = []
    for m in methods:
        if not isinstance(m, str) or not m.strip():
            raise CheckoutValidationError("payment_method_types must be a non-empty list")
        cleaned.append(m.strip())
    return cleaned

def normalize_items(items: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    Normalise les lignes validées: nom trimé, prix en unités mineures, quantité entière,
    image_url trimée ("" si absente). Un prix qui s'arrondit à 0 est rejeté.
    """
    normalized: List[Dict[str, Any]] = []
    for it in items:
        price = to_minor_units(it["price"])
        if price <= 0:
            raise CheckoutValidationError("Invalid item information")
        normalized.append({
            "name": it["name"].strip(),
            "price": price,
            "quantity": int(it["quantity"]),
            "image_url": (it.get("image_url") or "").strip(),
        })
    return normalized

def compute_total(normalized_items: List[Dict[str, Any]]) -> int:
    return sum(it["price"] * it["quantity"] for it in normalized_items)

def to_line_items(normalized_items: List[Dict[str, Any]], currency: str) -> List[Dict[str, Any]]:
    """
    Construit les line_items Stripe à partir des lignes déjà normalisées
    (unit_amount = price stocké, jamais recalculé depuis le float d'origine).
    """
    line_items: List[Dict[str, Any]] = []
    for it in normalized_items:
        line_items.append({
            "quantity": it["quantity"],
            "price_data": {
                "currency": currency,
                "unit_amount": it["price"],
                "product_data": {
                    "name": it["name"],
                    "images": [it["image_url"]] if it["image_url"] else [],
                },
            },
        })
    return line_items

def make_metadata(order_id: str, user_id: Optional[str]) -> Dict[str, str]:
    """Métadonnées Stripe reliant la session à la commande interne et à l'appelant."""
    return {
        "order_id": str(order_id),
        "user_id": user_id or "",
    }
