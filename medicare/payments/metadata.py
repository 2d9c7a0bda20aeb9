"""
Lecture des informations portées par une session Stripe Checkout
(métadonnées de rattachement, coordonnées saisies par le payeur).
"""
from typing import Any, Dict, Optional, Tuple

# module medicare.payments.metadata
def extract_metadata_from_session(session: Dict[str, Any]) -> Tuple[Optional[str], Optional[str]]:
    """
    Extrait (order_id, user_id) depuis session["metadata"].
    - Valeurs vides normalisées en None (checkout invité: user_id = "").
    """
    meta = (session or {}).get("metadata") or {}
    order_id = meta.get("order_id") or None
    user_id = meta.get("user_id") or None
    return order_id, user_id

def extract_customer_details(session: Dict[str, Any]) -> Tuple[Optional[str], Optional[str]]:
    """Retourne (email, name) depuis session["customer_details"], None si absents."""
    details = (session or {}).get("customer_details") or {}
    return details.get("email") or None, details.get("name") or None
