"""
Adaptateur Stripe: centralise les appels et la configuration Stripe.
"""
import logging
import stripe
from typing import Any, Dict, List, Optional

from medicare import config
from medicare.utils.errors import ConfigurationError, PaymentProviderError

logger = logging.getLogger(__name__)

# module medicare.payments.stripe_client
def require_stripe():
    """
    Prépare et retourne le module stripe prêt à l’emploi.
    - Configure stripe.api_key via STRIPE_SECRET_KEY (lu au moment de l'appel).
    - Clé absente: ConfigurationError, aucun appel Stripe n'est tenté.
    """
    if not config.STRIPE_SECRET_KEY:
        raise ConfigurationError("STRIPE_SECRET_KEY not configured")
    stripe.api_key = config.STRIPE_SECRET_KEY
    if config.STRIPE_API_VERSION:
        stripe.api_version = config.STRIPE_API_VERSION
    return stripe

def _to_dict(obj: Any) -> Dict[str, Any]:
    # StripeObject -> dict récursif (customer_details, etc.)
    if obj is None:
        return {}
    to_dict = getattr(obj, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    return dict(obj)

def create_session(
    *,
    line_items: List[Dict[str, Any]],
    success_url: str,
    cancel_url: str,
    payment_method_types: List[str],
    metadata: Dict[str, str],
    mode: str = "payment",
) -> Dict[str, Any]:
    """
    Crée une session Stripe Checkout.
    - line_items: lignes Stripe (price_data/quantity)
    - success_url / cancel_url: URLs de redirection
    - metadata: {"order_id": "...", "user_id": "..."}
    Retour: dict session (ex: {"id": "cs_test_...", "url": "https://...", "payment_intent": None})
    """
    require_stripe()
    try:
        session = stripe.checkout.Session.create(
            line_items=line_items,
            mode=mode,
            success_url=success_url,
            cancel_url=cancel_url,
            payment_method_types=payment_method_types,
            metadata=metadata,
        )
    except stripe.StripeError as e:
        logger.exception("stripe_client.create_session failed order_id=%s", metadata.get("order_id"))
        raise PaymentProviderError(getattr(e, "user_message", None) or str(e))
    return _to_dict(session)

def get_session(session_id: str) -> Dict[str, Any]:
    """
    Récupère une session Stripe Checkout par son identifiant.
    Retour: dict session incluant "id", "payment_status", "amount_total", "customer_details", etc.
    """
    require_stripe()
    try:
        session = stripe.checkout.Session.retrieve(session_id)
    except stripe.StripeError as e:
        logger.exception("stripe_client.get_session failed session_id=%s", session_id)
        raise PaymentProviderError(getattr(e, "user_message", None) or str(e))
    return _to_dict(session)

def payment_intent_id(session: Dict[str, Any]) -> Optional[str]:
    """payment_intent peut être un identifiant ou un objet développé (expand)."""
    pi = (session or {}).get("payment_intent")
    if isinstance(pi, dict):
        return pi.get("id")
    return pi or None
