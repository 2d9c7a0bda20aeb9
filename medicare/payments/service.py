"""
Cas d'usage 'payments': orchestre cart, repository et stripe_client.

- create_checkout_session: valide le panier, crée la commande 'pending', ouvre la session
  Stripe et y rattache la commande. Aucune relance automatique.
- verify_payment: lit la session Stripe et, si elle est payée, passe la commande à
  'completed' au plus une fois (écriture conditionnée sur status = 'pending').
"""
from typing import Any, Dict, Optional
import logging

from medicare import config
from medicare.orders.models import OrderStatus
from medicare.utils.errors import CheckoutValidationError
from . import cart
from . import repository
from . import stripe_client
from . import metadata as meta

logger = logging.getLogger(__name__)

PAID = "paid"

def build_redirect_urls(origin: Optional[str]) -> Dict[str, str]:
    base = (origin or config.BASE_URL or "").rstrip("/")
    return {
        "success_url": f"{base}{config.CHECKOUT_SUCCESS_PATH}",
        "cancel_url": f"{base}{config.CHECKOUT_CANCEL_PATH}",
    }

def create_checkout_session(
    *,
    items: Any,
    currency: Optional[str] = None,
    payment_method_types: Any = None,
    shipping_address: Optional[str] = None,
    user_id: Optional[str] = None,
    origin: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Crée une commande 'pending' puis une session Stripe Checkout.
    Étapes:
      1) Valider le panier (aucune écriture en cas d'échec)
      2) Vérifier la présence de la clé Stripe avant toute écriture
      3) Normaliser les lignes (unités mineures) et calculer le total
      4) Insérer la commande 'pending'
      5) Créer la session Stripe à partir des lignes normalisées
      6) Stocker session_id / payment_intent sur la commande
    Retour: {"url", "sessionId", "orderId"}
    Un échec Stripe après l'étape 4 laisse la commande 'pending' sans session.
    """
    cart.validate_items(items)
    currency_code = cart.normalize_currency(currency)
    methods = cart.normalize_payment_method_types(payment_method_types)
    if shipping_address is not None and not isinstance(shipping_address, str):
        raise CheckoutValidationError("shipping_address must be a string")

    stripe_client.require_stripe()

    normalized = cart.normalize_items(items)
    total = cart.compute_total(normalized)

    order = repository.insert_pending_order(
        user_id=user_id,
        items=normalized,
        total_amount=total,
        currency=currency_code,
        shipping_address=(shipping_address or "").strip() or None,
    )
    order_id = str(order["id"])
    logger.info("payments.checkout order created order_id=%s total=%s currency=%s user_id=%s", order_id, total, currency_code, user_id)

    urls = build_redirect_urls(origin)
    session = stripe_client.create_session(
        line_items=cart.to_line_items(normalized, currency_code),
        success_url=urls["success_url"],
        cancel_url=urls["cancel_url"],
        payment_method_types=methods,
        metadata=cart.make_metadata(order_id, user_id),
    )
    session_id = session.get("id")
    repository.attach_session(
        order_id,
        session_id=session_id,
        payment_intent_id=stripe_client.payment_intent_id(session),
    )
    logger.info("payments.checkout session attached order_id=%s session_id=%s", order_id, session_id)

    return {"url": session.get("url"), "sessionId": session_id, "orderId": order_id}

def _complete_order(order: Dict[str, Any], session: Dict[str, Any]) -> bool:
    """
    Applique la transition pending -> completed pour une commande trouvée.
    Retour: orderUpdated (True si la commande est complétée, par cet appel ou un autre).
    """
    order_id = str(order.get("id"))
    session_id = session.get("id")
    status = order.get("status")

    if status == OrderStatus.COMPLETED.value:
        # Vérification répétée: aucune réécriture
        return True

    if status != OrderStatus.PENDING.value:
        logger.error("payments.verify order not completable order_id=%s status=%s session_id=%s", order_id, status, session_id)
        return False

    email, name = meta.extract_customer_details(session)
    changed = repository.complete_order_if_pending(
        order_id,
        customer_email=email,
        customer_name=name,
        payment_intent_id=stripe_client.payment_intent_id(session),
    )
    if changed:
        logger.info("payments.verify order completed order_id=%s session_id=%s", order_id, session_id)
        return True

    # Zéro ligne modifiée: un appel concurrent a déjà écrit (relecture en échec: PersistenceError)
    current = repository.get_order_status(order_id)
    if current == OrderStatus.COMPLETED.value:
        logger.info("payments.verify order already completed concurrently order_id=%s", order_id)
        return True
    logger.error("payments.verify order changed concurrently order_id=%s status=%s", order_id, current)
    return False

def verify_payment(session_id: Any) -> Dict[str, Any]:
    """
    Vérifie l'état de paiement d'une session Stripe et réconcilie la commande locale.
    - Session non payée: {"verified": False, "status", "sessionId"}, commande inchangée
    - Session payée: résultat complet + orderUpdated
      (False si aucune commande liée ou statut cancelled/refunded: anomalie loggée, pas d'exception)
    """
    if not isinstance(session_id, str) or not session_id.strip():
        raise CheckoutValidationError("Missing session_id parameter")
    session_id = session_id.strip()

    session = stripe_client.get_session(session_id)
    payment_status = session.get("payment_status") or ""
    sid = session.get("id") or session_id

    if payment_status != PAID:
        return {"verified": False, "status": payment_status, "sessionId": sid}

    email, name = meta.extract_customer_details(session)
    result: Dict[str, Any] = {
        "verified": True,
        "status": PAID,
        "sessionId": sid,
        "paymentIntentId": stripe_client.payment_intent_id(session),
        "amount": session.get("amount_total"),
        "currency": session.get("currency"),
        "customerEmail": email,
        "customerName": name,
    }

    order = repository.find_order_by_session_id(sid)
    if not order:
        meta_order_id, _ = meta.extract_metadata_from_session(session)
        logger.error(
            "payments.verify paid session without local order session_id=%s metadata_order_id=%s",
            sid, meta_order_id,
        )
        result["orderUpdated"] = False
        return result

    amount_total = session.get("amount_total")
    mismatch = amount_total is not None and amount_total != order.get("total_amount")
    if mismatch:
        logger.warning(
            "payments.verify amount mismatch order_id=%s stored=%s processor=%s",
            order.get("id"), order.get("total_amount"), amount_total,
        )
    result["orderUpdated"] = _complete_order(order, session)
    result["amountMismatch"] = mismatch
    return result
