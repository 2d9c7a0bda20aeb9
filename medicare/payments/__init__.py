"""
Module 'payments' (feature-first): point d'entrée public.
Réunit logique panier, client Stripe, repository BD et cas d'usage checkout/vérification.
"""

from .cart import to_minor_units, validate_items, normalize_items, compute_total, to_line_items, make_metadata
from .metadata import extract_metadata_from_session, extract_customer_details
from .stripe_client import require_stripe, create_session, get_session
from .service import create_checkout_session, verify_payment

__all__ = [
    # cart
    "to_minor_units",
    "validate_items",
    "normalize_items",
    "compute_total",
    "to_line_items",
    "make_metadata",
    # metadata
    "extract_metadata_from_session",
    "extract_customer_details",
    # stripe
    "require_stripe",
    "create_session",
    "get_session",
    # services
    "create_checkout_session",
    "verify_payment",
]
