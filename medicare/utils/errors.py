"""
Exceptions métier de la boutique.

Chaque erreur est une HTTPException portant un code machine: le handler global
(medicare.app_setup.exceptions) les transforme en enveloppe {"code": "FAIL", "message": ...}.
- CheckoutValidationError: entrée invalide, rejetée avant toute écriture ou appel Stripe
- PersistenceError: échec d'écriture/lecture Supabase (aucune compensation automatique)
- PaymentProviderError: erreur Stripe (réseau, session inconnue, refus), message transmis tel quel
- ConfigurationError: secret manquant (ex: STRIPE_SECRET_KEY), jamais remplacé par un défaut
"""
from typing import Any, Dict, Optional
from fastapi import HTTPException, status


class StorefrontError(HTTPException):
    """Base des erreurs métier."""
    code = "error"

    def __init__(self, message: str, status_code: int = status.HTTP_400_BAD_REQUEST, details: Optional[Dict[str, Any]] = None):
        super().__init__(status_code=status_code, detail=message)
        self.message = message
        self.details = details or {}


class CheckoutValidationError(StorefrontError):
    code = "validation_error"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status_code=status.HTTP_400_BAD_REQUEST, details=details)


class AuthenticationError(StorefrontError):
    code = "unauthorized"

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message, status_code=status.HTTP_401_UNAUTHORIZED)


class PermissionDeniedError(StorefrontError):
    code = "forbidden"

    def __init__(self, message: str = "Forbidden"):
        super().__init__(message, status_code=status.HTTP_403_FORBIDDEN)


class NotFoundError(StorefrontError):
    code = "not_found"

    def __init__(self, resource_type: str, identifier: str):
        super().__init__(f"{resource_type} not found: {identifier}", status_code=status.HTTP_404_NOT_FOUND)


class InvalidTransitionError(StorefrontError):
    code = "invalid_transition"

    def __init__(self, message: str):
        super().__init__(message, status_code=status.HTTP_409_CONFLICT)


class PersistenceError(StorefrontError):
    code = "persistence_error"

    def __init__(self, message: str):
        super().__init__(message, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)


class ConfigurationError(StorefrontError):
    code = "configuration_error"

    def __init__(self, message: str):
        super().__init__(message, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)


class PaymentProviderError(StorefrontError):
    code = "payment_provider_error"

    def __init__(self, message: str):
        super().__init__(message, status_code=status.HTTP_502_BAD_GATEWAY)
