from fastapi import Request, Depends
from typing import Optional, Dict, Any
import logging

from medicare.utils.errors import AuthenticationError, PermissionDeniedError

logger = logging.getLogger(__name__)

def get_bearer_token(request: Request) -> Optional[str]:
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        token = auth_header[7:].strip()
        return token or None
    return None

def _resolve_user(token: str) -> Dict[str, Any]:
    # Délégué au service Auth
    from medicare.auth.service import get_user_from_token as _svc_get_user_from_token
    return _svc_get_user_from_token(token)

def get_optional_user(request: Request) -> Optional[Dict[str, Any]]:
    """
    Identité facultative (checkout invité autorisé):
    - pas de token -> None
    - token invalide/expiré -> None (l'appel continue en anonyme)
    """
    token = get_bearer_token(request)
    if not token:
        return None
    try:
        user = _resolve_user(token)
    except Exception:
        logger.warning("security.get_optional_user: token rejected, continuing as guest")
        return None
    return user if user.get("id") else None

def get_current_user(request: Request) -> Dict[str, Any]:
    token = get_bearer_token(request)
    if not token:
        raise AuthenticationError("Authentication required")
    try:
        user = _resolve_user(token)
    except Exception:
        raise AuthenticationError("Session expired, please sign in again")
    if not user.get("id"):
        raise AuthenticationError("Session expired, please sign in again")
    return user

def require_user(user: Dict[str, Any] = Depends(get_current_user)) -> Dict[str, Any]:
    return user

def require_admin(user: Dict[str, Any] = Depends(get_current_user)) -> Dict[str, Any]:
    if user.get("role") != "admin":
        raise PermissionDeniedError("Admin access required")
    return user
