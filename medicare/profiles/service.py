"""Couche service des profils.
- Profil de l'utilisateur connecté: lecture et mise à jour des champs éditables
- Back-office: liste des utilisateurs et changement de rôle (user | admin)
"""
from typing import Any, Dict, List
import logging

from medicare.profiles import repository
from medicare.utils.errors import CheckoutValidationError, NotFoundError, PermissionDeniedError

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("full_name", "phone", "address")
ROLES = ("user", "admin")

def get_my_profile(user: Dict[str, Any]) -> Dict[str, Any]:
    profile = repository.get_profile(user["id"], user_token=user["token"])
    if not profile:
        raise NotFoundError("Profile", user["id"])
    return profile

def _editable_values(body: Dict[str, Any]) -> Dict[str, Any]:
    """Ne garde que full_name/phone/address; chaîne vide -> NULL. role et email ne passent jamais par ici."""
    values: Dict[str, Any] = {}
    for field in EDITABLE_FIELDS:
        if field not in body:
            continue
        value = body[field]
        if value is not None and not isinstance(value, str):
            raise CheckoutValidationError(f"{field} must be a string")
        values[field] = (value or "").strip() or None
    if not values:
        raise CheckoutValidationError("No profile fields to update")
    return values

def update_my_profile(user: Dict[str, Any], body: Dict[str, Any]) -> Dict[str, Any]:
    values = _editable_values(body)
    updated = repository.update_profile(user["id"], values, user_token=user["token"])
    if not updated:
        raise NotFoundError("Profile", user["id"])
    return updated

def list_profiles(limit: int = 100) -> List[Dict[str, Any]]:
    return repository.fetch_profiles(limit=limit)

def change_role(actor: Dict[str, Any], user_id: str, role: Any) -> Dict[str, Any]:
    """
    Change le rôle d'un utilisateur.
    - 400 rôle inconnu, 403 un admin ne modifie pas son propre rôle, 404 profil absent
    - La recopie dans Supabase Auth est annexe: un échec est loggé, le profil fait foi
    """
    role = str(role or "").strip().lower()
    if role not in ROLES:
        raise CheckoutValidationError(f"Unknown role: {role or '(empty)'}")
    if user_id == actor.get("id"):
        raise PermissionDeniedError("Admins cannot change their own role")
    updated = repository.update_role(user_id, role)
    if not updated:
        raise NotFoundError("Profile", user_id)
    if not repository.set_auth_user_role(user_id, role):
        logger.warning("profiles.change_role auth metadata not synced user_id=%s", user_id)
    logger.info("profiles.change_role user_id=%s role=%s by=%s", user_id, role, actor.get("id"))
    return updated
