from typing import Optional, Dict, Any
import logging
from medicare.infra.supabase_client import get_supabase, get_service_supabase

logger = logging.getLogger(__name__)

# --- Auth (supabase.auth.*) ---

def get_user_from_access_token(access_token: str) -> Dict[str, Any]:
    """Récupère et normalise l’utilisateur depuis supabase.auth.get_user(access_token)."""
    res = get_supabase().auth.get_user(access_token)
    user = getattr(res, "user", None) or {}
    if not isinstance(user, dict):
        user = {
            "id": getattr(user, "id", None),
            "email": getattr(user, "email", None),
            "user_metadata": getattr(user, "user_metadata", None),
        }
    return user or {}

# --- Table profiles (profil applicatif, rôle) ---

def get_profile(user_id: str) -> Optional[Dict[str, Any]]:
    """Profil applicatif (id, email, full_name, role); None si absent ou en cas d'erreur."""
    if not user_id:
        return None
    try:
        res = (
            get_service_supabase()
            .table("profiles")
            .select("id, email, full_name, role")
            .eq("id", user_id)
            .limit(1)
            .execute()
        )
        rows = res.data or []
        return rows[0] if rows else None
    except Exception:
        logger.exception("auth.repository.get_profile failed user_id=%s", user_id)
        return None
