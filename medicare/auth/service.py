from typing import Optional, Dict, Any
from medicare.auth import repository

def determine_role(profile: Optional[Dict[str, Any]]) -> str:
    role_lower = str((profile or {}).get("role", "")).lower()
    if role_lower == "admin":
        return "admin"
    return "user"

def get_user_from_token(access_token: str) -> Dict[str, Any]:
    """Normalise l'utilisateur issu de supabase.auth.get_user(access_token):
    - Retourne {id, email, full_name, role, token}
    - Le rôle provient de la table profiles (user par défaut)
    """
    raw = repository.get_user_from_access_token(access_token)
    uid = raw.get("id")
    profile = repository.get_profile(uid) if uid else None
    metadata = raw.get("user_metadata") or {}
    return {
        "id": uid,
        "email": raw.get("email"),
        "full_name": (profile or {}).get("full_name") or metadata.get("full_name"),
        "role": determine_role(profile),
        "token": access_token,
    }
