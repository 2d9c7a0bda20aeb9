"""
Accès aux données des profils (table profiles).
- Lecture/mise à jour de son propre profil: client utilisateur (RLS actif)
- Liste et changement de rôle (back-office): client service
"""
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
import logging

import httpx

import medicare.infra.supabase_client as supabase_client
from medicare import config
from medicare.utils.errors import PersistenceError

logger = logging.getLogger(__name__)

PROFILES_TABLE = "profiles"
PROFILE_COLUMNS = "id, email, full_name, phone, address, role, created_at, updated_at"

# module medicare.profiles.repository
def get_profile(user_id: str, *, user_token: Optional[str] = None) -> Optional[Dict[str, Any]]:
    client = supabase_client.get_user_supabase(user_token) if user_token else supabase_client.get_service_supabase()
    try:
        res = (
            client
            .table(PROFILES_TABLE)
            .select(PROFILE_COLUMNS)
            .eq("id", user_id)
            .limit(1)
            .execute()
        )
    except Exception as e:
        logger.exception("profiles.repository.get_profile failed user_id=%s", user_id)
        raise PersistenceError(f"Failed to load profile: {e}")
    rows = res.data or []
    return rows[0] if rows else None

def fetch_profiles(limit: int = 100) -> List[Dict[str, Any]]:
    try:
        res = (
            supabase_client.get_service_supabase()
            .table(PROFILES_TABLE)
            .select(PROFILE_COLUMNS)
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
        )
    except Exception as e:
        logger.exception("profiles.repository.fetch_profiles failed")
        raise PersistenceError(f"Failed to fetch profiles: {e}")
    return res.data or []

def update_profile(user_id: str, values: Dict[str, Any], *, user_token: str) -> Optional[Dict[str, Any]]:
    payload = dict(values)
    payload["updated_at"] = datetime.now(timezone.utc).isoformat()
    try:
        res = (
            supabase_client.get_user_supabase(user_token)
            .table(PROFILES_TABLE)
            .update(payload)
            .eq("id", user_id)
            .execute()
        )
    except Exception as e:
        logger.exception("profiles.repository.update_profile failed user_id=%s", user_id)
        raise PersistenceError(f"Failed to update profile: {e}")
    rows = res.data or []
    return rows[0] if rows else None

def update_role(user_id: str, role: str) -> Optional[Dict[str, Any]]:
    try:
        res = (
            supabase_client.get_service_supabase()
            .table(PROFILES_TABLE)
            .update({"role": role, "updated_at": datetime.now(timezone.utc).isoformat()})
            .eq("id", user_id)
            .execute()
        )
    except Exception as e:
        logger.exception("profiles.repository.update_role failed user_id=%s role=%s", user_id, role)
        raise PersistenceError(f"Failed to update role: {e}")
    rows = res.data or []
    return rows[0] if rows else None

# Recopie du rôle dans Supabase Auth (user_metadata.role) via l'API admin
def set_auth_user_role(user_id: str, role: str) -> bool:
    if not config.SUPABASE_URL or not config.SUPABASE_SERVICE_KEY:
        return False
    url = f"{config.SUPABASE_URL.rstrip('/')}/auth/v1/admin/users/{user_id}"
    headers = {
        "Authorization": f"Bearer {config.SUPABASE_SERVICE_KEY}",
        "apikey": config.SUPABASE_SERVICE_KEY,
        "Content-Type": "application/json",
    }
    try:
        resp = httpx.put(url, json={"user_metadata": {"role": role}}, headers=headers, timeout=10)
    except httpx.HTTPError:
        logger.exception("profiles.repository.set_auth_user_role failed user_id=%s role=%s", user_id, role)
        return False
    if 200 <= resp.status_code < 300:
        return True
    logger.error("profiles.repository.set_auth_user_role status=%s body=%s", resp.status_code, resp.text)
    return False
