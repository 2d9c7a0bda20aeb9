"""
Accès aux données des messages de contact.
Client service: le formulaire est ouvert aux invités, la lecture est filtrée côté service.
"""
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
import logging

import medicare.infra.supabase_client as supabase_client
from medicare.contact.models import CONTACT_COLUMNS, CONTACT_TABLE, ContactStatus
from medicare.utils.errors import PersistenceError

logger = logging.getLogger(__name__)

# module medicare.contact.repository
def insert_submission(*, name: str, email: str, subject: str, message: str, user_id: Optional[str]) -> Dict[str, Any]:
    payload = {
        "name": name,
        "email": email,
        "subject": subject,
        "message": message,
        "user_id": user_id,
        "status": ContactStatus.NEW.value,
    }
    try:
        res = supabase_client.get_service_supabase().table(CONTACT_TABLE).insert(payload).execute()
    except Exception as e:
        logger.exception("contact.repository.insert_submission failed user_id=%s", user_id)
        raise PersistenceError(f"Failed to save contact message: {e}")
    rows = res.data or []
    if not rows:
        raise PersistenceError("Failed to save contact message: no row returned")
    return rows[0]

def fetch_submissions(limit: int = 100, status: Optional[str] = None) -> List[Dict[str, Any]]:
    try:
        query = (
            supabase_client.get_service_supabase()
            .table(CONTACT_TABLE)
            .select(CONTACT_COLUMNS)
        )
        if status:
            query = query.eq("status", status)
        res = query.order("created_at", desc=True).limit(limit).execute()
    except Exception as e:
        logger.exception("contact.repository.fetch_submissions failed status=%s", status)
        raise PersistenceError(f"Failed to fetch contact messages: {e}")
    return res.data or []

def fetch_user_submissions(user_id: str, limit: int = 50) -> List[Dict[str, Any]]:
    try:
        res = (
            supabase_client.get_service_supabase()
            .table(CONTACT_TABLE)
            .select(CONTACT_COLUMNS)
            .eq("user_id", user_id)
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
        )
    except Exception as e:
        logger.exception("contact.repository.fetch_user_submissions failed user_id=%s", user_id)
        raise PersistenceError(f"Failed to fetch contact messages: {e}")
    return res.data or []

def update_submission_status(submission_id: str, status: ContactStatus) -> Optional[Dict[str, Any]]:
    try:
        res = (
            supabase_client.get_service_supabase()
            .table(CONTACT_TABLE)
            .update({"status": status.value, "updated_at": datetime.now(timezone.utc).isoformat()})
            .eq("id", submission_id)
            .execute()
        )
    except Exception as e:
        logger.exception("contact.repository.update_submission_status failed id=%s", submission_id)
        raise PersistenceError(f"Failed to update contact message: {e}")
    rows = res.data or []
    return rows[0] if rows else None
