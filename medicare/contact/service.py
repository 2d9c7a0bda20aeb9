"""Couche service du formulaire de contact.
Rôles:
- Enregistrer un message (invité ou connecté) puis notifier l'équipe par e-mail.
- Lister ses propres messages (utilisateur connecté).
- Back-office: lister/filtrer les messages et changer leur statut (new, in_progress, resolved).
"""
from typing import Any, Dict, List, Optional
import logging
import re

from medicare.contact import notifier, repository
from medicare.contact.models import REQUIRED_FIELDS, parse_status
from medicare.utils.errors import CheckoutValidationError, NotFoundError

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
MAX_LENGTHS = {"name": 200, "email": 320, "subject": 300, "message": 5000}

def validate_submission(body: Dict[str, Any]) -> Dict[str, str]:
    values: Dict[str, str] = {}
    for field in REQUIRED_FIELDS:
        value = body.get(field)
        if not isinstance(value, str) or not value.strip():
            raise CheckoutValidationError("Missing required fields")
        value = value.strip()
        if len(value) > MAX_LENGTHS[field]:
            raise CheckoutValidationError(f"{field} is too long")
        values[field] = value
    if not EMAIL_RE.match(values["email"]):
        raise CheckoutValidationError("Invalid email address")
    return values

def submit(body: Dict[str, Any], user: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Enregistre le message (statut 'new') puis tente la notification.
    Retour: {"submission": <ligne>, "notified": bool}
    """
    values = validate_submission(body)
    user_id = (user or {}).get("id")
    row = repository.insert_submission(user_id=user_id, **values)
    logger.info("contact.submit submission_id=%s user_id=%s", row.get("id"), user_id)
    return {"submission": row, "notified": notifier.send_contact_email(row)}

def list_my_submissions(user: Dict[str, Any], limit: int = 50) -> List[Dict[str, Any]]:
    return repository.fetch_user_submissions(user["id"], limit=limit)

def list_submissions(limit: int = 100, status: Optional[str] = None) -> List[Dict[str, Any]]:
    if status:
        try:
            status = parse_status(status).value
        except ValueError:
            raise CheckoutValidationError(f"Unknown contact status: {status}")
    return repository.fetch_submissions(limit=limit, status=status)

def change_status(submission_id: str, status: str) -> Dict[str, Any]:
    try:
        target = parse_status(status)
    except ValueError:
        raise CheckoutValidationError(f"Unknown contact status: {status}")
    updated = repository.update_submission_status(submission_id, target)
    if not updated:
        raise NotFoundError("Contact submission", submission_id)
    logger.info("contact.change_status submission_id=%s status=%s", submission_id, target.value)
    return updated
