# module medicare.contact.models
"""Messages du formulaire de contact (table contact_submissions), traités par le back-office."""
from enum import Enum

CONTACT_TABLE = "contact_submissions"

CONTACT_COLUMNS = "id, name, email, subject, message, user_id, status, created_at, updated_at"

REQUIRED_FIELDS = ("name", "email", "subject", "message")


class ContactStatus(str, Enum):
    NEW = "new"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"


def parse_status(value: str) -> ContactStatus:
    """Convertit une chaîne en ContactStatus (ValueError si inconnue)."""
    return ContactStatus(str(value or "").strip().lower())
