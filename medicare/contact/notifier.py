"""
Notification e-mail de l'équipe à chaque message de contact (API Resend).
- RESEND_API_KEY absent: le message est seulement loggé, retour False
- Échec HTTP: loggé, retour False; l'enregistrement du message n'est jamais remis en cause
"""
from datetime import datetime, timezone
from html import escape
from typing import Any, Dict
import logging

import httpx

from medicare import config

logger = logging.getLogger(__name__)

RESEND_URL = "https://api.resend.com/emails"

def email_subject(submission: Dict[str, Any]) -> str:
    return f"[MediCare Contact] {submission.get('subject') or ''}"

def render_email_html(submission: Dict[str, Any]) -> str:
    """Corps HTML; toutes les valeurs saisies sont échappées."""
    rows = [
        ("Name", escape(str(submission.get("name") or ""))),
        ("Email", escape(str(submission.get("email") or ""))),
        ("Subject", escape(str(submission.get("subject") or ""))),
    ]
    if submission.get("user_id"):
        rows.append(("User ID", escape(str(submission["user_id"]))))
    fields = "".join(f"<p><strong>{label}:</strong> {value}</p>" for label, value in rows)
    message = escape(str(submission.get("message") or ""))
    sent_at = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M UTC")
    return (
        "<!DOCTYPE html><html><head><meta charset=\"utf-8\"></head><body>"
        "<h1>MediCare Contact Form</h1>"
        f"{fields}"
        f"<p><strong>Message:</strong></p><pre style=\"white-space: pre-wrap\">{message}</pre>"
        f"<p><small>Sent from the MediCare Online Pharmacy contact form on {sent_at}.</small></p>"
        "</body></html>"
    )

def send_contact_email(submission: Dict[str, Any]) -> bool:
    if not config.RESEND_API_KEY or not config.CONTACT_ADMIN_EMAIL:
        logger.info(
            "contact.notifier email not sent (RESEND_API_KEY/CONTACT_ADMIN_EMAIL missing) submission_id=%s subject=%r",
            submission.get("id"), submission.get("subject"),
        )
        return False
    payload = {
        "from": config.CONTACT_EMAIL_FROM,
        "to": [config.CONTACT_ADMIN_EMAIL],
        "subject": email_subject(submission),
        "html": render_email_html(submission),
        "reply_to": submission.get("email"),
    }
    headers = {"Authorization": f"Bearer {config.RESEND_API_KEY}", "Content-Type": "application/json"}
    try:
        resp = httpx.post(RESEND_URL, json=payload, headers=headers, timeout=10)
    except httpx.HTTPError:
        logger.exception("contact.notifier.send_contact_email failed submission_id=%s", submission.get("id"))
        return False
    if 200 <= resp.status_code < 300:
        logger.info("contact.notifier email sent submission_id=%s", submission.get("id"))
        return True
    logger.error("contact.notifier.send_contact_email status=%s body=%s", resp.status_code, resp.text)
    return False
