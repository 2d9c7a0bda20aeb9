"""Formulaire de contact.
- POST /api/v1/contact {"name", "email", "subject", "message"}: invité ou connecté
- GET /api/v1/contact/mine: messages de l'utilisateur connecté
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from medicare.contact import service as contact_service
from medicare.utils.errors import CheckoutValidationError
from medicare.utils.rate_limit import optional_rate_limit
from medicare.utils.responses import ok
from medicare.utils.security import get_optional_user, require_user

router = APIRouter(prefix="/api/v1/contact", tags=["Contact API"])


@router.post("", dependencies=[Depends(optional_rate_limit(times=5, seconds=60))])
async def submit_contact(request: Request, user: Optional[dict] = Depends(get_optional_user)):
    try:
        body = await request.json()
    except Exception:
        body = None
    if not isinstance(body, dict):
        raise CheckoutValidationError("Invalid JSON body")
    return ok(contact_service.submit(body, user))


@router.get("/mine")
def my_contact_submissions(limit: int = Query(default=50, ge=1, le=200), user: dict = Depends(require_user)):
    return ok(contact_service.list_my_submissions(user, limit=limit))
