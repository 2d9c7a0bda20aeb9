"""Back-office (JSON) réservé aux admins.
- GET /admin/api/orders?status=&limit=: toutes les commandes
- PATCH /admin/api/orders/{order_id}/status {"status"}: transition autorisée uniquement
- POST /admin/api/orders/reconcile {"minutes"?, "max"?, "dry_run"?}: commandes 'pending' anciennes
- GET /admin/api/users?limit=: profils (plus récents d'abord)
- PATCH /admin/api/users/{user_id}/role {"role": "user" | "admin"}
- GET /admin/api/contact?status=&limit=: messages de contact
- PATCH /admin/api/contact/{submission_id}/status {"status": "new" | "in_progress" | "resolved"}
"""
from typing import Optional
import logging

from fastapi import APIRouter, Depends, Query, Request

from medicare.admin import service as admin_service
from medicare.utils.errors import CheckoutValidationError
from medicare.utils.responses import ok
from medicare.utils.security import require_admin

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/admin/api", tags=["Admin"])


@router.get("/orders")
def admin_list_orders(
    status: Optional[str] = None,
    limit: int = Query(default=100, ge=1, le=500),
    user: dict = Depends(require_admin),
):
    return ok(admin_service.list_orders(limit=limit, status=status))


@router.patch("/orders/{order_id}/status")
async def admin_update_order_status(order_id: str, request: Request, user: dict = Depends(require_admin)):
    try:
        body = await request.json()
    except Exception:
        body = None
    status = (body or {}).get("status") if isinstance(body, dict) else None
    if not isinstance(status, str) or not status.strip():
        raise CheckoutValidationError("status is required")
    updated = admin_service.update_order_status(order_id, status)
    logger.info("admin.update_order_status order_id=%s status=%s by=%s", order_id, status, user.get("id"))
    return ok(updated)


@router.post("/orders/reconcile")
async def admin_reconcile_orders(request: Request, user: dict = Depends(require_admin)):
    try:
        body = await request.json()
    except Exception:
        body = {}
    body = body if isinstance(body, dict) else {}
    minutes = body.get("minutes")
    max_orders = body.get("max", 100)
    if minutes is not None and (not isinstance(minutes, int) or isinstance(minutes, bool) or minutes < 0):
        raise CheckoutValidationError("minutes must be a non-negative integer")
    if not isinstance(max_orders, int) or isinstance(max_orders, bool) or max_orders <= 0:
        raise CheckoutValidationError("max must be a positive integer")
    counts = admin_service.reconcile_orders(minutes, limit=max_orders, dry_run=bool(body.get("dry_run")))
    return ok(counts)


async def _required_field(request: Request, field: str) -> str:
    try:
        body = await request.json()
    except Exception:
        body = None
    value = body.get(field) if isinstance(body, dict) else None
    if not isinstance(value, str) or not value.strip():
        raise CheckoutValidationError(f"{field} is required")
    return value


@router.get("/users")
def admin_list_users(limit: int = Query(default=100, ge=1, le=500), user: dict = Depends(require_admin)):
    return ok(admin_service.list_users(limit=limit))


@router.patch("/users/{user_id}/role")
async def admin_update_user_role(user_id: str, request: Request, user: dict = Depends(require_admin)):
    role = await _required_field(request, "role")
    return ok(admin_service.update_user_role(user, user_id, role))


@router.get("/contact")
def admin_list_contact(
    status: Optional[str] = None,
    limit: int = Query(default=100, ge=1, le=500),
    user: dict = Depends(require_admin),
):
    return ok(admin_service.list_contact_submissions(limit=limit, status=status))


@router.patch("/contact/{submission_id}/status")
async def admin_update_contact_status(submission_id: str, request: Request, user: dict = Depends(require_admin)):
    status = await _required_field(request, "status")
    updated = admin_service.update_contact_status(submission_id, status)
    logger.info("admin.update_contact_status submission_id=%s status=%s by=%s", submission_id, status, user.get("id"))
    return ok(updated)
