"""Profil de l'utilisateur connecté.
- GET /api/v1/profile
- PATCH /api/v1/profile {"full_name"?, "phone"?, "address"?}
"""
from fastapi import APIRouter, Depends, Request

from medicare.profiles import service as profiles_service
from medicare.utils.errors import CheckoutValidationError
from medicare.utils.responses import ok
from medicare.utils.security import require_user

router = APIRouter(prefix="/api/v1/profile", tags=["Profile API"])


@router.get("")
def get_profile(user: dict = Depends(require_user)):
    return ok(profiles_service.get_my_profile(user))


@router.patch("")
async def update_profile(request: Request, user: dict = Depends(require_user)):
    try:
        body = await request.json()
    except Exception:
        body = None
    if not isinstance(body, dict):
        raise CheckoutValidationError("Invalid JSON body")
    return ok(profiles_service.update_my_profile(user, body))
