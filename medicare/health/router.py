from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from medicare.health import service as health_service
from medicare.utils.rate_limit import rate_limit_health_info

router = APIRouter(prefix="/health", tags=["Health"])

@router.get("")
def health_root(request: Request):
    source = getattr(request.app.state, "medicine_source", None)
    return {"ok": True, "medicine_source": getattr(source, "name", None)}

@router.get("/supabase")
def health_supabase():
    return JSONResponse(health_service.health_supabase_info())

@router.get("/stripe")
def health_stripe():
    return health_service.health_stripe_info()

@router.get("/rate-limit")
def health_rate_limit(request: Request):
    return rate_limit_health_info(request)
