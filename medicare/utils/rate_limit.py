from typing import Any, Dict, List, Tuple
from fastapi import Request, HTTPException
import os
import time
import hashlib
from urllib.parse import urlparse

from medicare.utils.security import get_bearer_token

def _client_key(req: Request) -> str:
    # Priorité: token Bearer (hashé) puis IP
    token = get_bearer_token(req)
    path = req.url.path
    if token:
        h = hashlib.sha256(token.encode("utf-8")).hexdigest()[:16]
        return f"user:{h}:{path}"
    ip = req.client.host if req.client else "local"
    return f"ip:{ip}:{path}"

def _sweep(store: Dict[str, Tuple[int, List[float]]], now: float) -> Dict[str, Tuple[int, List[float]]]:
    # Chaque clé garde sa propre fenêtre; une clé sans hit récent disparaît
    kept = {}
    for key, (window, hits) in store.items():
        recent = [t for t in hits if now - t < window]
        if recent:
            kept[key] = (window, recent)
    return kept

def optional_rate_limit(times: int, seconds: int):
    async def _dep(request: Request):
        # Forcer le fallback mémoire en DEV si demandé
        if os.getenv("LOCAL_RATE_LIMIT_FALLBACK") == "1":
            now = time.time()
            key = _client_key(request)
            store = _sweep(getattr(request.app.state, "_rl_store", {}), now)
            hits = store.get(key, (seconds, []))[1]
            if len(hits) >= times:
                request.app.state._rl_store = store
                raise HTTPException(status_code=429, detail="Too Many Requests")
            store[key] = (seconds, hits + [now])
            request.app.state._rl_store = store
            return

        # Respecter le flag global
        if getattr(request.app.state, "rate_limit_enabled", None) is False:
            return

        # Utiliser fastapi-limiter si dispo
        try:
            from fastapi_limiter.depends import RateLimiter
            async def _identifier(req: Request) -> str:
                return _client_key(req)
            return await RateLimiter(times=times, seconds=seconds, identifier=_identifier)(request)
        except HTTPException:
            raise
        except Exception:
            # fastapi-limiter non initialisé (ex: Redis absent): pas de 429
            return
    return _dep

def rate_limit_health_info(request: Request) -> Dict[str, Any]:
    enabled = getattr(request.app.state, "rate_limit_enabled", None)

    limiter_ready = False
    backend = None
    try:
        from fastapi_limiter import FastAPILimiter
        limiter_ready = getattr(FastAPILimiter, "redis", None) is not None
        backend = "redis" if limiter_ready else None
    except Exception:
        limiter_ready = False
        backend = None

    info: Dict[str, Any] = {
        "enabled": (bool(enabled) if enabled is not None else None),
        "ready": limiter_ready,
        "backend": backend,
    }

    redis_url = os.getenv("RATE_LIMIT_REDIS_URL")
    if backend == "redis" and redis_url:
        p = urlparse(redis_url)
        info["redis"] = {"scheme": p.scheme, "host": p.hostname, "port": p.port}

    return info
