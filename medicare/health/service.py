from urllib.parse import urlparse
import socket
from medicare import config
from medicare.infra.supabase_client import get_service_supabase

HEALTH_TABLES = ["orders", "profiles", "cart_items", "medicines", "contact_submissions"]

def _check_table(client, name: str):
    try:
        res = client.table(name).select("id").limit(1).execute()
        cnt = len(res.data or [])
        return {"ok": True, "rows": cnt}
    except Exception as e:
        return {"ok": False, "error": str(e)}

def health_supabase_info():
    effective_url = config.SUPABASE_URL
    parsed = urlparse(effective_url) if effective_url else None
    hostname = parsed.hostname if parsed else None
    dns_ok = None
    dns_error = None
    if hostname:
        try:
            socket.getaddrinfo(hostname, 443)
            dns_ok = True
        except Exception as e:
            dns_ok = False
            dns_error = str(e)

    info = {
        "supabase_url": effective_url,
        "hostname": hostname,
        "dns_ok": dns_ok,
        "dns_error": dns_error,
        "connect_ok": False,
        "error": None,
        "tables": {}
    }
    try:
        client = get_service_supabase()
        for t in HEALTH_TABLES:
            info["tables"][t] = _check_table(client, t)
        info["connect_ok"] = True
    except Exception as e:
        info["error"] = str(e)
    return info

def health_stripe_info():
    """Présence de la clé Stripe (jamais sa valeur)."""
    key = config.STRIPE_SECRET_KEY
    mode = None
    if key.startswith("sk_live_"):
        mode = "live"
    elif key.startswith("sk_test_"):
        mode = "test"
    return {"configured": bool(key), "mode": mode}
