# medicare.config
from pathlib import Path
import os
from dotenv import load_dotenv

# Calculer le chemin du projet puis charger .env de manière explicite
BASE_DIR = Path(__file__).resolve().parent.parent
ENV_PATH = BASE_DIR / ".env"
load_dotenv(dotenv_path=ENV_PATH, override=True)

"""
Configuration centrale de la boutique.

- Charge le fichier .env à la racine du projet (BASE_DIR/.env)
- Normalise et expose les secrets/URLs (Supabase, Stripe), CORS/hosts
- Fournit les chemins de redirection du checkout et la source du catalogue
"""

def _clean_env(v: str) -> str:
    """
    Nettoie une valeur d'environnement:
    - supprime les espaces et guillemets (simples, doubles) et backticks
    - retourne toujours une chaîne (jamais None)
    """
    return (v or "").strip().strip("'").strip('"').strip("`")

def _int_env(name: str, default: int) -> int:
    try:
        return int(_clean_env(os.getenv(name) or "") or default)
    except ValueError:
        return default

# Supabase: URL et clés (anon/service)
# - SUPABASE_URL peut parfois être sans schéma: on préfixe en https:// si nécessaire
SUPABASE_URL = _clean_env(os.getenv("SUPABASE_URL") or "")
SUPABASE_ANON_KEY = _clean_env(os.getenv("SUPABASE_ANON_KEY") or os.getenv("SUPABASE_KEY") or "")
SUPABASE_SERVICE_KEY = _clean_env(os.getenv("SUPABASE_SERVICE_ROLE_KEY") or os.getenv("SUPABASE_SERVICE_KEY") or "")

if SUPABASE_URL and not SUPABASE_URL.startswith("http"):
    SUPABASE_URL = "https://" + SUPABASE_URL
if SUPABASE_URL.endswith("/"):
    SUPABASE_URL = SUPABASE_URL.rstrip("/")

# CORS / hôtes
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
ALLOWED_HOSTS = [h.strip() for h in os.getenv("ALLOWED_HOSTS", "localhost,127.0.0.1").split(",") if h.strip()]

# Stripe: clé secrète (lue au moment de l'appel par stripe_client.require_stripe)
STRIPE_SECRET_KEY = _clean_env(os.getenv("STRIPE_SECRET_KEY") or "")
STRIPE_API_VERSION = _clean_env(os.getenv("STRIPE_API_VERSION") or "")

# Pages de succès/annulation du checkout (relatives à l'origine de la boutique)
# {CHECKOUT_SESSION_ID} est remplacé par Stripe lors de la redirection
CHECKOUT_SUCCESS_PATH = os.getenv("CHECKOUT_SUCCESS_PATH", "/payment-success?session_id={CHECKOUT_SESSION_ID}")
CHECKOUT_CANCEL_PATH = os.getenv("CHECKOUT_CANCEL_PATH", "/cart")

DEFAULT_CURRENCY = _clean_env(os.getenv("DEFAULT_CURRENCY") or "usd").lower()
DEFAULT_PAYMENT_METHOD_TYPES = ["card"]

# Origine de repli quand la requête n'a pas d'en-tête Origin
BASE_URL = _clean_env(os.getenv("BASE_URL") or "http://localhost:5173")

# Catalogue: "supabase", "local" ou "auto" (Supabase si configuré, sinon catalogue local)
MEDICINE_DATA_SOURCE = _clean_env(os.getenv("MEDICINE_DATA_SOURCE") or "auto").lower()

# Réconciliation des commandes « pending » orphelines
STALE_PENDING_MINUTES = _int_env("STALE_PENDING_MINUTES", 120)

# Formulaire de contact: notification e-mail via Resend (facultative, message seulement loggé sinon)
RESEND_API_KEY = _clean_env(os.getenv("RESEND_API_KEY") or "")
CONTACT_ADMIN_EMAIL = _clean_env(os.getenv("CONTACT_ADMIN_EMAIL") or "")
CONTACT_EMAIL_FROM = _clean_env(os.getenv("CONTACT_EMAIL_FROM") or "MediCare <onboarding@resend.dev>")
