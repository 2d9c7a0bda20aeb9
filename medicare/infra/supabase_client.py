from typing import Optional
from supabase import create_client, Client
from medicare import config
from medicare.utils.errors import AuthenticationError, ConfigurationError

_supabase: Optional[Client] = None
_service_supabase: Optional[Client] = None

def get_supabase() -> Client:
    """Client 'anon' partagé (RLS actif): lectures publiques et Supabase Auth."""
    global _supabase
    if not config.SUPABASE_URL or not config.SUPABASE_ANON_KEY:
        raise ConfigurationError("SUPABASE_URL/SUPABASE_ANON_KEY not configured")
    if _supabase is None:
        _supabase = create_client(config.SUPABASE_URL, config.SUPABASE_ANON_KEY)
    return _supabase

def get_service_supabase() -> Client:
    """
    Client service-role (bypass RLS) pour les écritures côté serveur
    (commandes, statuts de paiement, back-office).
    """
    global _service_supabase
    if not config.SUPABASE_URL or not config.SUPABASE_SERVICE_KEY:
        raise ConfigurationError("SUPABASE_SERVICE_ROLE_KEY not configured")
    if _service_supabase is None:
        _service_supabase = create_client(config.SUPABASE_URL, config.SUPABASE_SERVICE_KEY)
    return _service_supabase

def get_user_supabase(user_token: str) -> Client:
    """
    Client Supabase 'anon' avec auth utilisateur (RLS actif).
    À utiliser pour opérer au nom d'un utilisateur sans polluer l'instance globale.
    """
    if not user_token:
        raise AuthenticationError("Authentication required")
    client = create_client(config.SUPABASE_URL, config.SUPABASE_ANON_KEY)
    client.postgrest.auth(user_token)
    return client
