"""
Sources de données du catalogue de médicaments.

Deux implémentations d'une même interface:
- SupabaseMedicineSource: table 'medicines' (recherche ilike, pagination range, count exact)
- LocalMedicineSource: catalogue fixe embarqué (mêmes filtres et pagination)
La source est choisie une seule fois à la création de l'application (select_medicine_source)
et stockée sur app.state; elle ne change jamais en cours d'exécution.
"""
from typing import Any, Dict, List, Optional
import logging

from fastapi import Request

from medicare import config
import medicare.infra.supabase_client as supabase_client
from medicare.medicines.local_data import LOCAL_CATEGORIES, LOCAL_MEDICINES
from medicare.utils.errors import ConfigurationError, PersistenceError

logger = logging.getLogger(__name__)

MEDICINES_TABLE = "medicines"
CATEGORIES_TABLE = "categories"
DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


def _page_bounds(page: int, page_size: int) -> tuple:
    page = max(int(page or 1), 1)
    page_size = min(max(int(page_size or DEFAULT_PAGE_SIZE), 1), MAX_PAGE_SIZE)
    start = (page - 1) * page_size
    return start, start + page_size - 1


class MedicineDataSource:
    """Interface commune: lister, lire un médicament, lister les catégories."""
    name = "abstract"

    def list_medicines(self, search: str = "", category: str = "", page: int = 1, page_size: int = DEFAULT_PAGE_SIZE) -> Dict[str, Any]:
        raise NotImplementedError

    def get_medicine(self, medicine_id: str) -> Optional[Dict[str, Any]]:
        raise NotImplementedError

    def list_categories(self) -> List[Dict[str, Any]]:
        raise NotImplementedError


class SupabaseMedicineSource(MedicineDataSource):
    name = "supabase"

    def list_medicines(self, search: str = "", category: str = "", page: int = 1, page_size: int = DEFAULT_PAGE_SIZE) -> Dict[str, Any]:
        start, end = _page_bounds(page, page_size)
        try:
            query = supabase_client.get_supabase().table(MEDICINES_TABLE).select("*", count="exact")
            if category and category != "all":
                query = query.eq("category", category)
            if search:
                query = query.ilike("name", f"%{search}%")
            res = query.order("name", desc=False).range(start, end).execute()
        except Exception as e:
            logger.exception("medicines.supabase.list_medicines failed search=%s category=%s", search, category)
            raise PersistenceError(f"Failed to load medicines: {e}")
        data = res.data or []
        count = res.count if getattr(res, "count", None) is not None else len(data)
        return {"data": data, "count": count, "hasMore": end + 1 < count}

    def get_medicine(self, medicine_id: str) -> Optional[Dict[str, Any]]:
        try:
            res = (
                supabase_client.get_supabase()
                .table(MEDICINES_TABLE)
                .select("*")
                .eq("id", medicine_id)
                .limit(1)
                .execute()
            )
        except Exception as e:
            logger.exception("medicines.supabase.get_medicine failed id=%s", medicine_id)
            raise PersistenceError(f"Failed to load medicine: {e}")
        rows = res.data or []
        return rows[0] if rows else None

    def list_categories(self) -> List[Dict[str, Any]]:
        try:
            res = (
                supabase_client.get_supabase()
                .table(CATEGORIES_TABLE)
                .select("id, name, description")
                .order("name", desc=False)
                .execute()
            )
        except Exception as e:
            logger.exception("medicines.supabase.list_categories failed")
            raise PersistenceError(f"Failed to load categories: {e}")
        return res.data or []


class LocalMedicineSource(MedicineDataSource):
    name = "local"

    def __init__(self, medicines: Optional[List[Dict[str, Any]]] = None, categories: Optional[List[Dict[str, Any]]] = None):
        self._medicines = list(LOCAL_MEDICINES if medicines is None else medicines)
        self._categories = list(LOCAL_CATEGORIES if categories is None else categories)

    def list_medicines(self, search: str = "", category: str = "", page: int = 1, page_size: int = DEFAULT_PAGE_SIZE) -> Dict[str, Any]:
        needle = (search or "").strip().lower()
        rows = [
            m for m in self._medicines
            if (not category or category == "all" or m.get("category") == category)
            and (not needle or needle in str(m.get("name", "")).lower())
        ]
        rows.sort(key=lambda m: str(m.get("name", "")))
        start, end = _page_bounds(page, page_size)
        return {"data": rows[start:end + 1], "count": len(rows), "hasMore": end + 1 < len(rows)}

    def get_medicine(self, medicine_id: str) -> Optional[Dict[str, Any]]:
        return next((m for m in self._medicines if str(m.get("id")) == str(medicine_id)), None)

    def list_categories(self) -> List[Dict[str, Any]]:
        return list(self._categories)


def select_medicine_source(mode: Optional[str] = None) -> MedicineDataSource:
    """
    Choisit la source du catalogue:
    - "supabase": exige SUPABASE_URL/SUPABASE_ANON_KEY (ConfigurationError sinon)
    - "local": catalogue embarqué
    - "auto": Supabase si configuré, sinon local
    """
    mode = (mode or config.MEDICINE_DATA_SOURCE or "auto").lower()
    supabase_ready = bool(config.SUPABASE_URL and config.SUPABASE_ANON_KEY)
    if mode == "supabase":
        if not supabase_ready:
            raise ConfigurationError("MEDICINE_DATA_SOURCE=supabase requires SUPABASE_URL and SUPABASE_ANON_KEY")
        return SupabaseMedicineSource()
    if mode == "local":
        return LocalMedicineSource()
    if mode == "auto":
        return SupabaseMedicineSource() if supabase_ready else LocalMedicineSource()
    raise ConfigurationError(f"Unknown MEDICINE_DATA_SOURCE: {mode}")


def get_medicine_source(request: Request) -> MedicineDataSource:
    """Dépendance FastAPI: source choisie au démarrage (app.state.medicine_source)."""
    source = getattr(request.app.state, "medicine_source", None)
    if source is None:
        raise ConfigurationError("Medicine data source not configured")
    return source
