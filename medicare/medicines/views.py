from fastapi import APIRouter, Depends, Query

from medicare.medicines.sources import MedicineDataSource, get_medicine_source
from medicare.utils.errors import NotFoundError
from medicare.utils.responses import ok

router = APIRouter(prefix="/api/v1/medicines", tags=["Medicines API"])

@router.get("")
def list_medicines(
    search: str = "",
    category: str = "",
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=20, ge=1, le=100),
    source: MedicineDataSource = Depends(get_medicine_source),
):
    """Catalogue paginé: {"data": [...], "count", "hasMore"} sous l'enveloppe standard."""
    return ok(source.list_medicines(search=search.strip(), category=category.strip(), page=page, page_size=page_size))

@router.get("/categories")
def list_categories(source: MedicineDataSource = Depends(get_medicine_source)):
    return ok(source.list_categories())

@router.get("/{medicine_id}")
def get_medicine(medicine_id: str, source: MedicineDataSource = Depends(get_medicine_source)):
    medicine = source.get_medicine(medicine_id)
    if not medicine:
        raise NotFoundError("Medicine", medicine_id)
    return ok(medicine)
