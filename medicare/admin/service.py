# module medicare.admin.service

from typing import Any, Dict, List, Optional
from medicare import config
from medicare.contact import service as contact_service
from medicare.orders import service as orders_service
from medicare.profiles import service as profiles_service

def list_orders(limit: int = 100, status: Optional[str] = None) -> List[Dict[str, Any]]:
    return orders_service.list_all_orders(limit=limit, status=status)

def update_order_status(order_id: str, status: str) -> Dict[str, Any]:
    return orders_service.change_status(order_id, status)

def reconcile_orders(older_than_minutes: Optional[int] = None, limit: int = 100, dry_run: bool = False) -> Dict[str, int]:
    minutes = config.STALE_PENDING_MINUTES if older_than_minutes is None else older_than_minutes
    return orders_service.reconcile_stale_orders(minutes, limit=limit, dry_run=dry_run)

def list_users(limit: int = 100) -> List[Dict[str, Any]]:
    return profiles_service.list_profiles(limit=limit)

def update_user_role(actor: Dict[str, Any], user_id: str, role: Any) -> Dict[str, Any]:
    return profiles_service.change_role(actor, user_id, role)

def list_contact_submissions(limit: int = 100, status: Optional[str] = None) -> List[Dict[str, Any]]:
    return contact_service.list_submissions(limit=limit, status=status)

def update_contact_status(submission_id: str, status: str) -> Dict[str, Any]:
    return contact_service.change_status(submission_id, status)
