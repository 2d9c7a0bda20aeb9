import os
import threading
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Generator, List, Optional

import pytest
from fastapi.testclient import TestClient
from unittest.mock import MagicMock

# Variables lues à l'import de medicare.config / au démarrage de l'app
os.environ["DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS"] = "1"
os.environ["MEDICINE_DATA_SOURCE"] = "local"
os.environ["CORS_ORIGINS"] = "*"

from medicare.app import app as fastapi_app
from medicare.orders.models import OrderStatus
from medicare.utils.security import get_optional_user, require_admin, require_user

# Marquage automatique selon le dossier
def pytest_collection_modifyitems(config, items):
    for item in items:
        nodeid = item.nodeid.replace("\\", "/")
        if "tests/unit/" in nodeid:
            item.add_marker(pytest.mark.unit)
        elif "tests/integration/" in nodeid:
            item.add_marker(pytest.mark.integration)
        elif "tests/functional/" in nodeid:
            item.add_marker(pytest.mark.functional)

TEST_USER: Dict[str, Any] = {
    "id": "test-user",
    "email": "test@example.com",
    "full_name": "Test User",
    "role": "user",
    "token": "fake-token",
}

ADMIN_USER: Dict[str, Any] = {
    "id": "admin-user-id",
    "email": "admin@example.com",
    "full_name": "Admin User",
    "role": "admin",
    "token": "fake-admin-token",
}

@pytest.fixture(scope="session")
def app():
    return fastapi_app

@pytest.fixture()
def client(app) -> Generator[TestClient, None, None]:
    with TestClient(app) as c:
        yield c

# Simuler un utilisateur authentifié pour les endpoints protégés
@pytest.fixture(autouse=True)
def _override_require_user(app):
    app.dependency_overrides[require_user] = lambda: dict(TEST_USER)
    try:
        yield
    finally:
        app.dependency_overrides.pop(require_user, None)

@pytest.fixture
def as_guest(app):
    """Checkout invité: aucune identité résolue."""
    app.dependency_overrides[get_optional_user] = lambda: None
    yield
    app.dependency_overrides.pop(get_optional_user, None)

@pytest.fixture
def as_signed_in(app):
    app.dependency_overrides[get_optional_user] = lambda: dict(TEST_USER)
    yield dict(TEST_USER)
    app.dependency_overrides.pop(get_optional_user, None)

@pytest.fixture
def authenticated_admin_client(app, client):
    app.dependency_overrides[require_admin] = lambda: dict(ADMIN_USER)
    yield client
    app.dependency_overrides.pop(require_admin, None)

# Clé Stripe factice + aucun accès réseau Supabase
@pytest.fixture(autouse=True)
def _mock_config_and_supabase(monkeypatch):
    monkeypatch.setattr("medicare.config.STRIPE_SECRET_KEY", "sk_test_dummy")
    monkeypatch.setattr("medicare.infra.supabase_client.get_supabase", lambda: MagicMock())
    monkeypatch.setattr("medicare.infra.supabase_client.get_service_supabase", lambda: MagicMock())
    monkeypatch.setattr("medicare.infra.supabase_client.get_user_supabase", lambda token: MagicMock())
    monkeypatch.setattr("medicare.health.service.health_supabase_info", lambda: {"connect_ok": True, "tables": {}})


class FakeOrders:
    """
    Table 'orders' en mémoire, branchée à la place des repositories payments/orders.
    complete_if_pending reproduit l'écriture conditionnelle (verrou = atomicité côté base).
    """

    def __init__(self):
        self.rows: Dict[str, Dict[str, Any]] = {}
        self.completion_writes = 0
        self.touches = 0
        self._lock = threading.Lock()

    def add(self, **values) -> Dict[str, Any]:
        order_id = values.pop("id", None) or str(uuid.uuid4())
        row = {
            "id": order_id,
            "user_id": None,
            "items": [],
            "total_amount": 0,
            "currency": "usd",
            "status": OrderStatus.PENDING.value,
            "stripe_session_id": None,
            "stripe_payment_intent_id": None,
            "customer_email": None,
            "customer_name": None,
            "shipping_address": None,
            "completed_at": None,
            "created_at": datetime.now(timezone.utc).isoformat(),
        }
        row.update(values)
        self.rows[order_id] = row
        return dict(row)

    # --- payments.repository ---
    def insert_pending_order(self, *, user_id, items, total_amount, currency, shipping_address):
        return self.add(user_id=user_id, items=items, total_amount=total_amount, currency=currency, shipping_address=shipping_address)

    def attach_session(self, order_id, *, session_id, payment_intent_id):
        self.rows[order_id]["stripe_session_id"] = session_id
        if payment_intent_id:
            self.rows[order_id]["stripe_payment_intent_id"] = payment_intent_id

    def find_order_by_session_id(self, session_id):
        for row in self.rows.values():
            if row.get("stripe_session_id") == session_id:
                return dict(row)
        return None

    def complete_order_if_pending(self, order_id, *, customer_email, customer_name, payment_intent_id):
        with self._lock:
            row = self.rows.get(order_id)
            if not row or row["status"] != OrderStatus.PENDING.value:
                return False
            row.update({
                "status": OrderStatus.COMPLETED.value,
                "completed_at": datetime.now(timezone.utc).isoformat(),
                "customer_email": customer_email,
                "customer_name": customer_name,
            })
            if payment_intent_id:
                row["stripe_payment_intent_id"] = payment_intent_id
            self.completion_writes += 1
            return True

    def get_order_status(self, order_id):
        row = self.rows.get(order_id)
        return row["status"] if row else None

    # --- orders.repository ---
    def fetch_user_orders(self, user_id, limit=50):
        return [dict(r) for r in self.rows.values() if r.get("user_id") == user_id][:limit]

    def fetch_all_orders(self, limit=100, status=None):
        return [dict(r) for r in self.rows.values() if not status or r["status"] == status][:limit]

    def get_order(self, order_id):
        row = self.rows.get(order_id)
        return dict(row) if row else None

    def update_status_if(self, order_id, *, expected, target):
        with self._lock:
            row = self.rows.get(order_id)
            if not row or row["status"] != expected.value:
                return None
            now = datetime.now(timezone.utc).isoformat()
            row["status"] = target.value
            row["updated_at"] = now
            if target is OrderStatus.COMPLETED:
                row["completed_at"] = now
            return dict(row)

    def fetch_stale_pending_orders(self, older_than_minutes, limit=100):
        # updated_at croissant, jamais vérifiées (None) d'abord, puis created_at
        cutoff = datetime.now(timezone.utc) - timedelta(minutes=older_than_minutes)
        stale = [
            dict(r) for r in self.rows.values()
            if r["status"] == OrderStatus.PENDING.value and datetime.fromisoformat(r["created_at"]) < cutoff
        ]
        stale.sort(key=lambda r: (r.get("updated_at") is not None, r.get("updated_at") or "", r["created_at"]))
        return stale[:limit]

    def touch_pending_order(self, order_id):
        row = self.rows.get(order_id)
        if not row or row["status"] != OrderStatus.PENDING.value:
            return False
        row["updated_at"] = datetime.now(timezone.utc).isoformat()
        self.touches += 1
        return True


@pytest.fixture
def orders_store(monkeypatch) -> FakeOrders:
    store = FakeOrders()
    for name in ("insert_pending_order", "attach_session", "find_order_by_session_id", "complete_order_if_pending", "get_order_status"):
        monkeypatch.setattr(f"medicare.payments.repository.{name}", getattr(store, name))
    for name in ("fetch_user_orders", "fetch_all_orders", "get_order", "update_status_if", "fetch_stale_pending_orders", "touch_pending_order"):
        monkeypatch.setattr(f"medicare.orders.repository.{name}", getattr(store, name))
    return store


class FakeStripe:
    """Sessions Checkout en mémoire (create_session / get_session du stripe_client)."""

    def __init__(self):
        self.sessions: Dict[str, Dict[str, Any]] = {}
        self.created: List[Dict[str, Any]] = []

    def create_session(self, *, line_items, success_url, cancel_url, payment_method_types, metadata, mode="payment"):
        session_id = f"cs_test_{len(self.sessions) + 1}"
        amount_total = sum(li["price_data"]["unit_amount"] * li["quantity"] for li in line_items)
        session = {
            "id": session_id,
            "url": f"https://checkout.stripe.com/c/pay/{session_id}",
            "status": "open",
            "payment_status": "unpaid",
            "payment_intent": None,
            "amount_total": amount_total,
            "currency": line_items[0]["price_data"]["currency"] if line_items else None,
            "metadata": dict(metadata),
            "customer_details": None,
        }
        self.sessions[session_id] = session
        self.created.append({
            "line_items": line_items,
            "success_url": success_url,
            "cancel_url": cancel_url,
            "payment_method_types": payment_method_types,
            "metadata": metadata,
        })
        return dict(session)

    def get_session(self, session_id):
        from medicare.utils.errors import PaymentProviderError
        if session_id not in self.sessions:
            raise PaymentProviderError(f"No such checkout.session: '{session_id}'")
        return dict(self.sessions[session_id])

    def pay(self, session_id, *, email="buyer@example.com", name="Jane Buyer", amount_total=None):
        session = self.sessions[session_id]
        session["status"] = "complete"
        session["payment_status"] = "paid"
        session["payment_intent"] = f"pi_{session_id}"
        session["customer_details"] = {"email": email, "name": name}
        if amount_total is not None:
            session["amount_total"] = amount_total

    def expire(self, session_id):
        """Checkout abandonné: Stripe expire la session (24 h par défaut)."""
        self.sessions[session_id]["status"] = "expired"


@pytest.fixture
def fake_stripe(monkeypatch) -> FakeStripe:
    fake = FakeStripe()
    monkeypatch.setattr("medicare.payments.stripe_client.create_session", fake.create_session)
    monkeypatch.setattr("medicare.payments.stripe_client.get_session", fake.get_session)
    return fake


class FakeCart:
    """Table 'cart_items' en mémoire (mêmes signatures que medicare.cart.repository)."""

    def __init__(self):
        self.rows: List[Dict[str, Any]] = []

    def list_cart_items(self, user_id, *, user_token):
        return [dict(r) for r in self.rows if r["user_id"] == user_id]

    def get_cart_item(self, user_id, medicine_id, *, user_token):
        for r in self.rows:
            if r["user_id"] == user_id and r["medicine_id"] == medicine_id:
                return dict(r)
        return None

    def insert_cart_item(self, user_id, medicine_id, quantity, *, user_token):
        row = {"id": str(uuid.uuid4()), "user_id": user_id, "medicine_id": medicine_id, "quantity": quantity}
        self.rows.append(row)
        return dict(row)

    def update_cart_item_quantity(self, item_id, quantity, *, user_token):
        for r in self.rows:
            if r["id"] == item_id:
                r["quantity"] = quantity
                return dict(r)
        return None

    def delete_cart_item(self, user_id, medicine_id, *, user_token):
        self.rows = [r for r in self.rows if not (r["user_id"] == user_id and r["medicine_id"] == medicine_id)]

    def clear_cart(self, user_id, *, user_token):
        self.rows = [r for r in self.rows if r["user_id"] != user_id]


@pytest.fixture
def cart_store(monkeypatch) -> FakeCart:
    store = FakeCart()
    for name in ("list_cart_items", "get_cart_item", "insert_cart_item", "update_cart_item_quantity", "delete_cart_item", "clear_cart"):
        monkeypatch.setattr(f"medicare.cart.repository.{name}", getattr(store, name))
    return store


class FakeProfiles:
    """Table 'profiles' en mémoire; auth_syncs trace les recopies du rôle vers Supabase Auth."""

    def __init__(self):
        self.rows: Dict[str, Dict[str, Any]] = {}
        self.auth_syncs: List[tuple] = []

    def add(self, **values) -> Dict[str, Any]:
        row = {
            "id": values.pop("id", None) or str(uuid.uuid4()),
            "email": None,
            "full_name": None,
            "phone": None,
            "address": None,
            "role": "user",
            "created_at": datetime.now(timezone.utc).isoformat(),
            "updated_at": None,
        }
        row.update(values)
        self.rows[row["id"]] = row
        return dict(row)

    def get_profile(self, user_id, *, user_token=None):
        row = self.rows.get(user_id)
        return dict(row) if row else None

    def fetch_profiles(self, limit=100):
        rows = sorted(self.rows.values(), key=lambda r: r["created_at"], reverse=True)
        return [dict(r) for r in rows[:limit]]

    def update_profile(self, user_id, values, *, user_token):
        row = self.rows.get(user_id)
        if not row:
            return None
        row.update(values)
        return dict(row)

    def update_role(self, user_id, role):
        return self.update_profile(user_id, {"role": role}, user_token=None)

    def set_auth_user_role(self, user_id, role):
        self.auth_syncs.append((user_id, role))
        return True


@pytest.fixture
def profiles_store(monkeypatch) -> FakeProfiles:
    store = FakeProfiles()
    for name in ("get_profile", "fetch_profiles", "update_profile", "update_role", "set_auth_user_role"):
        monkeypatch.setattr(f"medicare.profiles.repository.{name}", getattr(store, name))
    return store


class FakeContact:
    """Table 'contact_submissions' en mémoire et notifications envoyées (sent)."""

    def __init__(self):
        self.rows: Dict[str, Dict[str, Any]] = {}
        self.sent: List[Dict[str, Any]] = []

    def insert_submission(self, *, name, email, subject, message, user_id):
        row = {
            "id": str(uuid.uuid4()),
            "name": name,
            "email": email,
            "subject": subject,
            "message": message,
            "user_id": user_id,
            "status": "new",
            "created_at": datetime.now(timezone.utc).isoformat(),
            "updated_at": None,
        }
        self.rows[row["id"]] = row
        return dict(row)

    def fetch_submissions(self, limit=100, status=None):
        return [dict(r) for r in self.rows.values() if not status or r["status"] == status][:limit]

    def fetch_user_submissions(self, user_id, limit=50):
        return [dict(r) for r in self.rows.values() if r["user_id"] == user_id][:limit]

    def update_submission_status(self, submission_id, status):
        row = self.rows.get(submission_id)
        if not row:
            return None
        row["status"] = status.value
        return dict(row)

    def send_contact_email(self, submission):
        self.sent.append(dict(submission))
        return True


@pytest.fixture
def contact_store(monkeypatch) -> FakeContact:
    store = FakeContact()
    for name in ("insert_submission", "fetch_submissions", "fetch_user_submissions", "update_submission_status"):
        monkeypatch.setattr(f"medicare.contact.repository.{name}", getattr(store, name))
    monkeypatch.setattr("medicare.contact.notifier.send_contact_email", store.send_contact_email)
    return store
