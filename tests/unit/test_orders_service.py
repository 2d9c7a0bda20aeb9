from datetime import datetime, timedelta, timezone

import pytest

from medicare.orders import service as orders_service
from medicare.utils.errors import (
    CheckoutValidationError,
    InvalidTransitionError,
    NotFoundError,
    PermissionDeniedError,
    PersistenceError,
)

OWNER = {"id": "u1", "role": "user"}
OTHER = {"id": "u2", "role": "user"}
ADMIN = {"id": "a1", "role": "admin"}


def _old(minutes):
    return (datetime.now(timezone.utc) - timedelta(minutes=minutes)).isoformat()


def test_get_order_for_owner_other_and_admin(orders_store):
    order = orders_store.add(user_id="u1")

    assert orders_service.get_order_for_user(order["id"], OWNER)["id"] == order["id"]
    assert orders_service.get_order_for_user(order["id"], ADMIN)["id"] == order["id"]
    with pytest.raises(PermissionDeniedError):
        orders_service.get_order_for_user(order["id"], OTHER)
    with pytest.raises(NotFoundError) as exc:
        orders_service.get_order_for_user("missing", OWNER)
    assert exc.value.status_code == 404


def test_list_all_orders_rejects_unknown_status(orders_store):
    with pytest.raises(CheckoutValidationError):
        orders_service.list_all_orders(status="shipped")
    orders_store.add(status="completed")
    orders_store.add(status="pending")
    assert len(orders_service.list_all_orders(status="COMPLETED")) == 1


def test_change_status_allowed(orders_store):
    order = orders_store.add(status="completed")
    updated = orders_service.change_status(order["id"], "refunded")
    assert updated["status"] == "refunded"


def test_change_status_forbidden_transition(orders_store):
    order = orders_store.add(status="cancelled")
    with pytest.raises(InvalidTransitionError) as exc:
        orders_service.change_status(order["id"], "completed")
    assert exc.value.status_code == 409
    assert orders_store.rows[order["id"]]["status"] == "cancelled"


def test_change_status_concurrent_write(orders_store, monkeypatch):
    order = orders_store.add(status="pending")
    monkeypatch.setattr("medicare.orders.repository.update_status_if", lambda order_id, expected, target: None)
    with pytest.raises(InvalidTransitionError):
        orders_service.change_status(order["id"], "cancelled")


def test_change_status_unknown_status_and_order(orders_store):
    with pytest.raises(CheckoutValidationError):
        orders_service.change_status("x", "shipped")
    with pytest.raises(NotFoundError):
        orders_service.change_status("x", "cancelled")


def test_refresh_order_without_session(orders_store):
    order = orders_store.add(user_id="u1")
    result = orders_service.refresh_order(order["id"], OWNER)
    assert result["verification"] is None
    assert result["order"]["status"] == "pending"


def test_refresh_order_completes_paid_session(orders_store, fake_stripe):
    from medicare.payments import service as payments_service
    created = payments_service.create_checkout_session(
        items=[{"name": "Ibuprofen 400mg", "price": 12.99, "quantity": 1}], user_id="u1"
    )
    fake_stripe.pay(created["sessionId"])

    result = orders_service.refresh_order(created["orderId"], OWNER)

    assert result["verification"]["orderUpdated"] is True
    assert result["order"]["status"] == "completed"


def test_reconcile_stale_orders(orders_store, fake_stripe):
    # Arrange: une commande payée, une non payée, une sans session, une récente
    from medicare.payments import service as payments_service
    paid = payments_service.create_checkout_session(items=[{"name": "A", "price": 1, "quantity": 1}])
    unpaid = payments_service.create_checkout_session(items=[{"name": "B", "price": 2, "quantity": 1}])
    fake_stripe.pay(paid["sessionId"])
    orders_store.rows[paid["orderId"]]["created_at"] = _old(300)
    orders_store.rows[unpaid["orderId"]]["created_at"] = _old(300)
    no_session = orders_store.add(created_at=_old(300))
    recent = orders_store.add()

    # Act
    counts = orders_service.reconcile_stale_orders(120)

    # Assert
    assert counts == {"checked": 3, "completed": 1, "cancelled": 1, "unchanged": 1, "errors": 0}
    assert orders_store.rows[paid["orderId"]]["status"] == "completed"
    assert orders_store.rows[unpaid["orderId"]]["status"] == "pending"
    assert orders_store.rows[no_session["id"]]["status"] == "cancelled"
    assert orders_store.rows[recent["id"]]["status"] == "pending"


def test_reconcile_dry_run_writes_nothing(orders_store, fake_stripe):
    no_session = orders_store.add(created_at=_old(300))
    counts = orders_service.reconcile_stale_orders(120, dry_run=True)
    assert counts["cancelled"] == 1
    assert orders_store.rows[no_session["id"]]["status"] == "pending"


def test_reconcile_continues_after_error(orders_store, fake_stripe):
    broken = orders_store.add(created_at=_old(300), stripe_session_id="cs_unknown")
    no_session = orders_store.add(created_at=_old(300))

    counts = orders_service.reconcile_stale_orders(120)

    assert counts["errors"] == 1
    assert counts["cancelled"] == 1
    assert orders_store.rows[broken["id"]]["status"] == "pending"
    assert orders_store.rows[no_session["id"]]["status"] == "cancelled"


def test_reconcile_propagates_listing_failure(monkeypatch):
    def _boom(older_than_minutes, limit=100):
        raise PersistenceError("Failed to fetch pending orders: db down")
    monkeypatch.setattr("medicare.orders.repository.fetch_stale_pending_orders", _boom)
    with pytest.raises(PersistenceError):
        orders_service.reconcile_stale_orders(60)


def _abandoned_checkout(orders_store, minutes_ago):
    from medicare.payments import service as payments_service
    created = payments_service.create_checkout_session(items=[{"name": "C", "price": 3, "quantity": 1}])
    orders_store.rows[created["orderId"]]["created_at"] = _old(minutes_ago)
    return created


def test_reconcile_cancels_expired_sessions(orders_store, fake_stripe):
    expired = _abandoned_checkout(orders_store, 2000)
    still_open = _abandoned_checkout(orders_store, 300)
    fake_stripe.expire(expired["sessionId"])

    counts = orders_service.reconcile_stale_orders(120)

    assert counts == {"checked": 2, "completed": 0, "cancelled": 1, "unchanged": 1, "errors": 0}
    assert orders_store.rows[expired["orderId"]]["status"] == "cancelled"
    assert orders_store.rows[still_open["orderId"]]["status"] == "pending"


def test_reconcile_progresses_past_open_sessions_when_limit_is_small(orders_store, fake_stripe):
    # Arrange: plus de sessions ouvertes que la taille du lot, puis une commande sans session
    first = _abandoned_checkout(orders_store, 500)
    second = _abandoned_checkout(orders_store, 400)
    no_session = orders_store.add(created_at=_old(300))

    # Act
    for _ in range(3):
        orders_service.reconcile_stale_orders(120, limit=2)

    # Assert
    assert orders_store.rows[no_session["id"]]["status"] == "cancelled"
    assert orders_store.rows[first["orderId"]]["status"] == "pending"
    assert orders_store.rows[second["orderId"]]["status"] == "pending"
    assert orders_store.touches >= 2


def test_reconcile_expired_sessions_drain_backlog(orders_store, fake_stripe):
    backlog = [_abandoned_checkout(orders_store, 3000 - i) for i in range(5)]
    for created in backlog:
        fake_stripe.expire(created["sessionId"])

    orders_service.reconcile_stale_orders(120, limit=2)
    orders_service.reconcile_stale_orders(120, limit=2)
    orders_service.reconcile_stale_orders(120, limit=2)

    assert all(orders_store.rows[c["orderId"]]["status"] == "cancelled" for c in backlog)


def test_admin_completion_sets_completed_at(orders_store):
    order = orders_store.add(status="pending")
    updated = orders_service.change_status(order["id"], "completed")
    assert updated["status"] == "completed"
    assert updated["completed_at"]
