from unittest.mock import MagicMock

import pytest

from medicare.orders import repository
from medicare.orders.models import OrderStatus
from medicare.utils.errors import PersistenceError


def _client_returning(data):
    client = MagicMock()
    table = client.table.return_value
    for attr in ("select", "update", "eq", "lt", "limit", "order"):
        getattr(table, attr).return_value = table
    table.execute.return_value = MagicMock(data=data)
    return client, table


def test_update_status_to_completed_sets_completed_at(monkeypatch):
    client, table = _client_returning([{"id": "o-1", "status": "completed"}])
    monkeypatch.setattr("medicare.infra.supabase_client.get_service_supabase", lambda: client)

    row = repository.update_status_if("o-1", expected=OrderStatus.PENDING, target=OrderStatus.COMPLETED)

    assert row["status"] == "completed"
    values = table.update.call_args[0][0]
    assert values["completed_at"] == values["updated_at"]
    table.eq.assert_any_call("status", "pending")


def test_update_status_to_cancelled_leaves_completed_at(monkeypatch):
    client, table = _client_returning([])
    monkeypatch.setattr("medicare.infra.supabase_client.get_service_supabase", lambda: client)

    assert repository.update_status_if("o-1", expected=OrderStatus.PENDING, target=OrderStatus.CANCELLED) is None
    assert "completed_at" not in table.update.call_args[0][0]


def test_fetch_stale_orders_least_recently_checked_first(monkeypatch):
    client, table = _client_returning([{"id": "o-1"}])
    monkeypatch.setattr("medicare.infra.supabase_client.get_service_supabase", lambda: client)

    assert repository.fetch_stale_pending_orders(60, limit=5) == [{"id": "o-1"}]
    assert table.order.call_args_list[0].args == ("updated_at",)
    assert table.order.call_args_list[0].kwargs == {"desc": False, "nullsfirst": True}
    table.limit.assert_called_once_with(5)


def test_touch_pending_order_guards_on_status(monkeypatch):
    client, table = _client_returning([{"id": "o-1"}])
    monkeypatch.setattr("medicare.infra.supabase_client.get_service_supabase", lambda: client)

    assert repository.touch_pending_order("o-1") is True
    assert set(table.update.call_args[0][0]) == {"updated_at"}
    table.eq.assert_any_call("status", "pending")

    table.execute.side_effect = RuntimeError("db down")
    with pytest.raises(PersistenceError):
        repository.touch_pending_order("o-1")
