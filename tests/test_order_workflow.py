import asyncio

import pytest

from planeta_agua.core.exceptions import ClientInputError, NotFoundError, PersistenceError
from planeta_agua.orders.workflow import (
    OrderLine, OrderWorkflow, OrderWriteOutcome, lines_from_cart_items, lines_from_order_items,
    status_for_payment_method,
)

from .fakes import InMemoryStore

LINES = [OrderLine(product_id=1, quantity=2, price_at_purchase=10.0)]


def run(coro):
    return asyncio.run(coro)


def test_write_order_commits_header_then_items():
    store = InMemoryStore()

    result = run(OrderWorkflow(store).write_order(7, LINES, 20.0, "Rua A, Centro, Curitiba - PR"))

    assert result.outcome is OrderWriteOutcome.COMMITTED
    assert result.committed
    assert store.data["orders"][0]["id"] == result.order["id"]
    item = store.data["order_items"][0]
    assert item["order_id"] == result.order["id"]
    assert (item["product_id"], item["quantity"], item["price_at_purchase"]) == (1, 2, 10.0)
    operations = [(table, op) for table, op, _ in store.calls]
    assert operations == [("orders", "insert"), ("order_items", "insert")]


def test_header_failure_writes_nothing():
    store = InMemoryStore()
    store.fail("orders", "insert", message="orders unavailable")

    result = run(OrderWorkflow(store).write_order(7, LINES, 20.0, "addr"))

    assert result.outcome is OrderWriteOutcome.NOT_WRITTEN
    assert result.error.message == "orders unavailable"
    assert not store.data.get("order_items")
    assert all(table != "order_items" for table, _, _ in store.calls)


def test_item_failure_deletes_header():
    store = InMemoryStore()
    store.fail("order_items", "insert", message="bad product")

    result = run(OrderWorkflow(store).write_order(7, LINES, 20.0, "addr"))

    assert result.outcome is OrderWriteOutcome.ROLLED_BACK
    assert result.error.message == "bad product"
    assert store.data["orders"] == []
    assert ("orders", "delete", {"id": result.order["id"]}) in store.calls


def test_failed_compensation_reports_orphan():
    store = InMemoryStore()
    store.fail("order_items", "insert", message="bad product")
    store.fail("orders", "delete", message="delete refused")

    result = run(OrderWorkflow(store).write_order(7, LINES, 20.0, "addr"))

    assert result.outcome is OrderWriteOutcome.ORPHANED
    assert result.error.message == "bad product"
    assert len(store.data["orders"]) == 1


def test_identical_orders_are_not_deduplicated():
    store = InMemoryStore()
    workflow = OrderWorkflow(store)
    body = {"items": [{"product_id": 1, "quantity": 1, "price_at_purchase": 5}], "total": 5, "shipping_address": "x"}

    first = run(workflow.create_order(7, body))
    second = run(workflow.create_order(7, body))

    assert first["id"] != second["id"]
    assert len(store.data["orders"]) == 2


def test_create_order_rejects_empty_items():
    store = InMemoryStore()
    with pytest.raises(ClientInputError):
        run(OrderWorkflow(store).create_order(7, {"items": [], "total": 5, "shipping_address": "x"}))
    assert store.calls == []


def test_create_order_raises_persistence_error_after_rollback():
    store = InMemoryStore()
    store.fail("order_items", "insert", message="fk violation")
    body = {"items": [{"product_id": 1, "quantity": 1, "price_at_purchase": 5}], "total": 5, "shipping_address": "x"}

    with pytest.raises(PersistenceError) as exc_info:
        run(OrderWorkflow(store).create_order(7, body))

    assert exc_info.value.message == "Erro ao salvar os itens do pedido."
    assert exc_info.value.details == "fk violation"


def test_process_order_unknown_address():
    store = InMemoryStore()
    body = {"items": [{"id": 1, "price": 10, "quantity": 2}], "total": 20, "addressId": 99}
    with pytest.raises(NotFoundError):
        run(OrderWorkflow(store).process_order(7, body))
    assert "orders" not in store.data


def test_validation_is_shallow():
    store = InMemoryStore()
    body = {"items": [{"product_id": 1, "quantity": -3, "price_at_purchase": -1}], "total": -9, "shipping_address": "x"}

    order = run(OrderWorkflow(store).create_order(7, body))

    assert order["total"] == -9
    assert store.data["order_items"][0]["quantity"] == -3


def test_line_mappers_use_client_fields_verbatim():
    assert lines_from_order_items([{"product_id": 3, "quantity": 1, "price_at_purchase": 9.9}]) == [
        OrderLine(3, 1, 9.9)
    ]
    assert lines_from_cart_items([{"id": 3, "quantity": 1, "price": 9.9}]) == [OrderLine(3, 1, 9.9)]


@pytest.mark.parametrize("method,status", [("PIX", "pending"), ("credit", "confirmed"), (None, "confirmed")])
def test_status_for_payment_method(method, status):
    assert status_for_payment_method(method) == status
