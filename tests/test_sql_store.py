import asyncio

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from planeta_agua.database.core import StoreError, UNIQUE_VIOLATION
from planeta_agua.database.sql_store import SqlStore
from planeta_agua.orders.service import OrderService
from planeta_agua.orders.workflow import OrderLine, OrderWorkflow, OrderWriteOutcome


def run(coro):
    return asyncio.run(coro)


@pytest.fixture
def sql_store():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    store = SqlStore(engine=engine)
    run(store.connect())
    yield store
    run(store.close())


def test_insert_and_find_with_string_ids(sql_store):
    users = sql_store.table("users")
    user = run(users.insert({"name": "Ana", "email": "ana@x.com", "password_hash": "h"}))

    found = run(users.find_one({"id": str(user["id"])}, columns="id, name"))

    assert found == {"id": user["id"], "name": "Ana"}
    assert user["created_at"] is not None


def test_unique_violation_code(sql_store):
    users = sql_store.table("users")
    run(users.insert({"name": "Ana", "email": "ana@x.com", "password_hash": "h"}))

    with pytest.raises(StoreError) as exc_info:
        run(users.insert({"name": "Ana 2", "email": "ana@x.com", "password_hash": "h"}))

    assert exc_info.value.code == UNIQUE_VIOLATION
    assert exc_info.value.is_unique_violation


def test_update_and_delete_are_filtered(sql_store):
    user = run(sql_store.table("users").insert({"name": "Ana", "email": "ana@x.com", "password_hash": "h"}))
    addresses = sql_store.table("addresses")
    address = run(addresses.insert({
        "user_id": user["id"], "street": "a", "neighborhood": "b", "city": "c", "state": "d", "zip_code": "e",
    }))

    assert run(addresses.update({"id": address["id"], "user_id": "999"}, {"street": "x"})) == []
    updated = run(addresses.update({"id": address["id"], "user_id": str(user["id"])}, {"street": "x"}))
    assert updated[0]["street"] == "x"

    run(addresses.delete({"id": address["id"], "user_id": "999"}))
    assert len(run(addresses.find())) == 1
    run(addresses.delete({"id": address["id"], "user_id": user["id"]}))
    assert run(addresses.find()) == []


def test_unknown_table(sql_store):
    with pytest.raises(StoreError):
        sql_store.table("nope")


def test_order_roundtrip_through_workflow(sql_store):
    user = run(sql_store.table("users").insert({"name": "Ana", "email": "ana@x.com", "password_hash": "h"}))
    product = run(sql_store.table("products").insert({"name": "Garrafa", "price": 10.0, "image_url": "g.png"}))

    result = run(OrderWorkflow(sql_store).write_order(
        str(user["id"]), [OrderLine(product["id"], 2, 10.0)], 20.0, "Rua A", status="confirmed",
    ))
    assert result.outcome is OrderWriteOutcome.COMMITTED

    orders = run(OrderService.get_user_orders(sql_store, str(user["id"])))
    assert len(orders) == 1
    assert orders[0]["status"] == "confirmed"
    assert orders[0]["order_items"] == [
        {"quantity": 2, "price_at_purchase": 10.0, "products": {"name": "Garrafa", "image_url": "g.png"}}
    ]


def test_batch_insert_is_all_or_nothing(sql_store):
    items = sql_store.table("order_items")
    with pytest.raises(StoreError):
        run(items.insert_many([
            {"order_id": 1, "product_id": 1, "quantity": 1, "price_at_purchase": 1.0},
            {"order_id": 1, "product_id": 1, "quantity": None, "price_at_purchase": 1.0},
        ]))
    assert run(items.find()) == []
