# planeta_agua/orders/workflow.py
"""
Two-step order writes with a compensating delete.

An order is written as a header row followed by one batch of line items.
The store offers no transaction across the two inserts, so a failed item
insert is undone by deleting the header. `OrderWriteResult.outcome` records
which of the possible end states was reached:

    COMMITTED    header and items were stored
    NOT_WRITTEN  the header insert failed, nothing was stored
    ROLLED_BACK  the items insert failed and the header was deleted again
    ORPHANED     the items insert failed and deleting the header failed too

A process crash between the two inserts also leaves an orphaned header; that
case is not detected here. Retried requests are not deduplicated, so two
identical submissions produce two orders.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional
import logging

from ..addresses.service import AddressService, format_shipping_address
from ..core.exceptions import NotFoundError, PersistenceError
from ..core.validation import ORDER_CREATE, ORDER_PROCESS
from ..database.core import RecordStore, StoreError

logger = logging.getLogger(__name__)

STATUS_PENDING = "pending"
STATUS_CONFIRMED = "confirmed"

# Payment method settled later by the gateway; its orders start as pending.
DEFERRED_PAYMENT_METHOD = "PIX"


class OrderWriteOutcome(str, Enum):
    COMMITTED = "committed"
    NOT_WRITTEN = "not_written"
    ROLLED_BACK = "rolled_back"
    ORPHANED = "orphaned"


@dataclass
class OrderLine:
    product_id: Any
    quantity: Any
    price_at_purchase: Any


@dataclass
class OrderWriteResult:
    outcome: OrderWriteOutcome
    order: Optional[Dict[str, Any]] = None
    items: Optional[List[Dict[str, Any]]] = None
    error: Optional[StoreError] = None

    @property
    def committed(self) -> bool:
        return self.outcome is OrderWriteOutcome.COMMITTED


def lines_from_order_items(items: Iterable[Dict[str, Any]]) -> List[OrderLine]:
    """Map `/orders` items, which carry product_id and price_at_purchase."""
    return [
        OrderLine(item.get("product_id"), item.get("quantity"), item.get("price_at_purchase"))
        for item in items
    ]


def lines_from_cart_items(items: Iterable[Dict[str, Any]]) -> List[OrderLine]:
    """Map checkout/cart items, which carry id and price."""
    return [OrderLine(item.get("id"), item.get("quantity"), item.get("price")) for item in items]


def status_for_payment_method(payment_method: Optional[str]) -> str:
    return STATUS_PENDING if payment_method == DEFERRED_PAYMENT_METHOD else STATUS_CONFIRMED


def raise_for_result(result: OrderWriteResult) -> Dict[str, Any]:
    """Return the committed order header or raise the matching API error."""
    if result.committed:
        return result.order
    details = result.error.message if result.error else None
    if result.outcome is OrderWriteOutcome.NOT_WRITTEN:
        raise PersistenceError("Erro ao criar o pedido.", details=details)
    raise PersistenceError("Erro ao salvar os itens do pedido.", details=details)


class OrderWorkflow:
    def __init__(self, store: RecordStore):
        self.store = store

    async def write_order(
        self,
        user_id: Any,
        lines: List[OrderLine],
        total: Any,
        shipping_address: str,
        status: Optional[str] = None,
        payment_id: Optional[str] = None,
    ) -> OrderWriteResult:
        """Insert the order header, then its items; undo the header if the items fail."""
        header = {"user_id": user_id, "total": total, "shipping_address": shipping_address}
        if status is not None:
            header["status"] = status
        if payment_id is not None:
            header["payment_id"] = payment_id

        orders = self.store.table("orders")
        try:
            order = await orders.insert(header)
        except StoreError as e:
            logger.error(f"Order header insert failed for user {user_id}: {e.message}")
            return OrderWriteResult(OrderWriteOutcome.NOT_WRITTEN, error=e)

        logger.info(f"Order {order['id']} created for user {user_id}")

        rows = [
            {
                "order_id": order["id"],
                "product_id": line.product_id,
                "quantity": line.quantity,
                "price_at_purchase": line.price_at_purchase,
            }
            for line in lines
        ]
        try:
            items = await self.store.table("order_items").insert_many(rows)
        except StoreError as items_error:
            logger.error(f"Saving items for order {order['id']} failed: {items_error.message}")
            try:
                await orders.delete({"id": order["id"]})
            except StoreError as e:
                logger.error(
                    f"Compensating delete of order {order['id']} failed; header left without items: {e.message}"
                )
                return OrderWriteResult(OrderWriteOutcome.ORPHANED, order=order, error=items_error)
            logger.info(f"Order {order['id']} rolled back after item failure")
            return OrderWriteResult(OrderWriteOutcome.ROLLED_BACK, order=order, error=items_error)

        logger.info(f"Saved {len(items)} items for order {order['id']}")
        return OrderWriteResult(OrderWriteOutcome.COMMITTED, order=order, items=items)

    async def create_order(self, user_id: Any, body: Dict[str, Any]) -> Dict[str, Any]:
        """Create an order from a caller-supplied shipping address string."""
        data = ORDER_CREATE.validate(body)
        result = await self.write_order(
            user_id,
            lines_from_order_items(data["items"]),
            data["total"],
            data["shipping_address"],
        )
        return raise_for_result(result)

    async def process_order(self, user_id: Any, body: Dict[str, Any]) -> Dict[str, Any]:
        """Checkout: resolve the caller's address, pick the status, write the order."""
        data = ORDER_PROCESS.validate(body)
        payment_method = data.get("paymentMethod")
        logger.info(
            f"Processing order for user {user_id}: total={data['total']} "
            f"address={data['addressId']} method={payment_method}"
        )

        address = await AddressService.get_address(self.store, data["addressId"], user_id)
        if not address:
            raise NotFoundError("Endereço não encontrado.")

        result = await self.write_order(
            user_id,
            lines_from_cart_items(data["items"]),
            data["total"],
            format_shipping_address(address),
            status=status_for_payment_method(payment_method),
        )
        return raise_for_result(result)
