# planeta_agua/orders/service.py
from typing import Any, Dict, List

from ..database.core import RecordStore

ORDER_COLUMNS = "id, status, total, created_at, shipping_address, payment_id"
ITEM_COLUMNS = "order_id, product_id, quantity, price_at_purchase"
PRODUCT_COLUMNS = "id, name, image_url"


class OrderService:

    @staticmethod
    async def get_user_orders(store: RecordStore, user_id: str) -> List[Dict[str, Any]]:
        """Get the user's orders, newest first, with items and product name/image nested."""
        orders = await store.table("orders").find(
            {"user_id": user_id}, columns=ORDER_COLUMNS, order_by="created_at", descending=True
        )
        if not orders:
            return []

        items = await store.table("order_items").find(
            {"order_id": [order["id"] for order in orders]}, columns=ITEM_COLUMNS
        )
        product_ids = sorted({item["product_id"] for item in items}, key=str)
        products = {}
        if product_ids:
            rows = await store.table("products").find({"id": product_ids}, columns=PRODUCT_COLUMNS)
            products = {str(p["id"]): {"name": p.get("name"), "image_url": p.get("image_url")} for p in rows}

        items_by_order: Dict[str, List[Dict[str, Any]]] = {}
        for item in items:
            items_by_order.setdefault(str(item["order_id"]), []).append({
                "quantity": item["quantity"],
                "price_at_purchase": item["price_at_purchase"],
                "products": products.get(str(item["product_id"])),
            })

        return [
            {**order, "order_items": items_by_order.get(str(order["id"]), [])}
            for order in orders
        ]
