# planeta_agua/products/controller.py
from fastapi import APIRouter

from ..core.dependencies import Store
from ..core.exceptions import NotFoundError
from ..database.core import StoreError

router = APIRouter(prefix="/products", tags=["products"])


@router.get("")
async def list_products(store: Store):
    """List the catalog ordered by name."""
    # Store failures propagate to the global handler (500).
    products = await store.table("products").find(order_by="name")
    return {"products": products}


@router.get("/{product_id}")
async def get_product(product_id: str, store: Store):
    try:
        product = await store.table("products").find_one({"id": product_id})
    except StoreError:
        product = None
    if not product:
        raise NotFoundError("Produto não encontrado.")
    return {"product": product}
