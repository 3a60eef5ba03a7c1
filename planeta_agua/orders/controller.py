# planeta_agua/orders/controller.py
import logging

from fastapi import APIRouter, status

from ..auth.service import CurrentUser
from ..core.dependencies import JsonBody, Store
from ..core.exceptions import PersistenceError, PlanetaAguaError
from ..database.core import StoreError
from .service import OrderService
from .workflow import OrderWorkflow

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/orders", tags=["orders"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_order(body: JsonBody, current_user: CurrentUser, store: Store):
    """Create an order from a shipping address string."""
    order = await OrderWorkflow(store).create_order(current_user.user_id, body)
    return {"order": order}


@router.get("")
async def get_user_orders(current_user: CurrentUser, store: Store):
    """List the caller's orders with their items."""
    try:
        orders = await OrderService.get_user_orders(store, current_user.user_id)
    except StoreError as e:
        raise PersistenceError(e.message)
    return {"orders": orders}


@router.post("/process", status_code=status.HTTP_201_CREATED)
async def process_order(body: JsonBody, current_user: CurrentUser, store: Store):
    """Create an order from a saved address and a payment method."""
    try:
        order = await OrderWorkflow(store).process_order(current_user.user_id, body)
    except PlanetaAguaError:
        raise
    except Exception as e:
        logger.exception(f"Unexpected error processing order for user {current_user.user_id}")
        raise PersistenceError("Erro ao processar pedido.", details=str(e))
    return {"order": order, "message": "Pedido criado com sucesso!"}
