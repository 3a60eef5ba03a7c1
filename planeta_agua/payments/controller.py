# planeta_agua/payments/controller.py
import logging

from fastapi import APIRouter, Response, status

from ..auth.service import CurrentUser
from ..core.dependencies import AppSettings, Gateway, JsonBody, Store
from ..core.exceptions import GatewayError, PersistenceError, PlanetaAguaError
from .service import PaymentService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/payments", tags=["payments"])


@router.post("/create-preference", status_code=status.HTTP_201_CREATED)
async def create_preference(
    body: JsonBody, current_user: CurrentUser, store: Store, gateway: Gateway, settings: AppSettings
):
    """Create a Mercado Pago checkout preference (Checkout Pro / PIX)."""
    try:
        return await PaymentService(store, gateway, settings).create_preference(current_user.user_id, body)
    except GatewayError as e:
        raise PersistenceError("Erro ao criar preferência de pagamento.", details=e.details or e.message)
    except PlanetaAguaError:
        raise
    except Exception as e:
        logger.exception("Unexpected error creating preference")
        raise PersistenceError("Erro ao criar preferência de pagamento.", details=str(e))


@router.post("/process")
async def process_payment(
    body: JsonBody,
    response: Response,
    current_user: CurrentUser,
    store: Store,
    gateway: Gateway,
    settings: AppSettings,
):
    """Charge a tokenized card; 201 when an order was created, 200 otherwise."""
    try:
        result = await PaymentService(store, gateway, settings).process_payment(current_user.user_id, body)
    except GatewayError as e:
        raise PersistenceError("Erro ao processar pagamento.", details=e.details or e.message)
    except PlanetaAguaError:
        raise
    except Exception as e:
        logger.exception("Unexpected error processing payment")
        raise PersistenceError("Erro ao processar pagamento.", details=str(e))

    if "order" in result:
        response.status_code = status.HTTP_201_CREATED
    return result


@router.post("/webhook")
async def payment_webhook(body: JsonBody, store: Store, gateway: Gateway, settings: AppSettings):
    """Receive Mercado Pago notifications. Always answers 200 so the gateway does not redeliver."""
    try:
        await PaymentService(store, gateway, settings).handle_notification(body)
    except Exception as e:
        logger.error(f"Webhook processing failed: {e}")
    return {"received": True}

