# planeta_agua/payments/service.py

import logging
import time
from typing import Any, Dict, Optional

from ..addresses.service import AddressService, format_shipping_address
from ..core.config import Settings
from ..core.exceptions import NotFoundError, PersistenceError
from ..core.validation import PAYMENT_PREFERENCE, PAYMENT_PROCESS
from ..database.core import RecordStore, StoreError
from ..orders.workflow import (
    STATUS_CONFIRMED, STATUS_PENDING, OrderWorkflow, lines_from_cart_items,
)
from .gateway import PaymentGateway

logger = logging.getLogger(__name__)

STATEMENT_DESCRIPTOR = "Planeta Água"
CURRENCY = "BRL"
APPROVED = "approved"

DEFAULT_PAYER_EMAIL = "teste@teste.com"
DEFAULT_AREA_CODE = "11"
DEFAULT_PHONE_NUMBER = "999999999"

# Placeholder payer document. Real checkout must collect the buyer's CPF.
PLACEHOLDER_IDENTIFICATION = {"type": "CPF", "number": "12345678909"}


def external_reference(user_id: Any) -> str:
    """Correlation key sent to the gateway: user id plus a millisecond timestamp."""
    return f"user_{user_id}_{int(time.time() * 1000)}"


def compute_total(items) -> float:
    """Sum price x quantity over the submitted items (prices as sent by the client)."""
    return sum(float(item.get("price")) * item.get("quantity") for item in items)


def _split_phone(phone: Optional[str]) -> Dict[str, str]:
    phone = str(phone) if phone else ""
    return {
        "area_code": phone[:2] or DEFAULT_AREA_CODE,
        "number": phone[2:] or DEFAULT_PHONE_NUMBER,
    }


class PaymentService:
    def __init__(self, store: RecordStore, gateway: PaymentGateway, settings: Settings):
        self.store = store
        self.gateway = gateway
        self.settings = settings

    async def _find_user(self, user_id: Any, columns: str) -> Optional[Dict[str, Any]]:
        try:
            return await self.store.table("users").find_one({"id": user_id}, columns=columns)
        except StoreError as e:
            logger.warning(f"User lookup failed for {user_id}: {e.message}")
            return None

    async def create_preference(self, user_id: Any, body: Dict[str, Any]) -> Dict[str, Any]:
        """Create a hosted checkout preference for the cart."""
        data = PAYMENT_PREFERENCE.validate(body)
        payer = data.get("payer") or {}
        user = await self._find_user(user_id, "email, name, phone") or {}

        preference = {
            "items": [
                {
                    "title": item.get("name") or item.get("title"),
                    "quantity": item.get("quantity"),
                    "unit_price": float(item.get("price")),
                    "currency_id": CURRENCY,
                }
                for item in data["items"]
            ],
            "payer": {
                "email": payer.get("email") or user.get("email") or DEFAULT_PAYER_EMAIL,
                "name": payer.get("name") or user.get("name"),
                "phone": _split_phone(payer.get("phone") or user.get("phone")),
            },
            "back_urls": {
                "success": f"{self.settings.FRONTEND_URL}/payment/success",
                "failure": f"{self.settings.FRONTEND_URL}/payment/failure",
                "pending": f"{self.settings.FRONTEND_URL}/payment/pending",
            },
            "auto_return": "approved",
            "notification_url": f"{self.settings.API_URL}/payments/webhook",
            "statement_descriptor": STATEMENT_DESCRIPTOR,
            "external_reference": external_reference(user_id),
        }

        response = await self.gateway.create_preference(preference)
        logger.info(f"Preference {response.get('id')} created for user {user_id}")
        return {
            "preferenceId": response.get("id"),
            "initPoint": response.get("init_point"),
            "sandboxInitPoint": response.get("sandbox_init_point"),
        }

    async def process_payment(self, user_id: Any, body: Dict[str, Any]) -> Dict[str, Any]:
        """Charge a tokenized card; an approved charge materializes a confirmed order."""
        data = PAYMENT_PROCESS.validate(body)
        items = data["items"]

        user = await self._find_user(user_id, "email, name") or {}
        address = await AddressService.get_address(self.store, data["addressId"], user_id)
        if not address:
            raise NotFoundError("Endereço não encontrado.")

        total = compute_total(items)
        payment_body = {
            "transaction_amount": total,
            "token": data["token"],
            "installments": data.get("installments") or 1,
            "payment_method_id": data.get("paymentMethodId") or "master",
            "payer": {
                "email": user.get("email"),
                "identification": dict(PLACEHOLDER_IDENTIFICATION),
            },
            "description": f"Compra {STATEMENT_DESCRIPTOR} - {len(items)} item(ns)",
            "external_reference": external_reference(user_id),
            "statement_descriptor": STATEMENT_DESCRIPTOR,
        }

        payment = await self.gateway.create_payment(payment_body)
        payment_id = str(payment.get("id"))
        logger.info(f"Payment {payment_id} for user {user_id} returned status {payment.get('status')}")

        if payment.get("status") != APPROVED:
            return {"payment": payment, "message": "Pagamento processado."}

        result = await OrderWorkflow(self.store).write_order(
            user_id,
            lines_from_cart_items(items),
            total,
            format_shipping_address(address),
            status=STATUS_CONFIRMED,
            payment_id=payment_id,
        )
        if not result.committed:
            logger.error(f"Payment {payment_id} approved but order write ended as {result.outcome.value}")
            raise PersistenceError(
                "Erro ao processar pagamento.",
                details=f"Pagamento {payment_id} aprovado, mas o pedido não foi registrado: "
                        f"{result.error.message if result.error else result.outcome.value}",
            )

        return {
            "payment": payment,
            "order": result.order,
            "message": "Pagamento aprovado e pedido criado!",
        }

    async def handle_notification(self, body: Dict[str, Any]) -> None:
        """Sync an order's status with the gateway's view of its payment.

        The notification only names the payment; its status is always re-fetched
        from the gateway.
        """
        notification_type = body.get("type")
        data = body.get("data") or {}
        logger.info(f"Webhook received: type={notification_type} data={data}")

        if notification_type != "payment":
            return

        payment_id = str(data.get("id"))
        payment = await self.gateway.get_payment(payment_id)
        logger.info(f"Payment {payment_id} status: {payment.get('status')}")

        if not payment.get("external_reference"):
            return

        status = STATUS_CONFIRMED if payment.get("status") == APPROVED else STATUS_PENDING
        try:
            updated = await self.store.table("orders").update(
                {"payment_id": payment_id},
                {"status": status, "payment_id": payment_id},
            )
        except StoreError as e:
            logger.error(f"Failed to update order for payment {payment_id}: {e.message}")
            return

        if not updated:
            logger.warning(f"No order matches payment {payment_id}")
        else:
            logger.info(f"Order {updated[0].get('id')} set to {status} from payment {payment_id}")
