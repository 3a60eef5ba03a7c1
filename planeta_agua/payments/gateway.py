# planeta_agua/payments/gateway.py
"""Thin async wrapper around the Mercado Pago SDK."""

import logging
from typing import Any, Dict, Optional

import mercadopago
from mercadopago.config import RequestOptions
from starlette.concurrency import run_in_threadpool

from ..core.exceptions import GatewayError

logger = logging.getLogger(__name__)


class PaymentGateway:
    """Creates checkout preferences, submits card payments and fetches payment status."""

    def __init__(self, access_token: str, timeout_seconds: float = 5.0, sdk: Optional[Any] = None):
        self.request_options = RequestOptions(connection_timeout=timeout_seconds)
        self.sdk = sdk or mercadopago.SDK(access_token, request_options=self.request_options)

    async def _call(self, operation: str, func, *args) -> Dict[str, Any]:
        try:
            result = await run_in_threadpool(func, *args, self.request_options)
        except Exception as e:
            # Timeouts and connection errors from the SDK's HTTP client land here.
            logger.error(f"Mercado Pago {operation} failed: {e}")
            raise GatewayError(f"Mercado Pago {operation} failed", details=str(e))

        status = result.get("status")
        response = result.get("response") or {}
        if status is None or status >= 400:
            message = response.get("message") if isinstance(response, dict) else None
            logger.error(f"Mercado Pago {operation} returned {status}: {response}")
            raise GatewayError(f"Mercado Pago {operation} failed", details=message or str(response), status=status)
        return response

    async def create_preference(self, body: Dict[str, Any]) -> Dict[str, Any]:
        return await self._call("preference create", self.sdk.preference().create, body)

    async def create_payment(self, body: Dict[str, Any]) -> Dict[str, Any]:
        return await self._call("payment create", self.sdk.payment().create, body)

    async def get_payment(self, payment_id: Any) -> Dict[str, Any]:
        return await self._call("payment get", self.sdk.payment().get, payment_id)
