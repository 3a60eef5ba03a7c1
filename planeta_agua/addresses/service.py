# planeta_agua/addresses/service.py
import logging
from typing import Any, Dict, List, Optional

from ..core.exceptions import NotFoundError, PersistenceError
from ..core.validation import ADDRESS
from ..database.core import RecordStore, StoreError

logger = logging.getLogger(__name__)

ADDRESS_FIELDS = ("street", "neighborhood", "city", "state", "zip_code")


class AddressService:
    """Address rows are always filtered on both id and the caller's user id."""

    @staticmethod
    async def list_addresses(store: RecordStore, user_id: str) -> List[Dict[str, Any]]:
        try:
            return await store.table("addresses").find({"user_id": user_id})
        except StoreError as e:
            raise PersistenceError(e.message)

    @staticmethod
    async def get_address(store: RecordStore, address_id: Any, user_id: str) -> Optional[Dict[str, Any]]:
        """Get an address owned by the user, or None."""
        try:
            return await store.table("addresses").find_one({"id": address_id, "user_id": user_id})
        except StoreError as e:
            logger.warning(f"Address lookup failed for address {address_id}: {e.message}")
            return None

    @staticmethod
    async def create_address(store: RecordStore, user_id: str, body: Dict[str, Any]) -> Dict[str, Any]:
        data = ADDRESS.validate(body)
        row = {"user_id": user_id, **{field: data[field] for field in ADDRESS_FIELDS}}
        try:
            return await store.table("addresses").insert(row)
        except StoreError as e:
            raise PersistenceError(e.message)

    @staticmethod
    async def update_address(store: RecordStore, address_id: str, user_id: str, body: Dict[str, Any]) -> Dict[str, Any]:
        data = ADDRESS.validate(body)
        patch = {field: data[field] for field in ADDRESS_FIELDS}
        try:
            rows = await store.table("addresses").update({"id": address_id, "user_id": user_id}, patch)
        except StoreError as e:
            raise PersistenceError(e.message)
        if not rows:
            raise NotFoundError("Endereço não encontrado.")

        address = rows[0]
        return {
            "id": address["id"],
            "street": address["street"],
            "neighborhood": address["neighborhood"],
            "city": address["city"],
            "state": address["state"],
            "zipCode": address["zip_code"],
        }

    @staticmethod
    async def delete_address(store: RecordStore, address_id: str, user_id: str) -> None:
        try:
            await store.table("addresses").delete({"id": address_id, "user_id": user_id})
        except StoreError as e:
            raise PersistenceError(e.message)


def format_shipping_address(address: Dict[str, Any]) -> str:
    """Render the denormalized snapshot stored on an order."""
    return f"{address['street']}, {address['neighborhood']}, {address['city']} - {address['state']}"
