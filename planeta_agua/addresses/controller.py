# planeta_agua/addresses/controller.py
from fastapi import APIRouter, Response, status

from ..auth.service import CurrentUser
from ..core.dependencies import JsonBody, Store
from .service import AddressService

router = APIRouter(prefix="/addresses", tags=["addresses"])


@router.get("")
async def list_addresses(current_user: CurrentUser, store: Store):
    addresses = await AddressService.list_addresses(store, current_user.user_id)
    return {"addresses": addresses}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_address(body: JsonBody, current_user: CurrentUser, store: Store):
    address = await AddressService.create_address(store, current_user.user_id, body)
    return {"address": address}


@router.put("/{address_id}")
async def update_address(address_id: str, body: JsonBody, current_user: CurrentUser, store: Store):
    """Replace an address owned by the caller."""
    address = await AddressService.update_address(store, address_id, current_user.user_id, body)
    return {"address": address}


@router.delete("/{address_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_address(address_id: str, current_user: CurrentUser, store: Store):
    await AddressService.delete_address(store, address_id, current_user.user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
