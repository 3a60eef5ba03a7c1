# planeta_agua/credit_cards/controller.py
# Only brand, last4 and expiry are stored; card numbers never reach the store.
from fastapi import APIRouter, Response, status

from ..auth.service import CurrentUser
from ..core.dependencies import JsonBody, Store
from ..core.exceptions import PersistenceError
from ..core.validation import CREDIT_CARD
from ..database.core import StoreError

router = APIRouter(prefix="/credit-cards", tags=["credit-cards"])

CARD_COLUMNS = "id, brand, last4, expiry"


@router.get("")
async def list_credit_cards(current_user: CurrentUser, store: Store):
    """List the caller's cards, newest first."""
    try:
        cards = await store.table("credit_cards").find(
            {"user_id": current_user.user_id}, columns=CARD_COLUMNS, order_by="created_at", descending=True
        )
    except StoreError as e:
        raise PersistenceError(e.message)
    return {"creditCards": cards}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_credit_card(body: JsonBody, current_user: CurrentUser, store: Store):
    data = CREDIT_CARD.validate(body)
    row = {
        "user_id": current_user.user_id,
        "brand": data["brand"],
        "last4": data["last4"],
        "expiry": data["expiry"],
    }
    try:
        card = await store.table("credit_cards").insert(row)
    except StoreError as e:
        raise PersistenceError(e.message)
    return {"card": card}


@router.delete("/{card_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_credit_card(card_id: str, current_user: CurrentUser, store: Store):
    try:
        await store.table("credit_cards").delete({"id": card_id, "user_id": current_user.user_id})
    except StoreError as e:
        raise PersistenceError(e.message)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
