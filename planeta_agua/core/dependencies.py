# planeta_agua/core/dependencies.py
# Collaborators are constructed once in create_app() and read from app.state.

from typing import Annotated, Any, Dict

from fastapi import Depends, Request

from ..database.core import RecordStore
from ..payments.gateway import PaymentGateway
from .config import Settings


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> RecordStore:
    return request.app.state.store


def get_gateway(request: Request) -> PaymentGateway:
    return request.app.state.gateway


async def get_json_body(request: Request) -> Dict[str, Any]:
    """Read the request body as a JSON object; anything else reads as empty."""
    try:
        body = await request.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


AppSettings = Annotated[Settings, Depends(get_settings)]
Store = Annotated[RecordStore, Depends(get_store)]
Gateway = Annotated[PaymentGateway, Depends(get_gateway)]
JsonBody = Annotated[Dict[str, Any], Depends(get_json_body)]
