# planeta_agua/auth/controller.py
from fastapi import APIRouter
from starlette import status

from . import service
from ..core.dependencies import AppSettings, JsonBody, Store
from .service import CurrentUser

router = APIRouter(tags=['auth'])


@router.post("/signup", status_code=status.HTTP_201_CREATED)
async def signup(body: JsonBody, store: Store):
    """Register a new user account."""
    user = await service.register_user(store, body)
    return {"user": user}


@router.post("/login", status_code=status.HTTP_200_OK)
async def login(body: JsonBody, store: Store, settings: AppSettings):
    """Check credentials and issue a bearer token."""
    return await service.login(store, settings, body)


@router.get("/profile")
async def profile(current_user: CurrentUser, store: Store):
    """Get the caller's profile."""
    user = await service.get_profile(store, current_user.user_id)
    return {"user": user}
