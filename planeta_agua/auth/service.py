# planeta_agua/auth/service.py

from datetime import datetime, timedelta, timezone
from typing import Annotated, Any, Dict, Optional
import logging

import jwt
from jwt import PyJWTError
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from . import models
from ..core.config import Settings
from ..core.dependencies import get_settings
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError, PersistenceError
from ..core.validation import LOGIN, SIGNUP
from ..database.core import RecordStore, StoreError
from ..utils.password_utils import get_password_hash, verify_password

logger = logging.getLogger(__name__)

UNAUTHORIZED_MESSAGE = "Não autorizado. Token inválido ou expirado."
INVALID_CREDENTIALS_MESSAGE = "Email ou senha inválidos."

PUBLIC_USER_FIELDS = ("id", "name", "email", "created_at")
PROFILE_COLUMNS = "id, name, email, phone"

bearer_scheme = HTTPBearer(auto_error=False)


def strip_password(user: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in user.items() if key != "password_hash"}


def create_access_token(user: Dict[str, Any], settings: Settings) -> str:
    """Creates a JWT bound to the user id, carrying name and email as claims."""
    expire = datetime.now(timezone.utc) + timedelta(days=settings.TOKEN_EXPIRE_DAYS)
    encode = {
        'sub': str(user['id']),
        'name': user.get('name'),
        'email': user.get('email'),
        'exp': expire,
    }
    return jwt.encode(encode, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def verify_token(token: str, settings: Settings) -> models.TokenData:
    """Decodes and verifies an access token."""
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except PyJWTError as e:
        logger.info(f"JWT decode error: {e}")
        raise AuthorizationError(UNAUTHORIZED_MESSAGE)

    user_id = payload.get('sub')
    if not user_id:
        raise AuthorizationError(UNAUTHORIZED_MESSAGE)
    return models.TokenData(user_id=str(user_id), name=payload.get('name'), email=payload.get('email'))


def get_current_user(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(bearer_scheme)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> models.TokenData:
    """FastAPI dependency to get the current user from the bearer token."""
    if credentials is None or not credentials.credentials:
        raise AuthorizationError(UNAUTHORIZED_MESSAGE)
    return verify_token(credentials.credentials, settings)


CurrentUser = Annotated[models.TokenData, Depends(get_current_user)]


async def register_user(store: RecordStore, body: Dict[str, Any]) -> Dict[str, Any]:
    """Creates a user row and returns its public fields."""
    data = SIGNUP.validate(body)
    row = {
        "name": data["name"],
        "email": data["email"],
        "password_hash": get_password_hash(data["password"]),
    }
    if data.get("phone"):
        row["phone"] = data["phone"]

    try:
        user = await store.table("users").insert(row)
    except StoreError as e:
        if e.is_unique_violation:
            raise ConflictError("Este email já está em uso.")
        raise PersistenceError("Erro ao criar usuário.", details=e.message)

    logger.info(f"Successfully registered user: {data['email']}")
    return {field: user.get(field) for field in PUBLIC_USER_FIELDS}


async def authenticate_user(store: RecordStore, body: Dict[str, Any]) -> Dict[str, Any]:
    """Returns the stored user for valid credentials.

    Unknown email, failed lookup and wrong password all raise the same error so
    responses cannot be used to probe which emails are registered.
    """
    data = LOGIN.validate(body)
    try:
        user = await store.table("users").find_one({"email": data["email"]})
    except StoreError as e:
        logger.warning(f"User lookup failed during login: {e.message}")
        user = None

    if not user or not verify_password(data["password"], user.get("password_hash")):
        raise AuthorizationError(INVALID_CREDENTIALS_MESSAGE)
    return user


async def login(store: RecordStore, settings: Settings, body: Dict[str, Any]) -> Dict[str, Any]:
    user = await authenticate_user(store, body)
    token = create_access_token(user, settings)
    logger.info(f"Login successful for: {user['email']}")
    return {"user": strip_password(user), "token": token}


async def get_profile(store: RecordStore, user_id: str) -> Dict[str, Any]:
    try:
        user = await store.table("users").find_one({"id": user_id}, columns=PROFILE_COLUMNS)
    except StoreError as e:
        logger.warning(f"Profile lookup failed for user {user_id}: {e.message}")
        user = None
    if not user:
        raise NotFoundError("Usuário não encontrado.")
    return user
