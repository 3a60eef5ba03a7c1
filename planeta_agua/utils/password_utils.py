# planeta_agua/utils/password_utils.py

from passlib.context import CryptContext
import logging

logger = logging.getLogger(__name__)

# Create the context once and reuse it
bcrypt_context = CryptContext(schemes=['bcrypt'], deprecated='auto', bcrypt__rounds=8)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verifies a plain-text password against a hashed password.
    """
    if not hashed_password:
        return False
    try:
        return bcrypt_context.verify(plain_password, hashed_password)
    except ValueError:
        logger.warning("Stored password hash could not be parsed.")
        return False


def get_password_hash(password: str) -> str:
    """
    Hashes a plain-text password.
    """
    try:
        return bcrypt_context.hash(password)
    except Exception:
        logger.exception("Error occurred while hashing password.")
        raise
