# chatrelay/app/utils/security.py
from passlib.context import CryptContext

from chatrelay.app.config.settings import settings

pwd_context = CryptContext(schemes=settings.PASSWORD_SCHEMES, deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    # passlib compares digests in constant time
    return pwd_context.verify(plain_password, hashed_password)
