# chatrelay/app/users/service.py
import logging
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session

from chatrelay.app.models.user import User, UserStatus
from chatrelay.app.users.schemas import UserCreate
from chatrelay.app.users.errors import (
    InvalidFieldError,
    UserNotFoundError,
    DuplicateIdentityError,
    InvalidStatusError,
    InvalidCredentialsError,
    StoreUnavailableError,
)
from chatrelay.app.utils.security import hash_password, verify_password

logger = logging.getLogger(__name__)


def _require(value: Optional[str], field: str) -> str:
    if value is None or not value.strip():
        raise InvalidFieldError(field)
    return value.strip()


def list_users(db: Session) -> List[User]:
    try:
        return db.query(User).order_by(User.id).all()
    except OperationalError as e:
        logger.error("Listing users failed: %s", e)
        raise StoreUnavailableError(str(e.orig)) from e


def get_user_by_id(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise UserNotFoundError(user_id)
    return user


def get_user_by_username(db: Session, username: str) -> Optional[User]:
    return db.query(User).filter(User.username == username).first()


def find_user_by_identity(db: Session, identity: str) -> User:
    """
    Exact match on username or email.

    Used for login and to resolve the claimed sender of relay events.
    """
    if not identity:
        raise UserNotFoundError(identity)
    user = (
        db.query(User)
        .filter(or_(User.username == identity, User.email == identity))
        .order_by(User.id)
        .first()
    )
    if not user:
        raise UserNotFoundError(identity)
    return user


def create_user(db: Session, user_in: UserCreate) -> User:
    name = _require(user_in.name, "name")
    username = _require(user_in.username, "username")
    if not user_in.password:
        raise InvalidFieldError("password")
    email = user_in.email.strip() if user_in.email and user_in.email.strip() else None

    # fast path for a readable error; the unique constraints below are authoritative
    if get_user_by_username(db, username):
        raise DuplicateIdentityError(username)
    # usernames and emails share one lookup namespace in find_user_by_identity
    if db.query(User).filter(User.email == username).first():
        raise DuplicateIdentityError(username)
    if email and (
        db.query(User)
        .filter(or_(User.email == email, User.username == email))
        .first()
    ):
        raise DuplicateIdentityError(email)

    user = User(
        name=name,
        username=username,
        email=email,
        age=user_in.age,
        status=UserStatus.OFFLINE,
        hashed_password=hash_password(user_in.password),
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning("Unique constraint rejected user %r: %s", username, e.orig)
        raise DuplicateIdentityError(username) from e
    db.refresh(user)
    logger.info("Created user id=%s username=%r", user.id, user.username)
    return user


def update_status(db: Session, user_id: int, new_status: str) -> User:
    try:
        status = UserStatus(new_status)
    except ValueError:
        raise InvalidStatusError(new_status) from None

    user = get_user_by_id(db, user_id)
    user.status = status
    db.commit()
    db.refresh(user)
    logger.info("User id=%s is now %s", user.id, status.value)
    return user


def authenticate_user(db: Session, identity: str, password: str) -> User:
    try:
        user = find_user_by_identity(db, identity)
    except UserNotFoundError:
        raise InvalidCredentialsError()
    if not verify_password(password or "", user.hashed_password):
        raise InvalidCredentialsError()
    return user
