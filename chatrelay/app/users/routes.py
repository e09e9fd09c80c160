# chatrelay/app/users/routes.py
from typing import List
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from chatrelay.app.database.session import get_db
from chatrelay.app.users import schemas as user_schemas
from chatrelay.app.users import service as user_service
from chatrelay.app.users.errors import (
    InvalidFieldError,
    UserNotFoundError,
    DuplicateIdentityError,
    InvalidStatusError,
    InvalidCredentialsError,
    StoreUnavailableError,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])


@router.get(
    "",
    response_model=List[user_schemas.UserOut],
)
def list_users(
    db: Session = Depends(get_db),
):
    """
    All users in storage order, with their message logs.
    """
    try:
        return user_service.list_users(db)
    except StoreUnavailableError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error fetching users",
        ) from e


@router.post(
    "",
    response_model=user_schemas.UserOut,
    status_code=status.HTTP_201_CREATED,
)
def create_user(
    user_in: user_schemas.UserCreate,
    db: Session = Depends(get_db),
):
    try:
        return user_service.create_user(db, user_in)
    except (InvalidFieldError, DuplicateIdentityError) as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )


@router.post("/login", response_model=user_schemas.UserOut)
def login(
    user_in: user_schemas.UserLogin,
    db: Session = Depends(get_db),
):
    try:
        return user_service.authenticate_user(db, user_in.username, user_in.password)
    except InvalidCredentialsError as e:
        logger.info("Failed login for %r", user_in.username)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
        )


@router.get("/{user_id}", response_model=user_schemas.UserOut)
def read_user(
    user_id: int,
    db: Session = Depends(get_db),
):
    try:
        return user_service.get_user_by_id(db, user_id)
    except UserNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e),
        )


@router.put("/{user_id}/status", response_model=user_schemas.UserOut)
def update_status(
    user_id: int,
    payload: user_schemas.StatusUpdate,
    db: Session = Depends(get_db),
):
    """
    Switch a user between online and offline.
    """
    try:
        return user_service.update_status(db, user_id, payload.status)
    except InvalidStatusError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )
    except UserNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e),
        )
