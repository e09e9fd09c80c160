# chatrelay/app/messages/routes.py
from typing import List
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session

from chatrelay.app.database.session import get_db
from chatrelay.app.messages import schemas as message_schemas
from chatrelay.app.messages import service as message_service
from chatrelay.app.relay.manager import manager, new_message_payload
from chatrelay.app.users.errors import InvalidFieldError, UserNotFoundError
from chatrelay.app.users.schemas import UserOut

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["messages"])


@router.post(
    "/{user_id}/messages",
    response_model=UserOut,
    status_code=status.HTTP_201_CREATED,
)
async def post_message(
    user_id: int,
    payload: message_schemas.MessageCreate,
    db: Session = Depends(get_db),
):
    """
    Append a message to the user's log and relay it to every connected
    channel. The channels are picked when the append commits; the event is
    only queued, so the response never waits for delivery.
    """
    try:
        user, message = await run_in_threadpool(
            message_service.append_message,
            db,
            user_id=user_id,
            text=payload.text,
            sender_name=payload.sender_name,
        )
    except InvalidFieldError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )
    except UserNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e),
        )

    await manager.publish(new_message_payload(message))
    return user


@router.get(
    "/{user_id}/messages",
    response_model=List[message_schemas.MessageOut],
)
def get_messages(
    user_id: int,
    db: Session = Depends(get_db),
):
    try:
        return message_service.list_messages(db, user_id)
    except UserNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e),
        )
