# chatrelay/app/messages/service.py
import logging
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from chatrelay.app.models.message import Message
from chatrelay.app.models.user import User
from chatrelay.app.users.errors import InvalidFieldError
from chatrelay.app.users.service import get_user_by_id

logger = logging.getLogger(__name__)


def append_message(
    db: Session,
    user_id: int,
    text: str,
    sender_name: Optional[str] = None,
) -> Tuple[User, Message]:
    """
    Append one message to a user's log and persist it.

    The timestamp is filled in by the database when the row is written, so it
    reflects persistence time rather than submission time.
    """
    if text is None or not text.strip():
        raise InvalidFieldError("text")

    user = get_user_by_id(db, user_id)

    message = Message(
        user_id=user.id,
        text=text,
        sender_name=sender_name,
    )
    db.add(message)
    db.commit()
    db.refresh(message)
    db.refresh(user)

    logger.info(
        "Appended message id=%s to user id=%s (%d in log)",
        message.id, user.id, len(user.messages),
    )
    return user, message


def list_messages(db: Session, user_id: int) -> List[Message]:
    user = get_user_by_id(db, user_id)
    return (
        db.query(Message)
        .filter(Message.user_id == user.id)
        .order_by(Message.id)
        .all()
    )
