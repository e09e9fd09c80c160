# chatrelay/app/relay/routes.py
import json
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from fastapi.concurrency import run_in_threadpool
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from chatrelay.app.database.session import SessionLocal
from chatrelay.app.messages import service as message_service
from chatrelay.app.messages.schemas import SendMessageEvent
from chatrelay.app.relay.manager import (
    Channel,
    SEND_MESSAGE,
    manager,
    new_message_payload,
)
from chatrelay.app.users import service as user_service
from chatrelay.app.users.errors import ChatRelayError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["relay"])


def _store_event_message(event: SendMessageEvent) -> Dict[str, Any]:
    """
    Resolve the claimed sender by email and append to their log.

    The lookup is best effort: whoever connects can claim any address.
    """
    db = SessionLocal()
    try:
        user = user_service.find_user_by_identity(db, event.sender_email)
        _, message = message_service.append_message(
            db,
            user_id=user.id,
            text=event.text,
            sender_name=event.sender_name,
        )
        return new_message_payload(message)
    finally:
        db.close()


async def handle_send_message(channel: Channel, data: Any) -> Optional[int]:
    """
    Persist and fan out one ``send_message`` event.

    Returns the number of channels reached, or None when the event was
    dropped. Drops are silent towards every client.
    """
    try:
        event = SendMessageEvent.model_validate(data)
    except ValidationError as e:
        logger.info("Channel %s sent a malformed send_message: %s", channel.id, e.errors())
        return None

    try:
        payload = await run_in_threadpool(_store_event_message, event)
    except ChatRelayError as e:
        logger.info("Dropped send_message from channel %s: %s", channel.id, e)
        return None
    except SQLAlchemyError as e:
        # nothing was persisted, so nothing is broadcast; the channel stays open
        logger.error("Store error on send_message from channel %s: %s", channel.id, e)
        return None

    return await manager.publish(payload)


@router.websocket("/ws")
async def relay_socket(websocket: WebSocket):
    channel = await manager.connect(websocket)
    try:
        while True:
            raw = await websocket.receive_text()
            try:
                frame = json.loads(raw)
            except ValueError:
                logger.info("Channel %s sent a non-JSON frame, ignored", channel.id)
                continue
            if not isinstance(frame, dict):
                logger.info("Channel %s sent a frame without an event name, ignored", channel.id)
                continue

            event = frame.get("event")
            if event == SEND_MESSAGE:
                await handle_send_message(channel, frame.get("data"))
            else:
                logger.info("Channel %s sent unknown event %r, ignored", channel.id, event)
    except WebSocketDisconnect:
        logger.debug("Channel %s closed by client", channel.id)
    except RuntimeError:
        # the writer already closed the socket after a failed send
        if not channel.closed:
            raise
    finally:
        await manager.disconnect(channel)
