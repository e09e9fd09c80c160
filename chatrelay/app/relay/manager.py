# chatrelay/app/relay/manager.py
"""
Broadcast relay over WebSocket channels.

Every connected client is a ``Channel``. A message appended to any user's log
is fanned out as a ``new_message`` event to every channel registered at that
moment, whichever entry point (HTTP or socket event) produced it.

Delivery is best effort:
    - each channel has a bounded outbound queue drained by its own writer
      task, so a slow client never blocks fan-out to the others
    - a full queue drops the event for that channel only
    - a send that fails or exceeds the timeout closes that channel only;
      the already persisted message is not rolled back
    - late joiners get no backlog replay

The registry is guarded by an ``asyncio.Lock``; broadcast iterates over a
snapshot taken under the lock, so connects and disconnects during fan-out are
safe. Single event loop only.
"""
import asyncio
import logging
import uuid
from typing import Any, Awaitable, Callable, Dict, List, Optional

from fastapi import WebSocket
from starlette.websockets import WebSocketState

from chatrelay.app.config.settings import settings
from chatrelay.app.messages.schemas import NewMessageEvent
from chatrelay.app.models.message import Message

logger = logging.getLogger(__name__)

NEW_MESSAGE = "new_message"
SEND_MESSAGE = "send_message"


def make_event(event: str, data: Dict[str, Any]) -> Dict[str, Any]:
    return {"event": event, "data": data}


def new_message_payload(message: Message) -> Dict[str, Any]:
    """Serialize a persisted message into the ``new_message`` event body."""
    return NewMessageEvent.model_validate(message).model_dump(mode="json", by_alias=True)


class Channel:
    """One live client connection. Connected until closed, never reopened."""

    def __init__(
        self,
        websocket: WebSocket,
        on_failure: Callable[["Channel"], Awaitable[None]],
        queue_size: int,
        send_timeout: float,
    ) -> None:
        self.id = uuid.uuid4().hex
        self.websocket = websocket
        self.send_timeout = send_timeout
        self.closed = False
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=queue_size)
        self._on_failure = on_failure
        self._writer: Optional[asyncio.Task] = None

    def start(self) -> None:
        self._writer = asyncio.create_task(self._pump())

    def offer(self, event: Dict[str, Any]) -> bool:
        """Queue an event without waiting. Returns False if it was dropped."""
        if self.closed:
            return False
        try:
            self._queue.put_nowait(event)
        except asyncio.QueueFull:
            logger.warning("Channel %s queue full, dropping %s", self.id, event.get("event"))
            return False
        return True

    async def _pump(self) -> None:
        while True:
            event = await self._queue.get()
            try:
                await asyncio.wait_for(
                    self.websocket.send_json(event),
                    timeout=self.send_timeout,
                )
            except asyncio.TimeoutError:
                logger.warning(
                    "Channel %s send timed out after %.1fs", self.id, self.send_timeout
                )
                break
            except Exception as e:
                logger.debug("Channel %s send failed: %s", self.id, e)
                break
        await self._on_failure(self)

    async def close(self) -> None:
        if self.closed:
            return
        self.closed = True

        writer = self._writer
        if writer is not None and writer is not asyncio.current_task():
            writer.cancel()

        ws = self.websocket
        if (
            ws.application_state == WebSocketState.CONNECTED
            and ws.client_state == WebSocketState.CONNECTED
        ):
            try:
                await ws.close()
            except (RuntimeError, OSError) as e:
                # the peer went away between the state check and the close frame
                logger.debug("Channel %s already closed: %s", self.id, e)


class ConnectionManager:
    """Registry of connected channels plus the fan-out primitive."""

    def __init__(
        self,
        queue_size: int = settings.CHANNEL_QUEUE_SIZE,
        send_timeout: float = settings.CHANNEL_SEND_TIMEOUT,
    ) -> None:
        self.queue_size = queue_size
        self.send_timeout = send_timeout
        self._channels: Dict[str, Channel] = {}
        self._lock = asyncio.Lock()

    @property
    def channel_count(self) -> int:
        return len(self._channels)

    async def connect(self, websocket: WebSocket) -> Channel:
        """
        Register a channel, then complete the handshake.

        Registration comes first so a client that sees the accept is already
        part of the next fan-out; anything queued meanwhile waits for the
        writer.
        """
        channel = Channel(
            websocket,
            on_failure=self.disconnect,
            queue_size=self.queue_size,
            send_timeout=self.send_timeout,
        )
        async with self._lock:
            self._channels[channel.id] = channel
        try:
            await websocket.accept()
        except Exception:
            async with self._lock:
                self._channels.pop(channel.id, None)
            channel.closed = True
            raise
        channel.start()
        logger.info("Channel %s connected (%d open)", channel.id, self.channel_count)
        return channel

    async def disconnect(self, channel: Channel) -> None:
        async with self._lock:
            removed = self._channels.pop(channel.id, None)
        await channel.close()
        if removed is not None:
            logger.info("Channel %s disconnected (%d open)", channel.id, self.channel_count)

    async def _snapshot(self) -> List[Channel]:
        async with self._lock:
            return list(self._channels.values())

    async def broadcast(self, event: str, data: Dict[str, Any]) -> int:
        """
        Queue ``event`` on every channel registered right now.

        Returns the number of channels that accepted it. Never raises for a
        single bad channel.
        """
        frame = make_event(event, data)
        channels = await self._snapshot()
        delivered = sum(1 for channel in channels if channel.offer(frame))
        logger.debug("Broadcast %s to %d/%d channels", event, delivered, len(channels))
        return delivered

    async def publish(self, payload: Dict[str, Any]) -> int:
        """Fan out a ``new_message`` event built by ``new_message_payload``."""
        return await self.broadcast(NEW_MESSAGE, payload)

    async def shutdown(self) -> None:
        async with self._lock:
            channels = list(self._channels.values())
            self._channels.clear()
        for channel in channels:
            await channel.close()
        if channels:
            logger.info("Relay shut down, closed %d channels", len(channels))


manager = ConnectionManager()
