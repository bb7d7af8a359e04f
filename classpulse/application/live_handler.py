import asyncio
import json
import logging

from starlette.websockets import WebSocket, WebSocketDisconnect

from ..domain.entities import Pong, Snapshot, SnapshotBroadcast
from ..domain.services import SnapshotRelay, Subscription

logger = logging.getLogger(__name__)


class LiveConnectionHandler:
    """Runs one client connection on the live snapshot topic.

    A send loop drains the connection's relay mailbox while a receive loop
    publishes the client's snapshots and answers pings. When either loop ends
    the other is cancelled and the connection is unsubscribed.
    """

    def __init__(self, relay: SnapshotRelay):
        self._relay = relay

    async def handle_websocket(self, websocket: WebSocket) -> None:
        # websocket.accept() is called by the API endpoint before this
        subscription = self._relay.subscribe()
        send_task = asyncio.create_task(self._send_loop(websocket, subscription))
        receive_task = asyncio.create_task(self._receive_loop(websocket))
        try:
            done, _ = await asyncio.wait(
                {send_task, receive_task},
                return_when=asyncio.FIRST_COMPLETED,
            )
            for task in done:
                exc = task.exception()
                if exc and not isinstance(exc, WebSocketDisconnect):
                    logger.error(f"Live connection {subscription.id} failed: {exc}", exc_info=exc)
        finally:
            self._relay.unsubscribe(subscription)
            for t in (send_task, receive_task):
                if not t.done():
                    t.cancel()
            await asyncio.gather(send_task, receive_task, return_exceptions=True)
            try:
                await websocket.close()
            except Exception:
                logger.debug(f"Live connection {subscription.id} already closed")
            logger.info(f"Live connection closed: {subscription.id}")

    async def _send_loop(self, websocket: WebSocket, subscription: Subscription) -> None:
        while True:
            snapshot: Snapshot = await subscription.mailbox.get()
            message = SnapshotBroadcast.from_snapshot(snapshot)
            await websocket.send_text(message.model_dump_json(by_alias=True))

    async def _receive_loop(self, websocket: WebSocket) -> None:
        while True:
            data = await websocket.receive()

            if data.get("type") == "websocket.disconnect":
                logger.info(f"Client disconnected: {websocket.client}")
                break

            text = data.get("text")
            if text is None:
                logger.debug("Ignoring binary frame on live topic")
                continue
            try:
                message = json.loads(text)
            except json.JSONDecodeError:
                self._relay.drop_malformed("not JSON")
                continue
            if not isinstance(message, dict):
                self._relay.drop_malformed("not a JSON object")
                continue

            match message.get("type"):
                case "ping":
                    await websocket.send_text(Pong().model_dump_json())
                case "snapshot":
                    self._relay.publish(message)
                case other:
                    logger.debug(f"Unknown live message type: {other}")
