"""
In-memory document store serving the sync protocol over WebSocket.

Holds one document snapshot and the set of connected editors. A new
connection receives ``init`` with the current snapshot; an ``update`` from
any client overwrites the snapshot (last write wins) and is broadcast to the
other clients; ``chat`` messages are only logged.
"""

import asyncio
import logging
from typing import Optional, Set

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from pydantic import ValidationError

import json_utils as json
from models import SyncMessage, SyncMessageType


logger = logging.getLogger(__name__)

router = APIRouter()


class DocumentStore:
    """Single shared document plus its live WebSocket clients."""

    def __init__(self, initial_document: str = ""):
        self._document = initial_document
        self._clients: Set[WebSocket] = set()
        self._lock = asyncio.Lock()
        self.revision = 0

    @property
    def document(self) -> str:
        return self._document

    @property
    def client_count(self) -> int:
        return len(self._clients)

    def replace(self, snapshot: str) -> None:
        self._document = snapshot
        self.revision += 1

    async def connect(self, websocket: WebSocket) -> None:
        await websocket.accept()
        self._clients.add(websocket)
        logger.info("Sync client connected (%d connected)", len(self._clients))
        init = SyncMessage(kind=SyncMessageType.INIT, payload=self._document)
        await websocket.send_text(json.dumps(init.to_wire()))

    def disconnect(self, websocket: WebSocket) -> None:
        if websocket in self._clients:
            self._clients.discard(websocket)
            logger.info("Sync client disconnected (%d connected)", len(self._clients))

    async def handle_message(self, websocket: Optional[WebSocket], raw: str) -> None:
        """Apply one client message; malformed messages are logged and skipped."""
        try:
            message = SyncMessage.model_validate(json.loads(raw))
        except (json.JSONDecodeError, ValidationError, TypeError) as exc:
            logger.warning("Skipping malformed sync message: %s", exc)
            return

        if message.kind == SyncMessageType.UPDATE:
            async with self._lock:
                self.replace(message.payload)
                await self.broadcast(message, exclude=websocket)
        elif message.kind == SyncMessageType.CHAT:
            logger.info("Chat message from sync client: %s", message.payload)
        else:
            logger.warning("Ignoring %s message sent by a client", message.kind.value)

    async def broadcast(self, message: SyncMessage, exclude: Optional[WebSocket] = None) -> None:
        payload = json.dumps(message.to_wire())
        for client in list(self._clients):
            if client is exclude:
                continue
            try:
                await client.send_text(payload)
            except Exception as exc:
                logger.warning("Dropping sync client after send failure: %s", exc)
                self.disconnect(client)

    async def serve(self, websocket: WebSocket) -> None:
        """Run the store side of the protocol for one connection."""
        await self.connect(websocket)
        try:
            while True:
                raw = await websocket.receive_text()
                await self.handle_message(websocket, raw)
        except WebSocketDisconnect:
            pass
        finally:
            self.disconnect(websocket)


@router.websocket("/ws")
async def document_sync(websocket: WebSocket):
    store: DocumentStore = websocket.app.state.document_store
    await store.serve(websocket)
