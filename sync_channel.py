"""
Document Sync Channel for the Inkwell AI Editing Engine
=======================================================

Keeps one persistent connection to the document store and exchanges full
document snapshots as JSON messages ``{"type": ..., "data": ...}``.

State machine::

    DISCONNECTED -> CONNECTING -> OPEN -> (CLOSED | ERRORING) -> DISCONNECTED

Inbound ``init`` and ``update`` messages overwrite the local document
(last write wins, no merging). Outbound snapshots go through a bounded
outbox: they are sent right away while the connection is open and the
store's ``init`` has been reconciled, and are buffered otherwise (oldest
dropped when full). After a reconnect the buffered snapshots are flushed in
order once ``init`` arrives; when anything is buffered, the local snapshot
wins over the store's ``init``.

The transport is injectable: a connector is an async callable returning an
object with ``send_str``, ``receive`` (``None`` once closed) and ``close``.
"""

import asyncio
import contextlib
import logging
from collections import deque
from enum import Enum
from typing import Awaitable, Callable, Deque, List, Optional, Protocol

import aiohttp
from pydantic import ValidationError

import json_utils as json
from config import SyncSettings
from logging_utils import Phase, create_phase_logger
from models import SyncMessage, SyncMessageType


logger = logging.getLogger(__name__)


class SyncState(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    OPEN = "open"
    CLOSED = "closed"
    ERRORING = "erroring"


class SyncChannelError(RuntimeError):
    """The sync connection could not be opened or failed while open."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class SyncConnection(Protocol):
    async def send_str(self, data: str) -> None: ...

    async def receive(self) -> Optional[str]: ...

    async def close(self) -> None: ...


Connector = Callable[[], Awaitable[SyncConnection]]
StateListener = Callable[[SyncState, Optional[SyncChannelError]], None]
DocumentListener = Callable[[str], None]


class AiohttpConnection:
    """SyncConnection over an aiohttp client WebSocket."""

    def __init__(self, session: aiohttp.ClientSession, ws: aiohttp.ClientWebSocketResponse):
        self._session = session
        self._ws = ws

    async def send_str(self, data: str) -> None:
        await self._ws.send_str(data)

    async def receive(self) -> Optional[str]:
        while True:
            msg = await self._ws.receive()
            if msg.type == aiohttp.WSMsgType.TEXT:
                return msg.data
            if msg.type == aiohttp.WSMsgType.BINARY:
                return msg.data.decode("utf-8", errors="replace")
            if msg.type in (aiohttp.WSMsgType.CLOSE, aiohttp.WSMsgType.CLOSING, aiohttp.WSMsgType.CLOSED):
                return None
            if msg.type == aiohttp.WSMsgType.ERROR:
                raise SyncChannelError(f"WebSocket error: {self._ws.exception()}", cause=self._ws.exception())

    async def close(self) -> None:
        try:
            await self._ws.close()
        finally:
            await self._session.close()


def aiohttp_connector(url: str, heartbeat: Optional[float] = None) -> Connector:
    """Connector opening a WebSocket to ``url`` with aiohttp."""

    async def connect() -> AiohttpConnection:
        session = aiohttp.ClientSession()
        try:
            ws = await session.ws_connect(url, heartbeat=heartbeat)
        except BaseException:
            # includes cancellation from SyncChannel.close()
            await asyncio.shield(session.close())
            raise
        return AiohttpConnection(session, ws)

    return connect


class SyncChannel:
    """
    Client side of the document sync protocol.

    Usage:
        channel = SyncChannel(config.SYNC)
        channel.add_document_listener(editor.set_content)
        await channel.start()
        ...
        channel.send_update(editor.get_content())
        ...
        await channel.close()
    """

    def __init__(
        self,
        settings: Optional[SyncSettings] = None,
        connector: Optional[Connector] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        verbose: bool = False,
    ):
        self.settings = settings or SyncSettings()
        self._connector = connector or aiohttp_connector(self.settings.url, self.settings.heartbeat_seconds)
        self._sleep = sleep
        self._phase_logger = create_phase_logger("sync", verbose=verbose)

        self._state = SyncState.DISCONNECTED
        self._document: Optional[str] = None
        self._outbox: Deque[str] = deque()
        self._outbox_ready = asyncio.Event()
        self._reconciled = False
        self._closing = False
        self._failed_attempts = 0
        self._connection: Optional[SyncConnection] = None
        self._task: Optional[asyncio.Task] = None
        self._state_listeners: List[StateListener] = []
        self._document_listeners: List[DocumentListener] = []
        self.last_error: Optional[SyncChannelError] = None

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    @property
    def state(self) -> SyncState:
        return self._state

    @property
    def document(self) -> Optional[str]:
        """Last known document snapshot (inbound or locally authored)."""
        return self._document

    @property
    def pending_updates(self) -> List[str]:
        return list(self._outbox)

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def add_state_listener(self, listener: StateListener) -> None:
        self._state_listeners.append(listener)

    def add_document_listener(self, listener: DocumentListener) -> None:
        self._document_listeners.append(listener)

    def _set_state(self, state: SyncState, error: Optional[SyncChannelError] = None) -> None:
        previous = self._state
        self._state = state
        if error is not None:
            self.last_error = error
        self._phase_logger.debug(f"Sync state {previous.value} -> {state.value}")
        for listener in list(self._state_listeners):
            try:
                listener(state, error)
            except Exception:
                logger.exception("Sync state listener failed")

    def _apply_document(self, snapshot: str) -> None:
        self._document = snapshot
        for listener in list(self._document_listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("Sync document listener failed")

    # ------------------------------------------------------------------
    # Outbound
    # ------------------------------------------------------------------

    def send_update(self, snapshot: str) -> None:
        """Queue a full-document update; sent as soon as the channel allows."""
        self._document = snapshot
        self._outbox.append(snapshot)
        self._trim_outbox()
        self._outbox_ready.set()

    def _trim_outbox(self) -> None:
        while len(self._outbox) > self.settings.max_queue_size:
            self._outbox.popleft()
            logger.warning(
                "Sync outbox full (%d snapshots), dropped the oldest update",
                self.settings.max_queue_size,
            )

    async def _write_loop(self, connection: SyncConnection) -> None:
        while True:
            await self._outbox_ready.wait()
            while self._reconciled and self._outbox:
                snapshot = self._outbox.popleft()
                try:
                    await connection.send_str(json.dumps(
                        SyncMessage(kind=SyncMessageType.UPDATE, payload=snapshot).to_wire()
                    ))
                except Exception as exc:
                    self._outbox.appendleft(snapshot)
                    self._trim_outbox()
                    raise SyncChannelError(f"Failed to send update: {exc}", cause=exc) from exc
            self._outbox_ready.clear()

    # ------------------------------------------------------------------
    # Inbound
    # ------------------------------------------------------------------

    async def handle_message(self, raw: str) -> None:
        """Apply one inbound wire message; malformed messages are skipped."""
        try:
            message = SyncMessage.model_validate(json.loads(raw))
        except (json.JSONDecodeError, ValidationError, TypeError) as exc:
            logger.warning("Skipping malformed sync message: %s", exc)
            return

        if message.kind == SyncMessageType.CHAT:
            logger.info("Sync chat message received: %s", message.payload)
            return

        if message.kind == SyncMessageType.INIT:
            self._reconcile_init(message.payload)
            return

        self._apply_document(message.payload)

    def _reconcile_init(self, snapshot: str) -> None:
        if self._outbox:
            self._phase_logger.info(
                f"Store init received with {len(self._outbox)} buffered local update(s); local snapshot wins"
            )
        else:
            self._apply_document(snapshot)
        self._reconciled = True
        self._outbox_ready.set()

    async def _read_loop(self, connection: SyncConnection) -> None:
        while True:
            raw = await connection.receive()
            if raw is None:
                return
            await self.handle_message(raw)

    # ------------------------------------------------------------------
    # Connection lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Start connecting in the background (idempotent)."""
        if self.is_running:
            return
        self._closing = False
        self._task = asyncio.create_task(self._run())

    async def close(self) -> None:
        """Stop the channel for good; buffered updates stay in ``pending_updates``."""
        self._closing = True
        task, self._task = self._task, None
        if task is not None:
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        if self._state != SyncState.DISCONNECTED:
            self._set_state(SyncState.DISCONNECTED)

    async def _run(self) -> None:
        while not self._closing:
            self._set_state(SyncState.CONNECTING)
            try:
                connection = await self._connector()
            except asyncio.CancelledError:
                raise
            except Exception as exc:
                error = exc if isinstance(exc, SyncChannelError) else SyncChannelError(
                    f"Could not connect to {self.settings.url}: {exc}", cause=exc
                )
                self._phase_logger.warning(str(error))
                self._set_state(SyncState.ERRORING, error)
                self._set_state(SyncState.DISCONNECTED)
                if not await self._backoff():
                    return
                continue

            self._failed_attempts = 0
            await self._serve(connection)
            self._set_state(SyncState.DISCONNECTED)
            if self._closing or not await self._backoff():
                return

    async def _serve(self, connection: SyncConnection) -> None:
        self._connection = connection
        self._reconciled = False
        self._set_state(SyncState.OPEN)
        reader = asyncio.create_task(self._read_loop(connection))
        writer = asyncio.create_task(self._write_loop(connection))
        try:
            with self._phase_logger.phase(Phase.SYNC, sub_label=self.settings.url):
                done, _ = await asyncio.wait({reader, writer}, return_when=asyncio.FIRST_COMPLETED)
                finished = done.pop()
                exc = finished.exception()
                if exc is None:
                    self._phase_logger.info("Sync connection closed by the store")
                    self._set_state(SyncState.CLOSED)
                else:
                    error = exc if isinstance(exc, SyncChannelError) else SyncChannelError(
                        f"Sync connection failed: {exc}", cause=exc
                    )
                    self._phase_logger.warning(str(error))
                    self._set_state(SyncState.ERRORING, error)
        finally:
            for task in (reader, writer):
                task.cancel()
            await asyncio.gather(reader, writer, return_exceptions=True)
            self._connection = None
            self._reconciled = False
            try:
                await connection.close()
            except Exception as exc:
                logger.debug("Error closing sync connection: %s", exc)

    def _next_delay(self) -> float:
        base = self.settings.reconnect_base_delay
        return min(base * (2 ** (self._failed_attempts - 1)), self.settings.reconnect_max_delay)

    async def _backoff(self) -> bool:
        """Wait before the next attempt; False once the attempt limit is reached."""
        self._failed_attempts += 1
        limit = self.settings.max_reconnect_attempts
        if limit is not None and self._failed_attempts > limit:
            logger.error("Giving up on sync connection after %d attempts", limit)
            return False
        delay = self._next_delay()
        logger.info("Reconnecting to document store in %.1fs (attempt %d)", delay, self._failed_attempts)
        await self._sleep(delay)
        return not self._closing
