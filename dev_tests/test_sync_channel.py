"""
Tests for sync_channel.py - inbound application, outbox buffering,
reconnect with backoff and init reconciliation.

A FakeConnection stands in for the WebSocket; the backoff sleep is recorded
instead of waited.
"""

import asyncio
import os
import sys
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import json_utils as json
from config import SyncSettings
from sync_channel import SyncChannel, SyncChannelError, SyncState, aiohttp_connector

from conftest import FakeConnection, RecordingSleep, wait_for


def wire(kind: str, data: str) -> str:
    return json.dumps({"type": kind, "data": data})


def sent_payloads(connection: FakeConnection):
    return [json.loads(raw) for raw in connection.sent]


class ScriptedConnector:
    """Connector handing out prepared connections, or raising prepared errors."""

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        if not self.outcomes:
            raise ConnectionRefusedError("no more connections")
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


@pytest.fixture
def settings():
    return SyncSettings(
        url="ws://store.test/ws",
        max_queue_size=3,
        reconnect_base_delay=0.5,
        reconnect_max_delay=4.0,
        max_reconnect_attempts=None,
    )


# ============================================================================
# Inbound messages
# ============================================================================

class TestInbound:

    @pytest.mark.asyncio
    async def test_init_then_update_leaves_update(self, settings):
        channel = SyncChannel(settings, connector=ScriptedConnector())
        seen = []
        channel.add_document_listener(seen.append)

        await channel.handle_message(wire("init", "X"))
        await channel.handle_message(wire("update", "Y"))

        assert channel.document == "Y"
        assert seen == ["X", "Y"]

    @pytest.mark.asyncio
    async def test_update_before_init_still_applies(self, settings):
        channel = SyncChannel(settings, connector=ScriptedConnector())
        await channel.handle_message(wire("update", "early"))
        assert channel.document == "early"

    @pytest.mark.asyncio
    async def test_chat_messages_are_only_logged(self, settings):
        channel = SyncChannel(settings, connector=ScriptedConnector())
        seen = []
        channel.add_document_listener(seen.append)
        await channel.handle_message(wire("chat", "hello"))
        assert channel.document is None
        assert seen == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("raw", [
        "not json",
        "[1, 2, 3]",
        '{"type": "delete", "data": "x"}',
        '{"type": "update", "data": 42}',
    ])
    async def test_malformed_messages_are_skipped(self, settings, raw):
        channel = SyncChannel(settings, connector=ScriptedConnector())
        await channel.handle_message(wire("update", "kept"))
        await channel.handle_message(raw)
        assert channel.document == "kept"

    @pytest.mark.asyncio
    async def test_failing_listener_does_not_break_channel(self, settings):
        channel = SyncChannel(settings, connector=ScriptedConnector())

        def broken(_snapshot):
            raise ValueError("ui exploded")

        channel.add_document_listener(broken)
        await channel.handle_message(wire("update", "still applied"))
        assert channel.document == "still applied"


# ============================================================================
# Outbox
# ============================================================================

class TestOutbox:

    def test_updates_buffer_while_disconnected(self, settings):
        channel = SyncChannel(settings, connector=ScriptedConnector())
        channel.send_update("a")
        channel.send_update("b")
        assert channel.pending_updates == ["a", "b"]
        assert channel.document == "b"

    def test_outbox_drops_oldest_when_full(self, settings):
        channel = SyncChannel(settings, connector=ScriptedConnector())
        for snapshot in ["1", "2", "3", "4", "5"]:
            channel.send_update(snapshot)
        assert channel.pending_updates == ["3", "4", "5"]


# ============================================================================
# Live connection
# ============================================================================

class TestLiveConnection:

    @pytest.mark.asyncio
    async def test_open_session_applies_init_and_sends_updates(self, settings, recording_sleep):
        connection = FakeConnection()
        channel = SyncChannel(settings, connector=ScriptedConnector(connection), sleep=recording_sleep)
        states = []
        channel.add_state_listener(lambda state, error: states.append(state))

        await channel.start()
        await wait_for(lambda: channel.state == SyncState.OPEN)
        connection.feed(wire("init", "Server doc"))
        await wait_for(lambda: channel.document == "Server doc")

        channel.send_update("Local edit")
        await wait_for(lambda: len(connection.sent) == 1)
        assert sent_payloads(connection) == [{"type": "update", "data": "Local edit"}]
        assert channel.pending_updates == []

        await channel.close()
        assert states[:2] == [SyncState.CONNECTING, SyncState.OPEN]
        assert channel.state == SyncState.DISCONNECTED
        assert connection.closed is True

    @pytest.mark.asyncio
    async def test_updates_wait_for_init(self, settings, recording_sleep):
        connection = FakeConnection()
        channel = SyncChannel(settings, connector=ScriptedConnector(connection), sleep=recording_sleep)

        await channel.start()
        await wait_for(lambda: channel.state == SyncState.OPEN)
        channel.send_update("too early")
        await asyncio.sleep(0.01)
        assert connection.sent == []

        connection.feed(wire("init", "stale"))
        await wait_for(lambda: len(connection.sent) == 1)
        assert sent_payloads(connection)[0]["data"] == "too early"
        await channel.close()

    @pytest.mark.asyncio
    async def test_buffered_snapshots_win_over_init_and_flush_in_order(self, settings, recording_sleep):
        connection = FakeConnection()
        channel = SyncChannel(settings, connector=ScriptedConnector(connection), sleep=recording_sleep)
        seen = []
        channel.add_document_listener(seen.append)

        channel.send_update("draft 1")
        channel.send_update("draft 2")
        await channel.start()
        await wait_for(lambda: channel.state == SyncState.OPEN)
        connection.feed(wire("init", "stale server copy"))
        await wait_for(lambda: len(connection.sent) == 2)

        assert [p["data"] for p in sent_payloads(connection)] == ["draft 1", "draft 2"]
        assert seen == []
        assert channel.document == "draft 2"
        await channel.close()


# ============================================================================
# Reconnect
# ============================================================================

class TestReconnect:

    @pytest.mark.asyncio
    async def test_connect_failures_back_off_exponentially(self, settings, recording_sleep):
        connection = FakeConnection()
        connector = ScriptedConnector(
            ConnectionRefusedError("down"),
            ConnectionRefusedError("down"),
            ConnectionRefusedError("down"),
            ConnectionRefusedError("down"),
            ConnectionRefusedError("down"),
            connection,
        )
        channel = SyncChannel(settings, connector=connector, sleep=recording_sleep)
        errors = []
        channel.add_state_listener(lambda state, error: errors.append(error) if error else None)

        await channel.start()
        await wait_for(lambda: channel.state == SyncState.OPEN)

        assert recording_sleep.delays == [0.5, 1.0, 2.0, 4.0, 4.0]
        assert len(errors) == 5
        assert all(isinstance(error, SyncChannelError) for error in errors)
        await channel.close()

    @pytest.mark.asyncio
    async def test_gives_up_after_attempt_limit(self, settings, recording_sleep):
        settings.max_reconnect_attempts = 2
        connector = ScriptedConnector()
        channel = SyncChannel(settings, connector=connector, sleep=recording_sleep)

        await channel.start()
        await wait_for(lambda: not channel.is_running)

        assert connector.calls == 3
        assert channel.state == SyncState.DISCONNECTED
        assert isinstance(channel.last_error, SyncChannelError)

    @pytest.mark.asyncio
    async def test_reconnects_after_store_closes_and_flushes_edits(self, settings, recording_sleep):
        first, second = FakeConnection(), FakeConnection()
        channel = SyncChannel(settings, connector=ScriptedConnector(first, second), sleep=recording_sleep)
        states = []
        channel.add_state_listener(lambda state, error: states.append(state))

        await channel.start()
        await wait_for(lambda: channel.state == SyncState.OPEN)
        first.feed(wire("init", "v1"))
        await wait_for(lambda: channel.document == "v1")

        first.hang_up()
        await wait_for(lambda: SyncState.CLOSED in states)
        channel.send_update("written while offline")

        await wait_for(lambda: len(second.sent) == 0 and channel.state == SyncState.OPEN and first.closed)
        second.feed(wire("init", "v1"))
        await wait_for(lambda: len(second.sent) == 1)

        assert sent_payloads(second) == [{"type": "update", "data": "written while offline"}]
        assert channel.document == "written while offline"
        assert recording_sleep.delays == [0.5]
        await channel.close()

    @pytest.mark.asyncio
    async def test_send_failure_keeps_snapshot_and_reconnects(self, settings, recording_sleep):
        first, second = FakeConnection(), FakeConnection()
        first.fail_sends = True
        channel = SyncChannel(settings, connector=ScriptedConnector(first, second), sleep=recording_sleep)
        states = []
        channel.add_state_listener(lambda state, error: states.append(state))

        await channel.start()
        await wait_for(lambda: channel.state == SyncState.OPEN)
        first.feed(wire("init", "v1"))
        await wait_for(lambda: channel.document == "v1")
        channel.send_update("v2")

        await wait_for(lambda: SyncState.ERRORING in states)
        await wait_for(lambda: first.closed and channel.state == SyncState.OPEN)
        assert channel.pending_updates == ["v2"]

        second.feed(wire("init", "v1"))
        await wait_for(lambda: len(second.sent) == 1)
        assert sent_payloads(second)[0]["data"] == "v2"
        await channel.close()

    @pytest.mark.asyncio
    async def test_close_stops_reconnecting(self, settings):
        never = asyncio.Event()

        async def slow_sleep(delay):
            await never.wait()

        channel = SyncChannel(settings, connector=ScriptedConnector(), sleep=slow_sleep)
        await channel.start()
        await wait_for(lambda: channel.last_error is not None)

        await channel.close()

        assert not channel.is_running
        assert channel.state == SyncState.DISCONNECTED


class TestAiohttpConnector:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [asyncio.CancelledError(), OSError("refused")])
    async def test_session_closed_when_connect_does_not_finish(self, error):
        session = MagicMock()
        session.ws_connect = AsyncMock(side_effect=error)
        session.close = AsyncMock()

        with patch("sync_channel.aiohttp.ClientSession", return_value=session):
            with pytest.raises(type(error)):
                await aiohttp_connector("ws://localhost:5000/ws")()

        session.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_close_cancelling_pending_connect_releases_session(self, settings):
        started = asyncio.Event()
        session = MagicMock()
        session.close = AsyncMock()

        async def hang(*args, **kwargs):
            started.set()
            await asyncio.Event().wait()

        session.ws_connect = hang

        with patch("sync_channel.aiohttp.ClientSession", return_value=session):
            channel = SyncChannel(settings, connector=aiohttp_connector(settings.url), sleep=RecordingSleep())
            await channel.start()
            await asyncio.wait_for(started.wait(), timeout=1.0)
            await channel.close()

        session.close.assert_awaited_once()
        assert channel.state == SyncState.DISCONNECTED
