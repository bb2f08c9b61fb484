from __future__ import annotations

import asyncio
import re

from xap.protocol import Block
from xapnode.core import LoopScheduler, XapConnection
from xapnode.core.transport import _DatagramChannel

TIMEOUT = 5


def test_loopback_send_and_receive():
    async def scenario():
        conn = XapConnection(
            {"source": {"vendor": "xfx", "device": "unit-test", "instance": "send-receive"}, "loopback": True}
        )
        connected = asyncio.Event()
        received = asyncio.Event()
        heartbeats = []
        messages = []
        connections = []

        @conn.on_connected
        def _connected():
            connections.append(conn.local_port)
            connected.set()

        @conn.on_heartbeat
        def _heartbeat(hb, sender):
            heartbeats.append(hb)

        @conn.on_message
        def _message(msg, sender):
            messages.append(msg)
            received.set()

        await conn.connect()
        try:
            await asyncio.wait_for(connected.wait(), TIMEOUT)
            await conn.send_block("xap.test", Block("block", {"key": "value"}))
            await asyncio.wait_for(received.wait(), TIMEOUT)
        finally:
            await conn.disconnect()
        return connections, heartbeats, messages

    connections, heartbeats, messages = asyncio.run(scenario())

    assert len(connections) == 1
    assert heartbeats[0].source == "xfx.unit-test.send-receive"
    assert re.fullmatch(r"FF\.[0-9A-F]{8}:0000", heartbeats[0].uid)
    msg = messages[0]
    assert msg.msg_class == "xap.test"
    assert msg.body[0].name == "block"
    assert msg.get_first_block_value("key") == "value"


def test_loop_scheduler_repeats_until_cancelled():
    async def scenario():
        calls = []
        handle = LoopScheduler().call_every(0.01, lambda: calls.append(1))
        await asyncio.sleep(0.1)
        assert handle.active
        handle.cancel()
        await asyncio.sleep(0.05)
        return calls, handle

    calls, handle = asyncio.run(scenario())

    assert len(calls) >= 2
    assert not handle.active


def test_loop_scheduler_survives_failing_callback():
    async def scenario():
        calls = []

        def flaky():
            calls.append(1)
            if len(calls) == 1:
                raise RuntimeError("first tick fails")

        handle = LoopScheduler().call_every(0.01, flaky)
        await asyncio.sleep(0.1)
        handle.cancel()
        return calls

    assert len(asyncio.run(scenario())) >= 2


def test_channel_reports_only_unexpected_socket_loss():
    errors, lost = [], []
    channel = _DatagramChannel(None, errors.append, lost.append)
    failure = OSError("interface down")

    channel.connection_lost(None)
    channel.error_received(ConnectionRefusedError())
    channel.connection_lost(failure)

    assert lost == [failure]
    assert len(errors) == 1
