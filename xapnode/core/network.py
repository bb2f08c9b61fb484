from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any, Optional, Union

from xap.protocol import (
    Block,
    HeartbeatClass,
    HeartbeatFields,
    IncompleteMessage,
    Message,
    NotConnected,
    ParseFailure,
    TransportError,
    build_header,
    build_heartbeat,
    decode_msg,
    encode_msg,
    parse_header_fields,
    parse_heartbeat_fields,
)
from xap.protocol.constants import (
    ENCODING,
    FAST_HEARTBEAT_MS,
    HEADER_BLOCK_NAME,
    HEARTBEAT_BACKOFF,
    HEARTBEAT_BLOCK_NAME,
    TICK_INTERVAL_MS,
)
from xapnode.config import ConnectionConfig, resolve_config

from .connection import ConnectionState, LinkPhase
from .events import ConnectionEvent, EventRouter, Handler
from .scheduler import LoopScheduler, Scheduler, TickHandle
from .transport import Address, SocketPair, UdpSocketPair

logger = logging.getLogger(__name__)


class XapConnection:
    """UDP xAP endpoint that sends heartbeats and watches for their echo.

    The connection is alive once one of its own heartbeats has come back
    through the network. Events are delivered to handlers registered with
    ``on_connected``, ``on_message`` and friends.
    """

    def __init__(
        self,
        options: Union[Mapping[str, Any], ConnectionConfig, None] = None,
        *,
        scheduler: Optional[Scheduler] = None,
        sockets: Optional[SocketPair] = None,
        log: Optional[logging.Logger] = None,
    ) -> None:
        self.config = options if isinstance(options, ConnectionConfig) else resolve_config(options)
        self.logger = log or logger
        self.scheduler: Scheduler = scheduler or LoopScheduler()
        self.sockets: SocketPair = sockets or UdpSocketPair()
        self.state = ConnectionState()
        self.events = EventRouter(self.logger)
        self._tick: Optional[TickHandle] = None
        self._tx_port = self.config.port

    # -- event registration -------------------------------------------------

    def register_handler(self, event: Union[ConnectionEvent, str], handler: Handler) -> Handler:
        return self.events.register(ConnectionEvent(event), handler)

    def on_connected(self, handler: Handler) -> Handler:
        return self.register_handler(ConnectionEvent.CONNECTED, handler)

    def on_disconnected(self, handler: Handler) -> Handler:
        return self.register_handler(ConnectionEvent.DISCONNECTED, handler)

    def on_lost_connection(self, handler: Handler) -> Handler:
        return self.register_handler(ConnectionEvent.LOST_CONNECTION, handler)

    def on_message(self, handler: Handler) -> Handler:
        return self.register_handler(ConnectionEvent.MESSAGE, handler)

    def on_heartbeat(self, handler: Handler) -> Handler:
        return self.register_handler(ConnectionEvent.HEARTBEAT, handler)

    def on_error(self, handler: Handler) -> Handler:
        return self.register_handler(ConnectionEvent.ERROR, handler)

    # -- state views --------------------------------------------------------

    @property
    def connected(self) -> bool:
        return self.state.connected

    def is_alive(self) -> bool:
        return self.state.alive

    @property
    def local_port(self) -> int:
        return self.sockets.local_port

    @property
    def steady_period_ms(self) -> int:
        return self.config.hb_interval * 1000

    # -- lifecycle ----------------------------------------------------------

    async def connect(self) -> None:
        if self.state.connected or self.state.phase == LinkPhase.BINDING:
            return

        port = 0 if self.config.loopback else self.config.port
        self.state.phase = LinkPhase.BINDING
        try:
            bound_port = await self.sockets.open(
                self.config.rx_address,
                port,
                self._datagram_received,
                self._socket_error,
                self._sockets_lost,
            )
        except TransportError:
            self.state.reset()
            raise
        if self.config.loopback:
            # loopback testing transmits on the listening port
            self._tx_port = bound_port
        self.logger.info(
            "Connected as %s (%s), heartbeats to %s:%s",
            self.config.source,
            self.config.uid,
            self.config.tx_address,
            self._tx_port,
        )

        self.state.mark_connected()
        self._heartbeat_now()
        self._tick = self.scheduler.call_every(TICK_INTERVAL_MS / 1000, self._on_tick)

    async def disconnect(self) -> None:
        if not self.state.connected:
            raise NotConnected()
        self._stop_ticking()
        try:
            self._send_heartbeat(HeartbeatClass.STOPPED)
        except TransportError as exc:
            self.logger.warning("Final heartbeat failed: %s", exc)
        self._teardown()
        self.logger.info("Disconnected %s", self.config.source)
        self.events.dispatch(ConnectionEvent.DISCONNECTED)

    def _stop_ticking(self) -> None:
        if self._tick is not None:
            self._tick.cancel()
            self._tick = None

    def _teardown(self) -> None:
        self.sockets.close()
        self.state.reset()
        self._tx_port = self.config.port

    # -- sending ------------------------------------------------------------

    async def send(self, text: str) -> None:
        self._transmit(text.encode(ENCODING))

    async def send_block(
        self,
        msg_class: str,
        block: Block,
        target: Optional[str] = None,
        subdevice_source: Optional[str] = None,
        subdevice_id: Optional[int] = None,
    ) -> None:
        await self.send_blocks(msg_class, [block], target, subdevice_source, subdevice_id)

    async def send_blocks(
        self,
        msg_class: str,
        blocks: Iterable[Block],
        target: Optional[str] = None,
        subdevice_source: Optional[str] = None,
        subdevice_id: Optional[int] = None,
    ) -> None:
        if not self.state.connected:
            raise NotConnected()
        blocks = list(blocks)
        if not blocks:
            raise IncompleteMessage()
        header = build_header(
            msg_class, self.config.uid, self.config.source, target, subdevice_source, subdevice_id
        )
        msg = Message.from_blocks([header, *blocks])
        self._transmit(encode_msg(msg))

    def _transmit(self, data: bytes) -> None:
        if not self.state.connected:
            raise NotConnected()
        address = (self.config.tx_address, self._tx_port)
        self.sockets.send(data, address)
        self.logger.debug("Sent %d bytes to %s:%s", len(data), *address)

    # -- heartbeats ---------------------------------------------------------

    def _on_tick(self) -> None:
        state = self.state
        state.elapsed_ms += TICK_INTERVAL_MS
        if state.elapsed_ms < state.period_ms:
            return
        state.elapsed_ms = 0
        if not state.alive:
            state.period_ms = int(state.period_ms * HEARTBEAT_BACKOFF)
        state.period_ms = min(state.period_ms, self.steady_period_ms)
        self._heartbeat_now()
        self.logger.debug("Next heartbeat in %sms", state.period_ms)

    def _heartbeat_now(self) -> None:
        try:
            self._send_heartbeat(HeartbeatClass.ALIVE)
        except TransportError as exc:
            self.logger.warning("Heartbeat send failed: %s", exc)
            self.events.dispatch(ConnectionEvent.ERROR, exc, None)

    def _send_heartbeat(self, hb_class: HeartbeatClass) -> None:
        heartbeat = build_heartbeat(
            hb_class, self.config.uid, self.config.source, self.config.hb_interval, self.local_port
        )
        if hb_class == HeartbeatClass.ALIVE:
            self._supervise()
        self._transmit(encode_msg(heartbeat))

    def _supervise(self) -> None:
        state = self.state
        if state.alive and not state.echo_received:
            state.phase = LinkPhase.LOST_CONNECTION
            state.period_ms = FAST_HEARTBEAT_MS
            self.logger.warning("Connection lost: heartbeat %s was not echoed", state.last_sent_uid)
            self.events.dispatch(ConnectionEvent.LOST_CONNECTION)
        state.alive = state.echo_received
        state.last_sent_uid = self.config.uid.upper()
        state.echo_received = False

    # -- receiving ----------------------------------------------------------

    def _datagram_received(self, data: bytes, sender: Address) -> None:
        self.logger.debug("Received %d bytes from %s:%s", len(data), *sender)
        blocks = decode_msg(data)
        if not blocks:
            self._reject(data, sender, "no blocks found")
            return

        kind = blocks[0].name.lower()
        if kind == HEARTBEAT_BLOCK_NAME:
            heartbeat = parse_heartbeat_fields(blocks[0])
            if heartbeat is None:
                self._reject(data, sender, "invalid heartbeat")
                return
            self._heartbeat_received(heartbeat)
            self.events.dispatch(ConnectionEvent.HEARTBEAT, heartbeat, sender)
        elif kind == HEADER_BLOCK_NAME and len(blocks) > 1:
            if parse_header_fields(blocks[0]) is None:
                self._reject(data, sender, "invalid header")
                return
            msg = Message.from_blocks(blocks)
            msg.original_text = data.decode(ENCODING)
            self.logger.debug("Message from %s, class %s", msg.source, msg.msg_class)
            self.events.dispatch(ConnectionEvent.MESSAGE, msg, sender)
        else:
            self._reject(data, sender, f"unexpected {blocks[0].name!r} block")

    def _heartbeat_received(self, heartbeat: HeartbeatFields) -> None:
        state = self.state
        self.logger.debug("Heartbeat from %s, uid %s (ours %s)", heartbeat.source, heartbeat.uid, state.last_sent_uid)
        if not state.connected or heartbeat.uid != state.last_sent_uid:
            return
        state.echo_received = True
        if not state.alive:
            state.alive = True
            state.phase = LinkPhase.ALIVE
            state.period_ms = self.steady_period_ms
            self.logger.info("Own heartbeat observed, %s is alive", self.config.source)
            self.events.dispatch(ConnectionEvent.CONNECTED)

    def _reject(self, data: bytes, sender: Address, reason: str) -> None:
        failure = ParseFailure(data, sender, reason)
        self.logger.debug("Rejected datagram from %s:%s: %s", sender[0], sender[1], failure.to_payload())
        self.events.dispatch(ConnectionEvent.ERROR, data, sender)

    def _socket_error(self, exc: Exception) -> None:
        self.logger.error("Socket error: %s", exc)
        self.events.dispatch(ConnectionEvent.ERROR, TransportError(str(exc)), None)

    def _sockets_lost(self, exc: Exception) -> None:
        if not self.state.connected:
            return
        self.logger.error("Socket lost, dropping connection %s: %s", self.config.source, exc)
        self._stop_ticking()
        self._teardown()
        self.events.dispatch(ConnectionEvent.ERROR, TransportError(f"Socket lost: {exc}"), None)
        self.events.dispatch(ConnectionEvent.DISCONNECTED)


__all__ = ["XapConnection"]
