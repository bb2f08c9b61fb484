from __future__ import annotations

import asyncio
import logging
import socket
from collections.abc import Callable
from typing import Optional, Protocol, Tuple

from xap.protocol.errors import TransportError

logger = logging.getLogger(__name__)

Address = Tuple[str, int]
DatagramCallback = Callable[[bytes, Address], None]
ErrorCallback = Callable[[Exception], None]


class SocketPair(Protocol):
    """Receive/transmit datagram endpoints a connection talks through."""

    @property
    def local_port(self) -> int: ...

    async def open(
        self,
        host: str,
        port: int,
        on_datagram: DatagramCallback,
        on_error: ErrorCallback,
        on_lost: ErrorCallback,
    ) -> int: ...

    def send(self, data: bytes, address: Address) -> None: ...

    def close(self) -> None: ...


class _DatagramChannel(asyncio.DatagramProtocol):
    def __init__(
        self, on_datagram: Optional[DatagramCallback], on_error: ErrorCallback, on_lost: ErrorCallback
    ) -> None:
        self._on_datagram = on_datagram
        self._on_error = on_error
        self._on_lost = on_lost

    def datagram_received(self, data: bytes, addr: Address) -> None:
        if self._on_datagram is not None:
            self._on_datagram(data, addr)

    def error_received(self, exc: Exception) -> None:
        self._on_error(exc)

    def connection_lost(self, exc: Optional[Exception]) -> None:
        # None means the socket was closed on purpose
        if exc is not None:
            self._on_lost(exc)


class UdpSocketPair:
    """UDP receive socket bound to a local address plus an unbound sender."""

    def __init__(self) -> None:
        self._rx: Optional[asyncio.DatagramTransport] = None
        self._tx: Optional[asyncio.DatagramTransport] = None

    @property
    def local_port(self) -> int:
        if self._rx is None:
            return 0
        return self._rx.get_extra_info("sockname")[1]

    async def open(
        self,
        host: str,
        port: int,
        on_datagram: DatagramCallback,
        on_error: ErrorCallback,
        on_lost: ErrorCallback,
    ) -> int:
        """Bind the receiver (``port`` 0 picks an ephemeral one) and return its port.

        ``on_error`` gets transient socket errors, ``on_lost`` is called when
        either socket dies and the pair can no longer be used.
        """
        loop = asyncio.get_running_loop()
        try:
            self._rx, _ = await loop.create_datagram_endpoint(
                lambda: _DatagramChannel(on_datagram, on_error, on_lost),
                local_addr=(host, port),
            )
            self._tx, _ = await loop.create_datagram_endpoint(
                lambda: _DatagramChannel(None, on_error, on_lost),
                family=socket.AF_INET,
                allow_broadcast=True,
            )
        except OSError as exc:
            self.close()
            raise TransportError(f"Cannot bind {host}:{port}: {exc}") from exc
        logger.info("Listening on %s:%s", host, self.local_port)
        return self.local_port

    def send(self, data: bytes, address: Address) -> None:
        if self._tx is None or self._tx.is_closing():
            raise TransportError("Transmit socket is closed")
        try:
            self._tx.sendto(data, address)
        except OSError as exc:
            raise TransportError(f"Send to {address[0]}:{address[1]} failed: {exc}") from exc

    def close(self) -> None:
        for transport in (self._rx, self._tx):
            if transport is not None:
                transport.close()
        self._rx = None
        self._tx = None


__all__ = ["Address", "SocketPair", "UdpSocketPair"]
