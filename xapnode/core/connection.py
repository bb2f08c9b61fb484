from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from xap.protocol.constants import FAST_HEARTBEAT_MS


class LinkPhase(StrEnum):
    DISCONNECTED = "disconnected"
    BINDING = "binding"
    CONNECTED = "connected"
    ALIVE = "alive"
    LOST_CONNECTION = "lost-connection"


@dataclass
class ConnectionState:
    """Liveness bookkeeping owned by a single connection."""

    phase: LinkPhase = LinkPhase.DISCONNECTED
    connected: bool = False
    alive: bool = False
    period_ms: int = FAST_HEARTBEAT_MS
    elapsed_ms: int = 0
    last_sent_uid: str = ""
    echo_received: bool = False

    def mark_connected(self) -> None:
        self.phase = LinkPhase.CONNECTED
        self.connected = True
        self.alive = False
        self.period_ms = FAST_HEARTBEAT_MS
        self.elapsed_ms = 0

    def reset(self) -> None:
        self.phase = LinkPhase.DISCONNECTED
        self.connected = False
        self.alive = False
        self.period_ms = FAST_HEARTBEAT_MS
        self.elapsed_ms = 0
        self.last_sent_uid = ""
        self.echo_received = False
