from .connection import ConnectionState, LinkPhase
from .events import ConnectionEvent, EventRouter
from .network import XapConnection
from .scheduler import LoopScheduler, Scheduler, TaskHandle, TickHandle
from .transport import Address, SocketPair, UdpSocketPair

__all__ = [
    "ConnectionState",
    "LinkPhase",
    "ConnectionEvent",
    "EventRouter",
    "XapConnection",
    "LoopScheduler",
    "Scheduler",
    "TaskHandle",
    "TickHandle",
    "Address",
    "SocketPair",
    "UdpSocketPair",
]
