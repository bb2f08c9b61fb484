from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict

from xap.protocol import HeartbeatFields, Message

from xapnode.config import load_config
from xapnode.core import XapConnection

logger = logging.getLogger("xapnode")


def pop_log_level(options: Dict[str, Any], default: str = "INFO") -> str:
    """Take ``log_level`` out of the options as a logging level name."""
    return str(options.pop("log_level", None) or default).upper()


async def run_node() -> None:
    options = load_config()
    logging.basicConfig(level=pop_log_level(options))
    connection = XapConnection(options)

    @connection.on_connected
    def _connected() -> None:
        logger.info("Network reachable, own heartbeat observed")

    @connection.on_lost_connection
    def _lost() -> None:
        logger.warning("Own heartbeat no longer observed")

    @connection.on_heartbeat
    def _heartbeat(hb: HeartbeatFields, sender) -> None:
        logger.info("Heartbeat %s from %s (%s) via %s:%s", hb.msg_class, hb.source, hb.uid, *sender)

    @connection.on_message
    def _message(msg: Message, sender) -> None:
        logger.info("Message %s from %s via %s:%s\n%s", msg.msg_class, msg.source, *sender, msg.original_text)

    @connection.on_error
    def _error(data, sender) -> None:
        logger.warning("Unusable datagram from %s: %r", sender, data)

    await connection.connect()
    try:
        await asyncio.Event().wait()  # keep running
    finally:
        if connection.connected:
            await connection.disconnect()


def main() -> None:
    try:
        asyncio.run(run_node())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
