# Copyright (c) 2025 Efstratios Goudelis
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program. If not, see <https://www.gnu.org/licenses/>.

"""Forwarding of interpreter events to Socket.IO clients."""

import asyncio
import logging
import queue

logger = logging.getLogger("cfti-events")


async def drain_events(sockio, event_queue: queue.Queue) -> int:
    """
    Emit every event currently waiting in the queue.

    Args:
        sockio: Socket.IO server instance for emitting events
        event_queue: Queue filled by the line interpreter

    Returns:
        Number of events emitted
    """
    emitted = 0
    while True:
        try:
            message = event_queue.get_nowait()
        except queue.Empty:
            return emitted

        event = message.get("event")
        if event:
            await sockio.emit(event, message.get("data", {}))
            emitted += 1


async def handle_interface_events(sockio, event_queue: queue.Queue, interval: float = 0.1):
    """
    Continuously forwards interpreter events to connected clients.

    Args:
        sockio: Socket.IO server instance for emitting events
        event_queue: Queue filled by the line interpreter
        interval: Seconds to sleep between polls of the queue
    """
    logger.info("Interface event forwarder started")
    while True:
        try:
            await drain_events(sockio, event_queue)
            await asyncio.sleep(interval)
        except asyncio.CancelledError:
            logger.info("Interface event forwarder stopped")
            raise
        except Exception as e:  # pragma: no cover - best effort
            logger.error(f"Error forwarding interface events: {e}")
            await asyncio.sleep(1)
