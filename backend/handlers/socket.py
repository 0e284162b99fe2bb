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

"""Socket.IO session handling and command entry points."""

import logging
from typing import Dict

from cfti.bridge import CftiBridge
from common.constants import ClientEvents, SocketEvents
from handlers.entities import commands, interface
from handlers.routing import HandlerRegistry, dispatch_request

logger = logging.getLogger("cfti-http")


def create_handler_registry() -> HandlerRegistry:
    """Build a registry holding every entity handler."""
    registry = HandlerRegistry()
    interface.register_handlers(registry)
    commands.register_handlers(registry)
    return registry


def register_socketio_handlers(sio, bridge: CftiBridge) -> Dict[str, Dict]:
    """
    Register Socket.IO event handlers.

    Returns the live session table, keyed by session id, so callers can see
    who is connected.
    """

    # hold a list of sessions
    sessions: Dict[str, Dict] = {}
    registry = create_handler_registry()

    @sio.on("connect")
    async def connect(sid, environ, auth=None):
        client_ip = environ.get("REMOTE_ADDR")
        logger.info(f"Client {sid} from {client_ip} connected")
        sessions[sid] = {"ip": client_ip}

        # Bring the new client up to date without waiting for the next line
        await sio.emit(SocketEvents.CFTI_SNAPSHOT, bridge.get_snapshot(), to=sid)

    @sio.on("disconnect")
    async def disconnect(sid, *args):
        session = sessions.pop(sid, {})
        logger.info(f"Client {sid} from {session.get('ip')} disconnected")

    @sio.on(ClientEvents.DATA_REQUEST)
    async def handle_data_request(sid, cmd, data=None):
        logger.debug(f"Received {ClientEvents.DATA_REQUEST} from {sid}: {cmd}")
        return await dispatch_request(
            bridge, ClientEvents.DATA_REQUEST, cmd, data, sid, registry
        )

    @sio.on(ClientEvents.DATA_SUBMISSION)
    async def handle_data_submission(sid, cmd, data=None):
        logger.info(f"Received {ClientEvents.DATA_SUBMISSION} from {sid}: {cmd}, data: {data}")
        return await dispatch_request(
            bridge, ClientEvents.DATA_SUBMISSION, cmd, data, sid, registry
        )

    return sessions
