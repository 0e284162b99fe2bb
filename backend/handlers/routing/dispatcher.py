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

"""Routes one Socket.IO command to its registered handler."""

import logging
from typing import Any, Dict, Optional

from cfti.bridge import CftiBridge

from .registry import HandlerRegistry

logger = logging.getLogger("cfti-http")


async def dispatch_request(
    bridge: CftiBridge,
    event_type: str,
    cmd: str,
    data: Optional[Dict],
    sid: str,
    registry: HandlerRegistry,
) -> Dict[str, Any]:
    """
    Run the handler registered for `cmd`.

    Args:
        bridge: Bridge handle passed on to the handler
        event_type: Client event the command arrived on
        cmd: Command name
        data: Command payload from the client, if any
        sid: Socket.IO session ID
        registry: Command table to look `cmd` up in

    Returns:
        The handler's reply, or ``{"success": False, "error": ...}`` when the
        command is unknown, arrived on the wrong event or its handler failed
    """
    route = registry.get_handler(cmd)

    if route is None:
        logger.error(f"Unknown command: {cmd}")
        return {"success": False, "error": f"Unknown command: {cmd}"}

    if route.event_type != event_type:
        logger.warning(
            f"Command {cmd} from {sid} arrived on {event_type} instead of {route.event_type}"
        )
        return {
            "success": False,
            "error": f"Command {cmd} must be sent as {route.event_type}",
        }

    try:
        return await route.handler(bridge, data, logger, sid)
    except Exception as e:
        logger.error(f"Error handling command '{cmd}': {str(e)}")
        logger.exception(e)
        return {"success": False, "error": str(e)}
