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

"""Interface state and log handlers."""

from typing import Any, Dict, Optional, Union

from cfti.bridge import CftiBridge
from common.constants import ClientEvents, LogSequences
from common.exceptions import RangeParseError, UnknownLogSequence


async def get_state(
    bridge: CftiBridge, data: Optional[Dict], logger: Any, sid: str
) -> Dict[str, Union[bool, dict]]:
    """
    Get a snapshot of the whole interface state.

    Args:
        bridge: Bridge handle
        data: Not used
        logger: Logger instance
        sid: Socket.IO session ID

    Returns:
        Dictionary with success status and the state snapshot
    """
    logger.debug(f"Fetching interface state for {sid}")
    return {"success": True, "data": dict(bridge.get_snapshot())}


async def get_log(
    bridge: CftiBridge, data: Optional[Dict], logger: Any, sid: str
) -> Dict[str, Union[bool, list, str]]:
    """
    Get a window of one of the log sequences.

    Args:
        bridge: Bridge handle
        data: Optional 'sequence' (global, current or previous; defaults to global),
              'start' and 'end' bounds
        logger: Logger instance
        sid: Socket.IO session ID

    Returns:
        Dictionary with success status and the log entries
    """
    data = data or {}
    sequence = data.get("sequence", LogSequences.GLOBAL)
    logger.debug(f"Fetching {sequence} log window, data: {data}")

    try:
        entries = bridge.get_log_window(sequence, data.get("start"), data.get("end"))
    except (RangeParseError, UnknownLogSequence) as e:
        logger.warning(f"Rejected log window request: {e}")
        return {"success": False, "error": str(e)}

    return {"success": True, "data": [entry.to_dict() for entry in entries]}


async def truncate_log(
    bridge: CftiBridge, data: Optional[Dict], logger: Any, sid: str
) -> Dict[str, Union[bool, int]]:
    """Clear the global log."""
    logger.info(f"Global log truncation requested by {sid}")
    removed = bridge.truncate_global_log()
    return {"success": True, "data": removed}


def register_handlers(registry):
    """Register interface state handlers with the command registry."""
    registry.register_batch(
        {
            "get-state": (get_state, ClientEvents.DATA_REQUEST),
            "get-log": (get_log, ClientEvents.DATA_REQUEST),
            "truncate-log": (truncate_log, ClientEvents.DATA_SUBMISSION),
        }
    )
