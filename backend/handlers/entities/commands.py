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

"""Handlers that send commands to the test controller."""

from typing import Any, Dict, Optional, Union

from cfti.bridge import CftiBridge
from common.constants import ClientEvents
from common.exceptions import CommandNotSent, InvalidIdentifier, NoActiveScenario


def _sent(success: bool, action: str) -> Dict[str, Union[bool, str]]:
    if success:
        return {"success": True, "data": action}
    return {"success": False, "error": f"Unable to send {action}"}


async def select_scenario(
    bridge: CftiBridge, data: Optional[Dict], logger: Any, sid: str
) -> Dict[str, Union[bool, str]]:
    """
    Select a scenario on the controller.

    Args:
        bridge: Bridge handle
        data: Must contain 'id', the scenario to select
        logger: Logger instance
        sid: Socket.IO session ID

    Returns:
        Dictionary with success status
    """
    if not data or not data.get("id"):
        return {"success": False, "error": "Scenario id is required"}

    try:
        sent = bridge.select_scenario(str(data["id"]))
    except InvalidIdentifier as e:
        logger.warning(f"Rejected scenario selection from {sid}: {e}")
        return {"success": False, "error": str(e)}

    return _sent(sent, "SCENARIO")


async def start_scenario(
    bridge: CftiBridge, data: Optional[Dict], logger: Any, sid: str
) -> Dict[str, Union[bool, str]]:
    """
    Start a scenario, by default the one currently selected.

    Args:
        bridge: Bridge handle
        data: Optional 'id' of the scenario to start
        logger: Logger instance
        sid: Socket.IO session ID

    Returns:
        Dictionary with success status and the started scenario id
    """
    scenario_id = (data or {}).get("id")
    try:
        started = bridge.start_scenario(str(scenario_id) if scenario_id else None)
    except (NoActiveScenario, InvalidIdentifier, CommandNotSent) as e:
        logger.warning(f"Start requested by {sid} failed: {e}")
        return {"success": False, "error": str(e)}

    return {"success": True, "data": started}


async def abort(
    bridge: CftiBridge, data: Optional[Dict], logger: Any, sid: str
) -> Dict[str, Union[bool, str]]:
    return _sent(bridge.abort(), "ABORT")


async def request_jig(
    bridge: CftiBridge, data: Optional[Dict], logger: Any, sid: str
) -> Dict[str, Union[bool, str]]:
    return _sent(bridge.request_jig(), "JIG")


async def request_scenarios(
    bridge: CftiBridge, data: Optional[Dict], logger: Any, sid: str
) -> Dict[str, Union[bool, str]]:
    return _sent(bridge.request_scenario_list(), "SCENARIOS")


async def request_tests(
    bridge: CftiBridge, data: Optional[Dict], logger: Any, sid: str
) -> Dict[str, Union[bool, str]]:
    return _sent(bridge.request_test_list(), "TESTS")


async def send_hello(
    bridge: CftiBridge, data: Optional[Dict], logger: Any, sid: str
) -> Dict[str, Union[bool, str]]:
    return _sent(bridge.announce_identity(), "HELLO")


async def send_log(
    bridge: CftiBridge, data: Optional[Dict], logger: Any, sid: str
) -> Dict[str, Union[bool, str]]:
    """Forward a line of text to the controller's log."""
    if not data or "text" not in data:
        return {"success": False, "error": "Log text is required"}

    return _sent(bridge.log(str(data["text"])), "LOG")


async def shutdown(
    bridge: CftiBridge, data: Optional[Dict], logger: Any, sid: str
) -> Dict[str, Union[bool, str]]:
    """Tell the controller the bridge is going away."""
    reason = (data or {}).get("reason") or f"Requested by client {sid}"
    return _sent(bridge.shutdown(str(reason)), "SHUTDOWN")


def register_handlers(registry):
    """Register controller command handlers with the command registry."""
    registry.register_batch(
        {
            "select-scenario": (select_scenario, ClientEvents.DATA_SUBMISSION),
            "start-scenario": (start_scenario, ClientEvents.DATA_SUBMISSION),
            "abort": (abort, ClientEvents.DATA_SUBMISSION),
            "request-jig": (request_jig, ClientEvents.DATA_SUBMISSION),
            "request-scenarios": (request_scenarios, ClientEvents.DATA_SUBMISSION),
            "request-tests": (request_tests, ClientEvents.DATA_SUBMISSION),
            "send-hello": (send_hello, ClientEvents.DATA_SUBMISSION),
            "send-log": (send_log, ClientEvents.DATA_SUBMISSION),
            "shutdown": (shutdown, ClientEvents.DATA_SUBMISSION),
        }
    )
