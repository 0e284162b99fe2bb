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


"""
Operations offered to the request layer (HTTP routes, Socket.IO handlers).

Reads go to the StateStore, commands go to the CommandSender. Nothing here
blocks on the interpreter beyond ordinary lock contention.
"""

import logging
from typing import List, Optional

from common.constants import SERVER_SIGNATURE, OutboundVerbs, Sentinels
from common.exceptions import CommandNotSent, InvalidIdentifier, NoActiveScenario

from .logwindow import Bound
from .outgoing import (
    Abort,
    CommandSender,
    Hello,
    Jig,
    Log,
    Scenario,
    Scenarios,
    Shutdown,
    Start,
    Tests,
)
from .state import InterfaceSnapshot, LogEntry, StateStore

logger = logging.getLogger("cfti-bridge")


def _check_identifier(kind: str, value: str) -> None:
    # Outbound ids travel as a single field; escaping does not cover spaces
    if not value or any(char.isspace() for char in value):
        raise InvalidIdentifier(kind, value)


class CftiBridge:
    """Handle shared by every request handler."""

    def __init__(self, store: StateStore, sender: CommandSender):
        self.store = store
        self.sender = sender

    def get_snapshot(self) -> InterfaceSnapshot:
        return self.store.snapshot()

    def get_log_window(
        self, sequence: str, start: Bound = None, end: Bound = None
    ) -> List[LogEntry]:
        """
        Read a window of the global, current or previous log.

        :raises RangeParseError: If `start` or `end` is not a non-negative integer.
        :raises UnknownLogSequence: If `sequence` is not a known log name.
        """
        return self.store.log_window(sequence, start, end)

    def truncate_global_log(self) -> int:
        return self.store.truncate_global_log()

    def select_scenario(self, scenario_id: str) -> bool:
        """
        Ask the controller to select a scenario.

        :raises InvalidIdentifier: If `scenario_id` is empty or contains whitespace.
        """
        _check_identifier("Scenario", scenario_id)
        logger.info(f"Selecting scenario {scenario_id}")
        return self.sender.send(Scenario(scenario_id))

    def start_scenario(self, scenario_id: Optional[str] = None) -> str:
        """
        Ask the controller to start a scenario.

        Without an id the currently active scenario is started.

        :return: The id of the scenario that was requested.
        :raises NoActiveScenario: If no id was given and none is active.
        :raises InvalidIdentifier: If `scenario_id` is empty or contains whitespace.
        :raises CommandNotSent: If the START line could not be written.
        """
        if scenario_id is None:
            with self.store.read() as state:
                scenario_id = state.scenario
            if scenario_id in ("", Sentinels.NO_SCENARIO):
                raise NoActiveScenario()

        _check_identifier("Scenario", scenario_id)
        logger.info(f"Starting scenario {scenario_id}")
        if not self.sender.send(Start(scenario_id)):
            raise CommandNotSent(OutboundVerbs.START)
        return scenario_id

    def abort(self) -> bool:
        logger.info("Aborting current scenario")
        return self.sender.send(Abort())

    def request_jig(self) -> bool:
        return self.sender.send(Jig())

    def request_test_list(self) -> bool:
        return self.sender.send(Tests())

    def request_scenario_list(self) -> bool:
        return self.sender.send(Scenarios())

    def announce_identity(self) -> bool:
        return self.sender.send(Hello(SERVER_SIGNATURE))

    def log(self, text: str) -> bool:
        return self.sender.send(Log(text))

    def shutdown(self, reason: str) -> bool:
        logger.info(f"Sending shutdown notice: {reason}")
        return self.sender.send(Shutdown(reason))
