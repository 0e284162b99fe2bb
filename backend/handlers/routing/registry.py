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
Command table for the Socket.IO interface.

Every command is bound to exactly one client event: reads arrive on
``data_request`` and anything that writes to the controller or clears a log
arrives on ``data_submission``.
"""

from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, List, Optional, Tuple

from common.constants import ClientEvents

Handler = Callable[..., Awaitable[dict]]


@dataclass(frozen=True)
class HandlerRoute:
    command: str
    handler: Handler
    event_type: str


class HandlerRegistry:
    """Maps command names to their handler and client event."""

    def __init__(self):
        self._routes: Dict[str, HandlerRoute] = {}

    def __contains__(self, command: str) -> bool:
        return command in self._routes

    def register(self, command: str, handler: Handler, event_type: str) -> HandlerRoute:
        """
        Add a command.

        :raises ValueError: If the event type is unknown or the command is already taken.
        """
        if event_type not in ClientEvents.ALL:
            raise ValueError(f"Unknown event type {event_type!r} for command {command!r}")
        if command in self._routes:
            raise ValueError(f"Command {command!r} is already registered")

        route = HandlerRoute(command, handler, event_type)
        self._routes[command] = route
        return route

    def register_batch(self, routes: Dict[str, Tuple[Handler, str]]) -> None:
        for command, (handler, event_type) in routes.items():
            self.register(command, handler, event_type)

    def get_handler(self, command: str) -> Optional[HandlerRoute]:
        return self._routes.get(command)

    def get_commands_for_event_type(self, event_type: str) -> List[str]:
        return sorted(cmd for cmd, route in self._routes.items() if route.event_type == event_type)
