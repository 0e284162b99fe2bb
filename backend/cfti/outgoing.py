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
Outbound command encoder.

Every command the bridge can send to the test controller is a small frozen
dataclass. `encode_message` turns one into a single protocol line and
`CommandSender` writes that line to the output stream under a lock, so the
interpreter thread (answering PING) and request handlers never interleave
their bytes.
"""

import logging
import threading
from dataclasses import dataclass
from typing import ClassVar, TextIO, Tuple, Union

from common.constants import OutboundVerbs

from .codec import escape

logger = logging.getLogger("cfti-outgoing")


@dataclass(frozen=True)
class Hello:
    signature: str

    verb: ClassVar[str] = OutboundVerbs.HELLO

    def fields(self) -> Tuple[str, ...]:
        return (self.signature,)


@dataclass(frozen=True)
class Jig:
    verb: ClassVar[str] = OutboundVerbs.JIG

    def fields(self) -> Tuple[str, ...]:
        return ()


@dataclass(frozen=True)
class Scenarios:
    verb: ClassVar[str] = OutboundVerbs.SCENARIOS

    def fields(self) -> Tuple[str, ...]:
        return ()


@dataclass(frozen=True)
class Scenario:
    scenario_id: str

    verb: ClassVar[str] = OutboundVerbs.SCENARIO

    def fields(self) -> Tuple[str, ...]:
        return (self.scenario_id,)


@dataclass(frozen=True)
class Tests:
    verb: ClassVar[str] = OutboundVerbs.TESTS

    def fields(self) -> Tuple[str, ...]:
        return ()


@dataclass(frozen=True)
class Start:
    scenario_id: str

    verb: ClassVar[str] = OutboundVerbs.START

    def fields(self) -> Tuple[str, ...]:
        return (self.scenario_id,)


@dataclass(frozen=True)
class Abort:
    verb: ClassVar[str] = OutboundVerbs.ABORT

    def fields(self) -> Tuple[str, ...]:
        return ()


@dataclass(frozen=True)
class Log:
    text: str

    verb: ClassVar[str] = OutboundVerbs.LOG

    def fields(self) -> Tuple[str, ...]:
        return (self.text,)


@dataclass(frozen=True)
class Pong:
    nonce: str

    verb: ClassVar[str] = OutboundVerbs.PONG

    def fields(self) -> Tuple[str, ...]:
        return (self.nonce,)


@dataclass(frozen=True)
class Shutdown:
    reason: str

    verb: ClassVar[str] = OutboundVerbs.SHUTDOWN

    def fields(self) -> Tuple[str, ...]:
        return (self.reason,)


OutgoingMessage = Union[Hello, Jig, Scenarios, Scenario, Tests, Start, Abort, Log, Pong, Shutdown]


def encode_message(message: OutgoingMessage) -> str:
    """
    Render a command as one newline-terminated protocol line.

    Free-text fields are escaped, so the result always contains exactly one
    newline, at the end.
    """
    parts = [message.verb]
    parts.extend(escape(field) for field in message.fields())
    return " ".join(parts) + "\n"


class CommandSender:
    """Writes encoded commands to the output stream, one whole line at a time."""

    def __init__(self, stream: TextIO):
        self.stream = stream
        self.write_lock = threading.Lock()

    def send(self, message: OutgoingMessage) -> bool:
        """
        Encode and write a single command.

        Returns True if the line was written. Stream errors are logged and
        reported through the return value; they never propagate to the caller.
        """
        line = encode_message(message)
        try:
            with self.write_lock:
                self.stream.write(line)
                self.stream.flush()
        except (OSError, ValueError) as e:
            logger.error(f"Unable to write outgoing message {message.verb}: {e}")
            return False

        logger.debug(f"Sent: {line.rstrip()}")
        return True
