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


class CftiError(Exception):
    """Base class for errors raised by the protocol engine."""

    message: str

    def __str__(self):
        return f"{type(self).__name__}: {self.message}"


class MalformedLine(CftiError):
    """A recognized verb arrived with arguments it cannot be applied with."""

    def __init__(self, verb: str, reason: str):
        self.verb = verb
        self.message = f"{verb.upper()} {reason}"
        super().__init__(self.message)


class RangeParseError(ValueError, CftiError):
    """A log window bound is present but not a non-negative integer."""

    def __init__(self, bound: str, value):
        self.bound = bound
        self.value = value
        self.message = f"{bound} must be a non-negative integer, got {value!r}"
        super().__init__(self.message)


class UnknownLogSequence(KeyError, CftiError):
    """A log sequence other than global, current or previous was requested."""

    def __init__(self, sequence: str, known=()):
        self.sequence = sequence
        self.message = f"{sequence!r} is not a log sequence"
        if known:
            self.message += f" (expected one of {', '.join(known)})"
        super().__init__(self.message)


class NoActiveScenario(CftiError):
    """START was requested without an id while no scenario is selected."""

    def __init__(self, message: str = "No scenario given and none is currently selected"):
        self.message = message
        super().__init__(message)


class InvalidIdentifier(ValueError, CftiError):
    """An outbound id is empty or would be split into several protocol fields."""

    def __init__(self, kind: str, value: str):
        self.kind = kind
        self.value = value
        self.message = f"{kind} id {value!r} must be non-empty and contain no whitespace"
        super().__init__(self.message)


class CommandNotSent(CftiError):
    """A command could not be written to the controller."""

    def __init__(self, verb: str):
        self.verb = verb
        self.message = f"Unable to send {verb}"
        super().__init__(self.message)
