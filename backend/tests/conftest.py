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
Shared fixtures for the CFTI bridge tests.
"""

import io
import queue

import pytest

from cfti.bridge import CftiBridge
from cfti.interpreter import LineInterpreter
from cfti.outgoing import CommandSender
from cfti.state import StateStore


class BrokenStream:
    """A stream whose writes always fail."""

    def write(self, data):
        raise OSError("broken pipe")

    def flush(self):
        pass


class ExitRecorder:
    """Stands in for process termination and remembers the requested status."""

    def __init__(self):
        self.codes = []

    def __call__(self, code):
        self.codes.append(code)


@pytest.fixture
def store():
    return StateStore()


@pytest.fixture
def output():
    return io.StringIO()


@pytest.fixture
def sender(output):
    return CommandSender(output)


@pytest.fixture
def bridge(store, sender):
    return CftiBridge(store, sender)


@pytest.fixture
def broken_bridge(store):
    """A bridge whose controller stream rejects every write."""
    return CftiBridge(store, CommandSender(BrokenStream()))


@pytest.fixture
def exit_recorder():
    return ExitRecorder()


@pytest.fixture
def event_queue():
    return queue.Queue(maxsize=100)


@pytest.fixture
def interpreter(store, sender, exit_recorder, event_queue):
    return LineInterpreter(
        store,
        sender,
        io.StringIO(""),
        exit_callback=exit_recorder,
        event_queue=event_queue,
    )


@pytest.fixture
def feed(interpreter):
    """Apply several protocol lines in order and return the results."""

    def _feed(*lines):
        return [interpreter.process_line(line + "\n") for line in lines]

    return _feed
