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
Shared state of the bridge: jig, scenarios, tests, results and logs.

The state is owned by a single StateStore. The interpreter thread mutates it
inside `StateStore.mutate()`, one protocol line per call, and readers take
JSON-safe copies through `snapshot()` and `log_window()`.

Lock order is always store lock first, then the global log lock.
"""

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Dict, Iterator, List, Optional, TypedDict, Union

from common.constants import LogSequences
from common.exceptions import UnknownLogSequence

from .logwindow import Bound, slice_window
from .rwlock import ReadWriteLock

logger = logging.getLogger("cfti-state")


class ScenarioState(Enum):
    """Lifecycle of the active scenario."""

    PENDING = "pending"
    RUNNING = "running"
    PASS = "pass"
    FAIL = "fail"


class TestResultView(TypedDict):
    status: str
    detail: Optional[str]


@dataclass(frozen=True)
class ResultPending:
    status: ClassVar[str] = "pending"

    def to_dict(self) -> TestResultView:
        return {"status": self.status, "detail": None}


@dataclass(frozen=True)
class ResultRunning:
    status: ClassVar[str] = "running"

    def to_dict(self) -> TestResultView:
        return {"status": self.status, "detail": None}


@dataclass(frozen=True)
class ResultPass:
    detail: str = ""

    status: ClassVar[str] = "pass"

    def to_dict(self) -> TestResultView:
        return {"status": self.status, "detail": self.detail}


@dataclass(frozen=True)
class ResultFail:
    detail: str = ""

    status: ClassVar[str] = "fail"

    def to_dict(self) -> TestResultView:
        return {"status": self.status, "detail": self.detail}


@dataclass(frozen=True)
class ResultSkipped:
    detail: str = ""

    status: ClassVar[str] = "skipped"

    def to_dict(self) -> TestResultView:
        return {"status": self.status, "detail": self.detail}


TestResult = Union[ResultPending, ResultRunning, ResultPass, ResultFail, ResultSkipped]


class TimestampView(TypedDict):
    secs: int
    nanos: int


# "class" is a keyword, hence the functional form
LogEntryView = TypedDict(
    "LogEntryView",
    {
        "class": str,
        "unit_id": str,
        "unit_type": str,
        "timestamp": TimestampView,
        "message": str,
    },
)


@dataclass(frozen=True)
class LogEntry:
    """One LOG line. The timestamp is the controller's, not the time of receipt."""

    log_class: str
    unit_id: str
    unit_type: str
    secs: int
    nsecs: int
    message: str

    def to_dict(self) -> LogEntryView:
        return {
            "class": self.log_class,
            "unit_id": self.unit_id,
            "unit_type": self.unit_type,
            "timestamp": {"secs": self.secs, "nanos": self.nsecs},
            "message": self.message,
        }


class InterfaceSnapshot(TypedDict):
    """JSON-safe point-in-time copy of the whole interface state."""

    server: str
    jig: str
    jig_name: str
    jig_description: str
    scenarios: List[str]
    scenario_names: Dict[str, str]
    scenario_descriptions: Dict[str, str]
    scenario: str
    scenario_state: str
    tests: Dict[str, List[str]]
    test_names: Dict[str, str]
    test_descriptions: Dict[str, str]
    test_results: Dict[str, TestResultView]
    log: List[LogEntryView]
    current_log: List[LogEntryView]
    previous_log: List[LogEntryView]


@dataclass
class InterfaceState:

    # The identifier of the server (HELLO)
    server: str = ""

    # Current jig identifier (JIG) plus DESCRIBE JIG NAME / DESCRIPTION
    jig: str = ""
    jig_name: str = ""
    jig_description: str = ""

    # Currently-offered scenarios (SCENARIOS), names and descriptions keyed by lowercased id
    scenarios: List[str] = field(default_factory=list)
    scenario_names: Dict[str, str] = field(default_factory=dict)
    scenario_descriptions: Dict[str, str] = field(default_factory=dict)

    # Active scenario (SCENARIO / START / FINISH)
    scenario: str = ""
    scenario_state: ScenarioState = ScenarioState.PENDING

    # Test lists per scenario (TESTS), names and descriptions keyed by lowercased id
    tests: Dict[str, List[str]] = field(default_factory=dict)
    test_names: Dict[str, str] = field(default_factory=dict)
    test_descriptions: Dict[str, str] = field(default_factory=dict)

    # Results of the tests in the most recently seeded scenario
    test_results: Dict[str, TestResult] = field(default_factory=dict)

    # Every LOG line ever received, until truncated; guarded by the global log lock
    log: List[LogEntry] = field(default_factory=list)

    # LOG lines since the last START, and the ones before it
    current_log: List[LogEntry] = field(default_factory=list)
    previous_log: List[LogEntry] = field(default_factory=list)

    def seed_results(self, scenario_id: str) -> None:
        """Discard all results and mark every test of `scenario_id` as pending."""
        self.test_results = {
            test_id: ResultPending() for test_id in self.tests.get(scenario_id, [])
        }

    def rotate_logs(self) -> None:
        self.previous_log = self.current_log
        self.current_log = []

    def to_dict(self) -> InterfaceSnapshot:
        return {
            "server": self.server,
            "jig": self.jig,
            "jig_name": self.jig_name,
            "jig_description": self.jig_description,
            "scenarios": list(self.scenarios),
            "scenario_names": dict(self.scenario_names),
            "scenario_descriptions": dict(self.scenario_descriptions),
            "scenario": self.scenario,
            "scenario_state": self.scenario_state.value,
            "tests": {key: list(value) for key, value in self.tests.items()},
            "test_names": dict(self.test_names),
            "test_descriptions": dict(self.test_descriptions),
            "test_results": {key: value.to_dict() for key, value in self.test_results.items()},
            "log": [entry.to_dict() for entry in self.log],
            "current_log": [entry.to_dict() for entry in self.current_log],
            "previous_log": [entry.to_dict() for entry in self.previous_log],
        }


class StateStore:
    """
    Lock-guarded owner of the InterfaceState.

    The interpreter is the only writer. Readers never block each other; they
    only wait for the line currently being applied.
    """

    def __init__(self, initial_state: Optional[InterfaceState] = None):
        self._state = initial_state if initial_state is not None else InterfaceState()
        self._lock = ReadWriteLock()
        self._global_log_lock = threading.Lock()

    @contextmanager
    def mutate(self) -> Iterator[InterfaceState]:
        """Exclusive access for applying one protocol line."""
        with self._lock.write():
            yield self._state

    @contextmanager
    def read(self) -> Iterator[InterfaceState]:
        """
        Shared access for readers that need more than a snapshot.

        The yielded state must not be modified or retained past the block.
        """
        with self._lock.read():
            yield self._state

    def append_log(self, state: InterfaceState, entry: LogEntry) -> None:
        """Append to both the global and the current log. Call only inside mutate()."""
        with self._global_log_lock:
            state.log.append(entry)
            state.current_log.append(entry)

    def snapshot(self) -> InterfaceSnapshot:
        with self._lock.read():
            with self._global_log_lock:
                return self._state.to_dict()

    def log_window(
        self, sequence: str, start: Bound = None, end: Bound = None
    ) -> List[LogEntry]:
        """
        Return `[start, end)` of one log sequence.

        :raises RangeParseError: If a bound is present but not a non-negative integer.
        :raises UnknownLogSequence: If `sequence` is not global, current or previous.
        """
        if sequence == LogSequences.GLOBAL:
            with self._global_log_lock:
                return slice_window(self._state.log, start, end)

        if sequence == LogSequences.CURRENT:
            with self._lock.read():
                return slice_window(self._state.current_log, start, end)

        if sequence == LogSequences.PREVIOUS:
            with self._lock.read():
                return slice_window(self._state.previous_log, start, end)

        raise UnknownLogSequence(sequence, LogSequences.ALL)

    def truncate_global_log(self) -> int:
        """Clear the global log. Returns the number of entries removed."""
        with self._global_log_lock:
            removed = len(self._state.log)
            self._state.log.clear()

        logger.info(f"Global log truncated ({removed} entries removed)")
        return removed
