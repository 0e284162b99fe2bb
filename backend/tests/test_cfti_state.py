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
Tests for cfti/state.py and cfti/rwlock.py.
"""

import json
import threading
import time

import pytest

from cfti.rwlock import ReadWriteLock
from cfti.state import (
    LogEntry,
    ResultFail,
    ResultPass,
    ResultPending,
    ResultRunning,
    ResultSkipped,
    ScenarioState,
    StateStore,
)
from common.exceptions import RangeParseError, UnknownLogSequence


def make_entry(index):
    return LogEntry(
        log_class="info",
        unit_id=f"unit-{index}",
        unit_type="sensor",
        secs=1700000000 + index,
        nsecs=index,
        message=f"message {index}",
    )


def fill_log(store, count):
    with store.mutate() as state:
        for index in range(count):
            store.append_log(state, make_entry(index))


class TestResultVariants:
    """Test cases for the test result variants."""

    def test_variants_without_detail(self):
        """Test that pending and running carry no detail."""
        assert ResultPending().to_dict() == {"status": "pending", "detail": None}
        assert ResultRunning().to_dict() == {"status": "running", "detail": None}

    def test_variants_with_detail(self):
        """Test that pass, fail and skipped carry their detail text."""
        assert ResultPass("ok").to_dict() == {"status": "pass", "detail": "ok"}
        assert ResultFail("bad").to_dict() == {"status": "fail", "detail": "bad"}
        assert ResultSkipped("").to_dict() == {"status": "skipped", "detail": ""}

    def test_variants_compare_by_value(self):
        """Test that results are plain values."""
        assert ResultPass("x") == ResultPass("x")
        assert ResultPass("x") != ResultFail("x")


class TestLogEntry:
    """Test cases for LogEntry serialization."""

    def test_to_dict(self):
        """Test the JSON shape of a log entry."""
        entry = LogEntry("warn", "psu", "power", 12, 34, "over voltage")

        assert entry.to_dict() == {
            "class": "warn",
            "unit_id": "psu",
            "unit_type": "power",
            "timestamp": {"secs": 12, "nanos": 34},
            "message": "over voltage",
        }


class TestStateStoreSnapshot:
    """Test cases for StateStore.snapshot."""

    def test_initial_snapshot(self, store):
        """Test the snapshot of a fresh store."""
        snapshot = store.snapshot()

        assert snapshot["server"] == ""
        assert snapshot["jig"] == ""
        assert snapshot["scenario"] == ""
        assert snapshot["scenario_state"] == "pending"
        assert snapshot["scenarios"] == []
        assert snapshot["tests"] == {}
        assert snapshot["test_results"] == {}
        assert snapshot["log"] == []
        assert snapshot["current_log"] == []
        assert snapshot["previous_log"] == []

    def test_snapshot_is_json_serializable(self, store):
        """Test that a populated snapshot can be rendered as JSON."""
        fill_log(store, 3)
        with store.mutate() as state:
            state.tests["s1"] = ["t1"]
            state.seed_results("s1")
            state.scenario_state = ScenarioState.RUNNING

        rendered = json.loads(json.dumps(store.snapshot()))

        assert rendered["scenario_state"] == "running"
        assert rendered["test_results"] == {"t1": {"status": "pending", "detail": None}}
        assert len(rendered["log"]) == 3

    def test_snapshot_is_detached(self, store):
        """Test that changing a snapshot does not touch the store."""
        with store.mutate() as state:
            state.scenarios = ["a", "b"]

        snapshot = store.snapshot()
        snapshot["scenarios"].append("c")

        assert store.snapshot()["scenarios"] == ["a", "b"]


class TestStateStoreLogs:
    """Test cases for log windows and truncation."""

    def test_append_log_goes_to_global_and_current(self, store):
        """Test that a log entry lands in both sequences."""
        fill_log(store, 2)

        assert len(store.log_window("global")) == 2
        assert len(store.log_window("current")) == 2
        assert store.log_window("previous") == []

    def test_rotate_logs(self, store):
        """Test that rotating moves current to previous."""
        fill_log(store, 4)
        with store.mutate() as state:
            state.rotate_logs()

        assert [e.unit_id for e in store.log_window("previous")] == [
            "unit-0",
            "unit-1",
            "unit-2",
            "unit-3",
        ]
        assert store.log_window("current") == []
        assert len(store.log_window("global")) == 4

    def test_log_window_on_ten_entries(self, store):
        """Test windowing a ten entry log."""
        fill_log(store, 10)

        assert [e.nsecs for e in store.log_window("global", 7)] == [7, 8, 9]
        assert [e.nsecs for e in store.log_window("global", None, 2)] == [0, 1]
        assert store.log_window("global", 5, 2) == []
        assert store.log_window("global", 10) == []
        assert len(store.log_window("global", 0, 1000)) == 10

    def test_log_window_bad_bound(self, store):
        """Test that a bad bound raises RangeParseError."""
        fill_log(store, 3)

        with pytest.raises(RangeParseError):
            store.log_window("current", "x")

    def test_log_window_unknown_sequence(self, store):
        """Test that an unknown sequence name is rejected."""
        with pytest.raises(UnknownLogSequence):
            store.log_window("archive")

    def test_truncate_global_log(self, store):
        """Test that truncation only clears the global log."""
        fill_log(store, 5)

        removed = store.truncate_global_log()

        assert removed == 5
        assert store.log_window("global") == []
        assert len(store.log_window("current")) == 5

    def test_append_after_truncate(self, store):
        """Test that new entries are collected again after truncation."""
        fill_log(store, 2)
        store.truncate_global_log()
        fill_log(store, 1)

        assert len(store.log_window("global")) == 1


class TestReadWriteLock:
    """Test cases for ReadWriteLock."""

    def test_readers_share_the_lock(self):
        """Test that two readers can hold the lock at the same time."""
        lock = ReadWriteLock()
        inside = threading.Barrier(2, timeout=5)

        def reader():
            with lock.read():
                inside.wait()

        threads = [threading.Thread(target=reader) for _ in range(2)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=5)

        assert not any(thread.is_alive() for thread in threads)

    def test_writer_excludes_readers(self):
        """Test that a reader waits for an active writer."""
        lock = ReadWriteLock()
        events = []

        lock.acquire_write()

        def reader():
            with lock.read():
                events.append("read")

        thread = threading.Thread(target=reader)
        thread.start()
        time.sleep(0.05)
        events.append("write-done")
        lock.release_write()
        thread.join(timeout=5)

        assert events == ["write-done", "read"]

    def test_writer_waits_for_readers(self):
        """Test that a writer waits until readers leave."""
        lock = ReadWriteLock()
        events = []

        lock.acquire_read()

        def writer():
            with lock.write():
                events.append("write")

        thread = threading.Thread(target=writer)
        thread.start()
        time.sleep(0.05)
        events.append("read-done")
        lock.release_read()
        thread.join(timeout=5)

        assert events == ["read-done", "write"]
