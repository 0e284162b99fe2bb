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
Tests for cfti/bridge.py.
"""

import pytest

from common.exceptions import CommandNotSent, InvalidIdentifier, NoActiveScenario


class TestBridgeCommands:
    """Test cases for commands sent to the controller."""

    @pytest.mark.parametrize(
        "method, expected",
        [
            ("request_jig", "JIG\n"),
            ("request_test_list", "TESTS\n"),
            ("request_scenario_list", "SCENARIOS\n"),
            ("abort", "ABORT\n"),
            ("announce_identity", "HELLO CFTI HTTP 1.0\n"),
        ],
    )
    def test_simple_commands(self, bridge, output, method, expected):
        """Test commands that take no arguments."""
        assert getattr(bridge, method)() is True
        assert output.getvalue() == expected

    def test_select_scenario(self, bridge, output):
        """Test that selecting writes a SCENARIO line."""
        bridge.select_scenario("burn-in")

        assert output.getvalue() == "SCENARIO burn-in\n"

    def test_log_and_shutdown_escape_text(self, bridge, output):
        """Test that free text is escaped on the wire."""
        bridge.log("HTTP interface starting up")
        bridge.shutdown("bye\nnow")

        assert output.getvalue() == "LOG HTTP interface starting up\nSHUTDOWN bye\\nnow\n"

    def test_commands_do_not_change_state(self, bridge, store):
        """Test that sending a command leaves the state alone until the controller replies."""
        before = store.snapshot()

        bridge.select_scenario("other")
        bridge.abort()

        assert store.snapshot() == before


class TestStartScenario:
    """Test cases for CftiBridge.start_scenario."""

    def test_start_explicit_id(self, bridge, output):
        """Test starting a named scenario."""
        assert bridge.start_scenario("smoke") == "smoke"
        assert output.getvalue() == "START smoke\n"

    def test_start_active_scenario(self, bridge, store, output):
        """Test that without an id the active scenario is started."""
        with store.mutate() as state:
            state.scenario = "selected"

        assert bridge.start_scenario() == "selected"
        assert output.getvalue() == "START selected\n"

    def test_start_without_any_scenario(self, bridge, output):
        """Test that nothing is sent when no scenario is known."""
        with pytest.raises(NoActiveScenario):
            bridge.start_scenario()

        assert output.getvalue() == ""

    def test_start_after_bare_scenario_line(self, bridge, feed, output):
        """Test that the "No Scenario" placeholder is not started."""
        feed("SCENARIO")

        with pytest.raises(NoActiveScenario):
            bridge.start_scenario()

        assert output.getvalue() == ""

    def test_start_reports_write_failure(self, broken_bridge):
        """Test that a START that never reached the controller is an error."""
        with pytest.raises(CommandNotSent) as excinfo:
            broken_bridge.start_scenario("s1")

        assert excinfo.value.verb == "START"

    def test_select_reports_write_failure(self, broken_bridge):
        """Test that a failed SCENARIO write is reported."""
        assert broken_bridge.select_scenario("s1") is False


class TestScenarioIdentifiers:
    """Test cases for ids that cannot travel as one protocol field."""

    @pytest.mark.parametrize("scenario_id", ["a b", "tab\tid", "line\nbreak", ""])
    def test_select_rejects_bad_id(self, bridge, output, scenario_id):
        """Test that select_scenario refuses ids the controller would split."""
        with pytest.raises(InvalidIdentifier):
            bridge.select_scenario(scenario_id)

        assert output.getvalue() == ""

    @pytest.mark.parametrize("scenario_id", ["a b", "tab\tid", ""])
    def test_start_rejects_bad_id(self, bridge, output, scenario_id):
        """Test that start_scenario refuses ids the controller would split."""
        with pytest.raises(InvalidIdentifier):
            bridge.start_scenario(scenario_id)

        assert output.getvalue() == ""


class TestBridgeReads:
    """Test cases for snapshot and log access through the bridge."""

    def test_log_window_and_truncate(self, bridge, feed):
        """Test reading and truncating the log through the bridge."""
        feed("LOG info a t 1 0 one", "LOG info b t 2 0 two", "LOG info c t 3 0 three")

        window = bridge.get_log_window("global", "1")
        assert [entry.message for entry in window] == ["two", "three"]

        assert bridge.truncate_global_log() == 3
        assert bridge.get_log_window("global") == []
        assert len(bridge.get_snapshot()["current_log"]) == 3
