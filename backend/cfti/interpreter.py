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
Inbound line interpreter.

Reads the test controller's protocol one line at a time and applies each
line to the StateStore as a single locked transition. Bad lines are logged
and dropped; only EXIT, end of input or a broken input stream stop the loop.
"""

import logging
import os
import queue
import threading
import time
from functools import partial
from typing import Any, Callable, Dict, List, Optional, TextIO

from common.constants import (
    FALLBACK_FINISH_CODE,
    PASS_CODE_MAX,
    PASS_CODE_MIN,
    DescribeClasses,
    DescribeFields,
    InboundVerbs,
    Sentinels,
    SocketEvents,
)
from common.exceptions import MalformedLine

from .codec import unescape
from .outgoing import CommandSender, Pong
from .state import (
    InterfaceState,
    LogEntry,
    ResultFail,
    ResultPass,
    ResultRunning,
    ResultSkipped,
    ScenarioState,
    StateStore,
)

logger = logging.getLogger("cfti-interpreter")

NANOS_PER_SECOND = 1_000_000_000

# Transitions receive the locked state and the argument tokens, and may
# return an extra event to publish once the lock is released.
Transition = Callable[[InterfaceState, List[str]], Optional[Dict[str, Any]]]


def _exit_process(code: int) -> None:
    logger.info(f"Exiting with status {code}")
    os._exit(code)


def _parse_integer(text: str) -> Optional[int]:
    """Parse an optionally signed run of ASCII digits; None for anything else."""
    digits = text[1:] if text[:1] in ("+", "-") else text
    if digits.isascii() and digits.isdigit():
        return int(text)
    return None


class LineInterpreter(threading.Thread):
    """
    Dedicated reader of the controller's input stream.

    Every line is unescaped token by token, classified by its verb and applied
    to the store while holding the store's write lock, so readers only ever see
    the state before or after a whole line.
    """

    def __init__(
        self,
        store: StateStore,
        sender: CommandSender,
        stream: TextIO,
        exit_callback: Optional[Callable[[int], None]] = None,
        event_queue: Optional[queue.Queue] = None,
    ):
        """
        Initialize the interpreter.

        Args:
            store: State store mutated by incoming lines
            sender: Used to answer PING
            stream: Text stream with the controller's protocol lines
            exit_callback: Called with an exit status on EXIT or end of input
            event_queue: Optional queue receiving one event per applied line
        """
        super().__init__(daemon=True, name="CFTI - LineInterpreter")
        self.store = store
        self.sender = sender
        self.stream = stream
        self.exit_callback = exit_callback if exit_callback is not None else _exit_process
        self.event_queue = event_queue
        self.running = True

        self.transitions: Dict[str, Transition] = {
            InboundVerbs.HELLO: self._handle_hello,
            InboundVerbs.JIG: self._handle_jig,
            InboundVerbs.SCENARIOS: self._handle_scenarios,
            InboundVerbs.SCENARIO: self._handle_scenario,
            InboundVerbs.TESTS: self._handle_tests,
            InboundVerbs.DESCRIBE: self._handle_describe,
            InboundVerbs.START: self._handle_start,
            InboundVerbs.FINISH: self._handle_finish,
            InboundVerbs.RUNNING: partial(self._handle_test_result, InboundVerbs.RUNNING),
            InboundVerbs.PASS: partial(self._handle_test_result, InboundVerbs.PASS),
            InboundVerbs.FAIL: partial(self._handle_test_result, InboundVerbs.FAIL),
            InboundVerbs.SKIP: partial(self._handle_test_result, InboundVerbs.SKIP),
            InboundVerbs.LOG: self._handle_log,
        }

        # Statistics
        self.stats: Dict[str, Any] = {
            "lines_received": 0,
            "lines_applied": 0,
            "lines_rejected": 0,
            "events_dropped": 0,
            "last_activity": None,
        }

    def run(self):
        """Main read loop - runs in separate thread"""
        logger.info(f"Line interpreter started (id={id(self)})")

        while self.running:
            try:
                raw_line = self.stream.readline()
            except (OSError, ValueError) as e:
                logger.error(f"Unable to read from input stream: {e}")
                self._terminate(1)
                break

            if raw_line == "":
                logger.info("Input stream closed, shutting down")
                self._terminate(0)
                break

            try:
                self.process_line(raw_line)
            except Exception as e:
                self.stats["lines_rejected"] += 1
                logger.error(f"Error processing line {raw_line.rstrip()!r}: {e}")
                logger.exception(e)

        logger.info(f"Line interpreter stopped (stats: {self.stats})")

    def stop(self):
        self.running = False

    def process_line(self, raw_line: str) -> bool:
        """
        Apply one protocol line.

        Returns True if the line was understood and applied, False if it was
        blank, unrecognized or malformed.
        """
        tokens = [unescape(token) for token in raw_line.split()]
        if not tokens:
            return False

        self.stats["lines_received"] += 1
        self.stats["last_activity"] = time.time()

        verb = tokens[0].lower()
        args = tokens[1:]
        logger.debug(f"Received {verb} with {len(args)} argument(s)")

        if verb == InboundVerbs.EXIT:
            logger.info("EXIT received from controller")
            self.stats["lines_applied"] += 1
            self._terminate(0)
            return True

        if verb == InboundVerbs.PING:
            return self._handle_ping(args)

        transition = self.transitions.get(verb)
        if transition is None:
            self.stats["lines_rejected"] += 1
            logger.warning(f"Unrecognized command: {verb}")
            return False

        try:
            with self.store.mutate() as state:
                extra_event = transition(state, args)
        except MalformedLine as e:
            self.stats["lines_rejected"] += 1
            logger.warning(f"Ignoring line {raw_line.rstrip()!r}: {e}")
            return False

        self.stats["lines_applied"] += 1
        self._publish(SocketEvents.CFTI_UPDATE, {"verb": verb})
        if extra_event is not None:
            self._publish(extra_event["event"], extra_event["data"])
        return True

    def _terminate(self, code: int) -> None:
        self.running = False
        self.exit_callback(code)

    def _publish(self, event: str, data: Dict[str, Any]) -> None:
        if self.event_queue is None:
            return
        try:
            self.event_queue.put_nowait({"event": event, "data": data})
        except queue.Full:
            self.stats["events_dropped"] += 1
            logger.debug(f"Event queue full, dropping {event}")

    def _handle_ping(self, args: List[str]) -> bool:
        if not args:
            self.stats["lines_rejected"] += 1
            logger.warning("Ignoring PING without a nonce")
            return False

        self.sender.send(Pong(args[0]))
        self.stats["lines_applied"] += 1
        return True

    def _handle_hello(self, state: InterfaceState, args: List[str]) -> None:
        state.server = " ".join(args)

    def _handle_jig(self, state: InterfaceState, args: List[str]) -> None:
        state.jig = args[0] if args else Sentinels.NO_JIG

    def _handle_scenarios(self, state: InterfaceState, args: List[str]) -> None:
        state.scenarios = list(args)

    def _handle_scenario(self, state: InterfaceState, args: List[str]) -> None:
        state.scenario = args[0] if args else Sentinels.NO_SCENARIO
        state.scenario_state = ScenarioState.PENDING

    def _handle_tests(self, state: InterfaceState, args: List[str]) -> None:
        if not args:
            raise MalformedLine(InboundVerbs.TESTS, "requires a scenario id")

        scenario_id = args[0]
        state.tests[scenario_id] = list(args[1:])
        state.seed_results(scenario_id)

    def _handle_describe(self, state: InterfaceState, args: List[str]) -> None:
        if len(args) < 2:
            raise MalformedLine(InboundVerbs.DESCRIBE, "requires a class and a field")

        describe_class = args[0].lower()
        describe_field = args[1].lower()

        if describe_class not in DescribeClasses.ALL:
            raise MalformedLine(InboundVerbs.DESCRIBE, f"has unrecognized class {describe_class}")
        if describe_field not in DescribeFields.ALL:
            raise MalformedLine(InboundVerbs.DESCRIBE, f"has unrecognized field {describe_field}")

        # Jigs have no identifier, everything after the field is the value
        if describe_class == DescribeClasses.JIG:
            value = " ".join(args[2:])
            if describe_field == DescribeFields.NAME:
                state.jig_name = value
            else:
                state.jig_description = value
            return

        key = args[2].lower() if len(args) > 2 else Sentinels.NO_NAME
        value = " ".join(args[3:])

        if describe_class == DescribeClasses.TEST:
            names, descriptions = state.test_names, state.test_descriptions
        else:
            names, descriptions = state.scenario_names, state.scenario_descriptions

        if describe_field == DescribeFields.NAME:
            names[key] = value
        else:
            descriptions[key] = value

    def _handle_start(self, state: InterfaceState, args: List[str]) -> None:
        if not args:
            raise MalformedLine(InboundVerbs.START, "requires a scenario id")

        scenario_id = args[0]
        state.scenario = scenario_id
        state.scenario_state = ScenarioState.RUNNING
        state.seed_results(scenario_id)
        state.rotate_logs()

    def _handle_finish(self, state: InterfaceState, args: List[str]) -> None:
        code = _parse_integer(args[1]) if len(args) > 1 else None
        if code is None:
            reported = args[1] if len(args) > 1 else "nothing"
            logger.warning(
                f"Unable to parse FINISH result code from {reported!r}, "
                f"assuming {FALLBACK_FINISH_CODE}"
            )
            code = FALLBACK_FINISH_CODE

        if PASS_CODE_MIN <= code <= PASS_CODE_MAX:
            state.scenario_state = ScenarioState.PASS
        else:
            state.scenario_state = ScenarioState.FAIL

    def _handle_test_result(self, verb: str, state: InterfaceState, args: List[str]) -> None:
        if not args:
            raise MalformedLine(verb, "requires a test id")

        test_id = args[0]
        detail = " ".join(args[1:])

        if verb == InboundVerbs.RUNNING:
            state.test_results[test_id] = ResultRunning()
        elif verb == InboundVerbs.PASS:
            state.test_results[test_id] = ResultPass(detail)
        elif verb == InboundVerbs.FAIL:
            state.test_results[test_id] = ResultFail(detail)
        else:
            state.test_results[test_id] = ResultSkipped(detail)

    def _handle_log(self, state: InterfaceState, args: List[str]) -> Dict[str, Any]:
        if len(args) < 5:
            raise MalformedLine(InboundVerbs.LOG, f"requires at least 5 fields, got {len(args)}")

        log_class, unit_id, unit_type, secs_text, nsecs_text = args[:5]
        secs = _parse_integer(secs_text)
        nsecs = _parse_integer(nsecs_text)
        if secs is None or nsecs is None or secs < 0 or nsecs < 0:
            raise MalformedLine(InboundVerbs.LOG, f"has invalid timestamp {secs_text} {nsecs_text}")

        # Carry whole seconds out of the nanosecond field
        secs += nsecs // NANOS_PER_SECOND
        nsecs %= NANOS_PER_SECOND

        entry = LogEntry(
            log_class=log_class,
            unit_id=unit_id,
            unit_type=unit_type,
            secs=secs,
            nsecs=nsecs,
            message=" ".join(args[5:]),
        )
        self.store.append_log(state, entry)

        return {"event": SocketEvents.CFTI_LOG, "data": entry.to_dict()}
