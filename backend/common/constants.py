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
Constants module for the CFTI bridge.
Contains the protocol vocabulary and magic strings used throughout the application.
"""

# Announced by HELLO when the bridge identifies itself to the test controller
SERVER_SIGNATURE = "CFTI HTTP 1.0"


# ============================================================================
# Inbound protocol verbs (controller -> bridge)
# ============================================================================
class InboundVerbs:
    """Verbs understood by the line interpreter (compared case-insensitively)"""

    HELLO = "hello"
    JIG = "jig"
    SCENARIOS = "scenarios"
    SCENARIO = "scenario"
    TESTS = "tests"
    DESCRIBE = "describe"
    PING = "ping"
    START = "start"
    FINISH = "finish"
    RUNNING = "running"
    PASS = "pass"
    FAIL = "fail"
    SKIP = "skip"
    LOG = "log"
    EXIT = "exit"


# ============================================================================
# Outbound protocol verbs (bridge -> controller)
# ============================================================================
class OutboundVerbs:
    """Verbs written to the output stream"""

    HELLO = "HELLO"
    JIG = "JIG"
    SCENARIOS = "SCENARIOS"
    SCENARIO = "SCENARIO"
    TESTS = "TESTS"
    START = "START"
    ABORT = "ABORT"
    LOG = "LOG"
    PONG = "PONG"
    SHUTDOWN = "SHUTDOWN"


# ============================================================================
# DESCRIBE sub-dispatch
# ============================================================================
class DescribeClasses:
    TEST = "test"
    SCENARIO = "scenario"
    JIG = "jig"

    ALL = (TEST, SCENARIO, JIG)


class DescribeFields:
    NAME = "name"
    DESCRIPTION = "description"

    ALL = (NAME, DESCRIPTION)


# ============================================================================
# Defaults substituted for missing arguments
# ============================================================================
class Sentinels:
    NO_JIG = "No Jig"
    NO_SCENARIO = "No Scenario"
    NO_NAME = "No Name"


# FINISH code used when the reported code cannot be parsed
FALLBACK_FINISH_CODE = 500

# Completion codes in this range mark a scenario as passed
PASS_CODE_MIN = 200
PASS_CODE_MAX = 299


# ============================================================================
# Log sequences exposed to window queries
# ============================================================================
class LogSequences:
    GLOBAL = "global"
    CURRENT = "current"
    PREVIOUS = "previous"

    ALL = (GLOBAL, CURRENT, PREVIOUS)


# ============================================================================
# Socket.IO event names (client-facing events)
# ============================================================================
class SocketEvents:
    """Socket.IO event names emitted to clients"""

    # Emitted after every applied protocol line
    CFTI_UPDATE = "cfti-update"

    # Emitted for every new log entry
    CFTI_LOG = "cfti-log"

    # Full snapshot sent to a client right after it connects
    CFTI_SNAPSHOT = "cfti-snapshot"


class ClientEvents:
    """Socket.IO events clients send commands on"""

    # Reads that never reach the controller
    DATA_REQUEST = "data_request"

    # Anything that changes state or writes to the controller
    DATA_SUBMISSION = "data_submission"

    ALL = (DATA_REQUEST, DATA_SUBMISSION)
