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


import argparse

parser = argparse.ArgumentParser(
    description="Bridge a CFTI test controller on stdin/stdout to HTTP and Socket.IO clients."
)
parser.add_argument("--host", type=str, default="localhost", help="Host to run the server on")
parser.add_argument("--port", type=int, default=3000, help="Port to run the server on")
parser.add_argument(
    "--log-level",
    type=str,
    default="INFO",
    choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
    help="Set the logging level",
)
parser.add_argument(
    "--log-config", type=str, default="logconfig.yaml", help="Path to the logger configuration file"
)
parser.add_argument(
    "--index-file", type=str, default="index.html", help="Page served at the root URL"
)
parser.add_argument(
    "--shutdown-delay",
    type=float,
    default=0.005,
    help="Seconds to wait between sending SHUTDOWN and exiting",
)
parser.add_argument(
    "--event-queue-size",
    type=int,
    default=1000,
    help="Maximum number of pending Socket.IO events before new ones are dropped",
)

arguments = parser.parse_args()
