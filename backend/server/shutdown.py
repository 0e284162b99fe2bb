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

import logging
import os
import sys
import threading
import time

logger = logging.getLogger("cfti-http")


def terminate(code: int = 0):
    """Flush the protocol stream and leave immediately, whatever thread we are on."""
    logger.info(f"Terminating with status {code}")
    try:
        sys.stdout.flush()
    except (OSError, ValueError) as e:
        logger.warning(f"Unable to flush output before exit: {e}")
    os._exit(code)


def schedule_exit(delay: float, code: int = 0) -> threading.Thread:
    """Exit after a small delay to allow the HTTP response to be sent."""

    def delayed_shutdown():
        time.sleep(delay)
        logger.info("Shutdown requested - exiting")
        terminate(code)

    shutdown_thread = threading.Thread(target=delayed_shutdown, name="CFTI - Shutdown")
    shutdown_thread.daemon = True
    shutdown_thread.start()
    return shutdown_thread


def signal_handler(signum, frame):
    """Handle SIGINT and SIGTERM signals."""
    logger.info(f"Received signal {signum}, initiating shutdown...")
    terminate(0)
