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

import asyncio
import logging
import os
import queue
from contextlib import asynccontextmanager
from typing import Callable, Optional, Set, Tuple

import socketio
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, PlainTextResponse

from cfti.bridge import CftiBridge
from common.exceptions import (
    CommandNotSent,
    InvalidIdentifier,
    NoActiveScenario,
    RangeParseError,
    UnknownLogSequence,
)
from handlers.socket import register_socketio_handlers
from server.events import handle_interface_events

logger = logging.getLogger("cfti-http")


def create_server(
    bridge: CftiBridge,
    index_file: str = "index.html",
    on_exit: Optional[Callable[[], None]] = None,
    event_queue: Optional[queue.Queue] = None,
) -> Tuple[FastAPI, socketio.AsyncServer, socketio.ASGIApp]:
    """
    Build the HTTP and Socket.IO front end of the bridge.

    Args:
        bridge: Bridge handle shared by every route and Socket.IO handler
        index_file: Page served at "/"
        on_exit: Called after SHUTDOWN was sent by the /exit route
        event_queue: Interpreter events to forward to Socket.IO clients

    Returns:
        The FastAPI app, the Socket.IO server and the combined ASGI app to serve
    """

    # Track background tasks so they can be cancelled on shutdown
    background_tasks: Set[asyncio.Task] = set()

    @asynccontextmanager
    async def lifespan(fastapiapp: FastAPI):
        """Custom lifespan for FastAPI."""
        logger.info("FastAPI lifespan startup...")
        if event_queue is not None:
            task = asyncio.create_task(handle_interface_events(sio, event_queue))
            background_tasks.add(task)

        try:
            yield
        finally:
            logger.info("FastAPI lifespan cleanup...")
            for task in background_tasks:
                task.cancel()
            background_tasks.clear()

    sio = socketio.AsyncServer(
        async_mode="asgi",
        cors_allowed_origins="*",
        logger=False,
        engineio_logger=False,
    )
    app = FastAPI(
        lifespan=lifespan,
        title="CFTI HTTP Bridge",
        description="HTTP and Socket.IO access to a CFTI test controller",
        version="1.0.0",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
    )
    socket_app = socketio.ASGIApp(sio, other_asgi_app=app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_socketio_handlers(sio, bridge)

    @app.get("/")
    def show_index():
        if not os.path.isfile(index_file):
            raise HTTPException(status_code=404, detail=f"{index_file} not found")
        return FileResponse(index_file, media_type="text/html")

    @app.get("/current.json")
    def show_status_json():
        return bridge.get_snapshot()

    @app.get("/log/{sequence}")
    def show_log(sequence: str, start: Optional[str] = None, end: Optional[str] = None):
        try:
            entries = bridge.get_log_window(sequence, start, end)
        except RangeParseError as e:
            raise HTTPException(status_code=400, detail=str(e))
        except UnknownLogSequence as e:
            raise HTTPException(status_code=404, detail=str(e))
        return [entry.to_dict() for entry in entries]

    @app.delete("/log/global")
    def truncate_log():
        return {"removed": bridge.truncate_global_log()}

    @app.get("/hello", response_class=PlainTextResponse)
    def send_hello():
        bridge.announce_identity()
        return "Sending HELLO"

    @app.get("/jig", response_class=PlainTextResponse)
    def send_jig():
        bridge.request_jig()
        return "Sending JIG"

    @app.get("/scenarios", response_class=PlainTextResponse)
    def send_scenarios():
        bridge.request_scenario_list()
        return "Sending SCENARIOS"

    @app.get("/tests", response_class=PlainTextResponse)
    def send_tests():
        bridge.request_test_list()
        return "Sending TESTS"

    @app.get("/scenario/{scenario_id}", response_class=PlainTextResponse)
    def send_scenario(scenario_id: str):
        try:
            bridge.select_scenario(scenario_id)
        except InvalidIdentifier as e:
            raise HTTPException(status_code=400, detail=str(e))
        return f"Sending SCENARIO {scenario_id}"

    def start(scenario_id: Optional[str]) -> str:
        try:
            started = bridge.start_scenario(scenario_id)
        except NoActiveScenario as e:
            raise HTTPException(status_code=409, detail=str(e))
        except InvalidIdentifier as e:
            raise HTTPException(status_code=400, detail=str(e))
        except CommandNotSent as e:
            raise HTTPException(status_code=503, detail=str(e))
        return f"Sending START {started}"

    @app.get("/start", response_class=PlainTextResponse)
    def send_start_active():
        return start(None)

    @app.get("/start/{scenario_id}", response_class=PlainTextResponse)
    def send_start(scenario_id: str):
        return start(scenario_id)

    @app.get("/abort", response_class=PlainTextResponse)
    def send_abort():
        bridge.abort()
        return "Sending ABORT"

    @app.get("/exit", response_class=PlainTextResponse)
    def exit_server():
        bridge.shutdown("User clicked Quit")
        if on_exit is not None:
            on_exit()
        return "Server is shutting down"

    return app, sio, socket_app
