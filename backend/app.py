import io
import os
import queue
import signal
import sys
import threading
from functools import partial

sys.path.append(os.path.dirname(os.path.abspath(__file__)))
import setproctitle  # noqa: E402
import uvicorn  # noqa: E402

from cfti.bridge import CftiBridge  # noqa: E402
from cfti.interpreter import LineInterpreter  # noqa: E402
from cfti.outgoing import CommandSender  # noqa: E402
from cfti.state import StateStore  # noqa: E402
from common.arguments import arguments  # noqa: E402
from common.logger import get_logger_config, logger  # noqa: E402
from server.shutdown import schedule_exit, signal_handler, terminate  # noqa: E402
from server.startup import create_server  # noqa: E402


# Set process and thread names
def configure_process_names():
    setproctitle.setproctitle("CFTI HTTP Bridge - Main Thread")
    threading.current_thread().name = "CFTI HTTP Bridge - Main Thread"


def main() -> None:
    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    configure_process_names()

    # Garbled bytes from the controller must not kill the reader
    input_stream = io.TextIOWrapper(sys.stdin.buffer, encoding="utf-8", errors="replace")

    store = StateStore()
    sender = CommandSender(sys.stdout)
    bridge = CftiBridge(store, sender)
    event_queue: queue.Queue = queue.Queue(maxsize=arguments.event_queue_size)

    interpreter = LineInterpreter(
        store,
        sender,
        input_stream,
        exit_callback=terminate,
        event_queue=event_queue,
    )

    _, _, socket_app = create_server(
        bridge,
        index_file=arguments.index_file,
        on_exit=partial(schedule_exit, arguments.shutdown_delay),
        event_queue=event_queue,
    )

    bridge.log("HTTP interface starting up")

    logger.info("Starting line interpreter...")
    interpreter.start()

    logger.info(f"Starting CFTI HTTP bridge with parameters {arguments}")
    try:
        uvicorn.run(
            socket_app,
            host=arguments.host,
            port=arguments.port,
            log_config=get_logger_config(arguments),
        )
    except KeyboardInterrupt:
        logger.info("KeyboardInterrupt in main")
        terminate(0)
    except Exception as e:  # pragma: no cover - startup errors
        logger.error(f"Error starting CFTI HTTP bridge: {str(e)}")
        logger.exception(e)
        terminate(1)


if __name__ == "__main__":
    main()
