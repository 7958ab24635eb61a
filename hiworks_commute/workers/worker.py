import io
import signal
import sys
from typing import BinaryIO

from hiworks_commute.core.config import Settings, get_settings
from hiworks_commute.core.logging import get_logger, setup_logging
from hiworks_commute.services.attendance import AttendanceService
from hiworks_commute.services.browser_session import BrowserSession
from hiworks_commute.services.credential_store import CredentialStore
from hiworks_commute.workers.dispatcher import CommandDispatcher


logger = get_logger(__name__)


def build_dispatcher(settings: Settings, output=None, driver_factory=None) -> CommandDispatcher:
    settings.config_dir.mkdir(parents=True, exist_ok=True)
    store = CredentialStore(settings.config_file)
    session = BrowserSession(settings, driver_factory=driver_factory)
    attendance = AttendanceService(session, store, settings)
    return CommandDispatcher(store, attendance, output if output is not None else sys.stdout)


def utf8_input(binary: BinaryIO) -> io.TextIOWrapper:
    # Undecodable bytes become U+FFFD, so the line fails JSON parsing like any other bad line.
    return io.TextIOWrapper(binary, encoding="utf-8", errors="replace")


def _exit_on_signal(signum, frame) -> None:
    logger.info("Termination signal received", extra={"extra": {"signal": signal.Signals(signum).name}})
    raise SystemExit(0)


def run(settings: Settings, input_stream=None, output=None, driver_factory=None) -> None:
    dispatcher = build_dispatcher(settings, output=output, driver_factory=driver_factory)
    try:
        dispatcher.announce_ready()
        dispatcher.serve(input_stream if input_stream is not None else sys.stdin)
    finally:
        dispatcher.attendance.close()


def main() -> None:
    settings = get_settings()
    setup_logging(settings.log_level.upper())
    sys.stdout.reconfigure(encoding="utf-8")

    signal.signal(signal.SIGINT, _exit_on_signal)
    signal.signal(signal.SIGTERM, _exit_on_signal)

    logger.info("Worker starting", extra={"extra": {"config_dir": str(settings.config_dir)}})
    run(settings, input_stream=utf8_input(sys.stdin.buffer))


if __name__ == "__main__":
    main()
