"""Status event stream with console and run-log sinks."""

import logging
import os
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, List, Optional

from rich.console import Console
from rich.text import Text

INFO = "INFO"
SUCCESS = "SUCCESS"
WARNING = "WARNING"
ERROR = "ERROR"

SUCCESS_LEVEL = 25
logging.addLevelName(SUCCESS_LEVEL, SUCCESS)

_LOGGING_LEVELS = {
    INFO: logging.INFO,
    SUCCESS: SUCCESS_LEVEL,
    WARNING: logging.WARNING,
    ERROR: logging.ERROR,
}


@dataclass(frozen=True)
class StatusEvent:
    level: str
    message: str
    timestamp: datetime = field(default_factory=datetime.now)


class ConsoleSink:
    """Renders events as colored status lines."""

    STYLES = {
        INFO: "bold blue",
        SUCCESS: "bold green",
        WARNING: "bold yellow",
        ERROR: "bold red",
    }

    def __init__(self, console: Console):
        self.console = console

    def handle(self, event: StatusEvent):
        style = self.STYLES.get(event.level, "bold")
        self.console.print(Text.assemble((f"[{event.level}]", style), " ", event.message))

    def close(self):
        return None


class RunLogSink:
    """Appends plain ``<timestamp> - <LEVEL>: <message>`` lines to the run log.

    The file is opened on the first event that arrives while its parent
    directory exists, so nothing is created on the host before the
    directories stage has run. Earlier events are held and written first;
    they are dropped if the directory never appears.
    """

    LINE_FORMAT = "%(event_time)s - %(event_level)s: %(message)s"
    TIME_FORMAT = "%Y-%m-%d %H:%M:%S"

    def __init__(self, log_file: str, logger: Optional[logging.Logger] = None):
        self.log_file = log_file
        self.logger = logger or logging.getLogger("nidsdeploy")
        self._writer = logging.Logger("nidsdeploy.runlog", level=logging.DEBUG)
        self._handler: Optional[logging.Handler] = None
        self._disabled = False
        self._pending: List[StatusEvent] = []

    def handle(self, event: StatusEvent):
        if not self._ensure_handler():
            if not self._disabled:
                self._pending.append(event)
            return
        pending, self._pending = self._pending, []
        for held in pending:
            self._write(held)
        self._write(event)

    def _write(self, event: StatusEvent):
        self._writer.log(
            _LOGGING_LEVELS.get(event.level, logging.INFO),
            event.message,
            extra={
                "event_time": event.timestamp.strftime(self.TIME_FORMAT),
                "event_level": event.level,
            },
        )

    def _ensure_handler(self) -> bool:
        if self._handler is not None:
            return True
        if self._disabled:
            return False

        parent = os.path.dirname(os.path.abspath(self.log_file))
        if not os.path.isdir(parent):
            return False

        try:
            handler = logging.FileHandler(self.log_file, mode="a", encoding="utf-8")
        except OSError as exc:
            self._disabled = True
            self.logger.warning("Run log %s is not writable: %s", self.log_file, exc)
            return False

        handler.setFormatter(logging.Formatter(self.LINE_FORMAT))
        self._writer.addHandler(handler)
        self._handler = handler
        return True

    def close(self):
        self._pending = []
        if self._handler is None:
            return
        self._writer.removeHandler(self._handler)
        self._handler.close()
        self._handler = None


class StatusReporter:
    """Fans each status event out to every registered sink."""

    def __init__(self, sinks: Optional[Iterable] = None):
        self.sinks = list(sinks or [])
        self.events: List[StatusEvent] = []

    def emit(self, level: str, message: str) -> StatusEvent:
        event = StatusEvent(level=level, message=message)
        self.events.append(event)
        for sink in self.sinks:
            sink.handle(event)
        return event

    def info(self, message: str) -> StatusEvent:
        return self.emit(INFO, message)

    def success(self, message: str) -> StatusEvent:
        return self.emit(SUCCESS, message)

    def warning(self, message: str) -> StatusEvent:
        return self.emit(WARNING, message)

    def error(self, message: str) -> StatusEvent:
        return self.emit(ERROR, message)

    def close(self):
        for sink in self.sinks:
            sink.close()
