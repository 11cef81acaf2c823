"""Session log for Pub Compass: console, log file and listener output."""

import json
import threading
from datetime import datetime
from typing import Callable, Optional

Listener = Callable[[str, Optional[dict]], None]


def _timestamp() -> str:
    return datetime.now().isoformat(timespec="milliseconds")


class Logger:
    """Writes one line per event: `[time] message | {fields}`.

    Events arrive from the CLI, the sensor polling thread and request
    threads, so writes to the console and the file are serialized.
    """

    def __init__(self, log_path: Optional[str] = None, callback: Optional[Listener] = None,
                 echo: bool = True):
        self.log_path = log_path
        self.callback = callback
        self.echo = echo
        self._lock = threading.Lock()
        self._file = open(log_path, "a", encoding="utf-8") if log_path else None
        if self._file:
            rule = "-" * 60
            self._write(f"\n{rule}\nPub Compass session started {_timestamp()}\n{rule}\n")

    def __enter__(self) -> "Logger":
        return self

    def __exit__(self, *exc_info):
        self.close()

    @staticmethod
    def format_entry(message: str, data: Optional[dict] = None) -> str:
        entry = f"[{_timestamp()}] {message}"
        if data:
            entry += " | " + json.dumps(data, default=str, sort_keys=True)
        return entry

    def _write(self, text: str):
        self._file.write(text)
        self._file.flush()

    def log(self, message: str, data: Optional[dict] = None):
        entry = self.format_entry(message, data)
        with self._lock:
            if self.echo:
                print(entry)
            if self._file:
                self._write(entry + "\n")
        if self.callback:
            self.callback(message, data)

    def error(self, message: str, error: BaseException, data: Optional[dict] = None):
        """Log a failure along with the exception's type and text"""
        fields = dict(data or {})
        fields["error"] = str(error)
        fields["error_type"] = type(error).__name__
        self.log(message, fields)

    def close(self):
        with self._lock:
            if self._file:
                self._file.close()
                self._file = None
