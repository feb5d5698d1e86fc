"""A small three-channel logger writing to files or the console."""

from __future__ import annotations

import sys
from typing import IO, Optional

COLOR_RESET = "\x1b[0m"
COLOR_YELLOW = "\x1b[33m"
COLOR_RED = "\x1b[31m"


def _format(fmt: str, args: tuple) -> str:
    return fmt % args if args else fmt


def _emit(stream: IO[str], color: Optional[str], prefix: Optional[str], text: str) -> None:
    console = stream is sys.stdout or stream is sys.stderr
    parts = []
    if color and console:
        parts.append(color)
    if prefix:
        parts.append(f"{prefix}: ")
    parts.append(text)
    if color and console:
        parts.append(COLOR_RESET)
    stream.write("".join(parts))
    stream.flush()


def _open(path) -> Optional[IO[str]]:
    if path is None:
        return None
    try:
        return open(path, "a", encoding="utf-8")
    except OSError:
        return None


class Log:
    """Logger with separate debug, warning and error destinations.

    Each destination is a file opened for appending. A file that cannot be
    opened is ignored and its messages go to stdout (debug) or stderr
    (warnings and errors) instead.
    """

    def __init__(self, debug=None, warn=None, err=None) -> None:
        self._debug_file = _open(debug)
        self._warn_file = _open(warn)
        self._err_file = _open(err)
        self.valid = True

    def _debug_stream(self) -> IO[str]:
        return self._debug_file or sys.stdout

    def debug(self, fmt: str, *args) -> None:
        """Write a debug message with a ``[DEBUG]`` prefix."""
        _emit(self._debug_stream(), COLOR_RESET, "[DEBUG]", _format(fmt, args))

    def debug_inline(self, fmt: str, *args) -> None:
        """Write raw text to the debug destination, without prefix or colour."""
        _emit(self._debug_stream(), None, None, _format(fmt, args))

    def warn(self, fmt: str, *args) -> None:
        """Write a warning with a ``[WARN]`` prefix."""
        _emit(self._warn_file or sys.stderr, COLOR_RESET, "[WARN]", _format(fmt, args))

    def err(self, fmt: str, *args) -> None:
        """Write an error with an ``[ERROR]`` prefix."""
        _emit(self._err_file or sys.stderr, COLOR_RESET, "[ERROR]", _format(fmt, args))

    def close(self) -> None:
        """Close every open destination; further calls are no-ops."""
        if not self.valid:
            return
        for stream in (self._debug_file, self._warn_file, self._err_file):
            if stream is not None:
                stream.close()
        self._debug_file = self._warn_file = self._err_file = None
        self.valid = False

    def __enter__(self) -> "Log":
        return self

    def __exit__(self, *args) -> None:
        self.close()


def log_stdout(fmt: str, *args) -> None:
    """Write an ``[INFO]`` message to stdout."""
    _emit(sys.stdout, COLOR_RESET, "[INFO]", _format(fmt, args))


def log_stderr(fmt: str, *args) -> None:
    """Write an ``[ERROR]`` message to stderr."""
    _emit(sys.stderr, COLOR_RESET, "[ERROR]", _format(fmt, args))