"""
Console logger for scan progress.

Every line carries a UTC timestamp, a level glyph, and the component
name, followed by optional ``key=value`` pairs.  Output goes to stderr
in colour; when ``WRITE_TO_FILE=true`` each scan is also mirrored,
uncoloured, into ``.logs/<host>_<timestamp>.log``.

Timer state and the open log file are per-context
(``contextvars``), so concurrent scans each see only their own.
"""

from __future__ import annotations

import contextvars
import os
import pathlib
import re
import sys
import time
from datetime import UTC, datetime
from typing import TextIO

_RESET = "\033[0m"
_BOLD = "\033[1m"
_DIM = "\033[2m"
_RED = "\033[31m"
_GREEN = "\033[32m"
_YELLOW = "\033[33m"
_BLUE = "\033[34m"
_MAGENTA = "\033[35m"
_CYAN = "\033[36m"
_GRAY = "\033[90m"

# level -> (colour, glyph)
_LEVELS: dict[str, tuple[str, str]] = {
    "info": (_CYAN, "ℹ"),
    "success": (_GREEN, "✓"),
    "warn": (_YELLOW, "⚠"),
    "error": (_RED, "✗"),
    "debug": (_GRAY, "•"),
    "timing": (_MAGENTA, "⏱"),
}

_ANSI_ESCAPE = re.compile(r"\033\[[0-9;]*m")

_timers: contextvars.ContextVar[dict[str, tuple[float, str]] | None] = contextvars.ContextVar(
    "cookiecare_timers", default=None
)
_log_file: contextvars.ContextVar[TextIO | None] = contextvars.ContextVar("cookiecare_log_file", default=None)


def _file_logging_enabled() -> bool:
    return os.environ.get("WRITE_TO_FILE", "").lower() == "true"


def _context_timers() -> dict[str, tuple[float, str]]:
    timers = _timers.get()
    if timers is None:
        timers = {}
        _timers.set(timers)
    return timers


def _clock() -> str:
    """``HH:MM:SS.mmm`` in UTC."""
    now = datetime.now(UTC)
    return f"{now:%H:%M:%S}.{now.microsecond // 1000:03d}"


def _human_duration(ms: float) -> str:
    if ms >= 60_000:
        minutes, rest = divmod(ms, 60_000)
        return f"{int(minutes)}m {rest / 1000:.1f}s"
    if ms >= 1000:
        return f"{ms / 1000:.2f}s"
    return f"{int(ms)}ms"


def _render(value: object) -> str:
    """Colour a logged value by type; collections show only their size."""
    match value:
        case None:
            return f"{_DIM}None{_RESET}"
        case bool():
            return f"{_GREEN if value else _RED}{value}{_RESET}"
        case int() | float():
            return f"{_YELLOW}{value}{_RESET}"
        case str():
            text = value if len(value) <= 500 else value[:497] + "..."
            return f'{_GREEN}"{text}"{_RESET}'
        case list() | tuple() | set():
            return f"{_CYAN}[{len(value)} items]{_RESET}"
        case dict():
            return f"{_CYAN}{{{len(value)} keys}}{_RESET}"
        case _:
            return str(value)


# ============================================================================
# Per-scan log file
# ============================================================================


def start_log_file(hostname: str) -> None:
    """Open a log file for the scan of *hostname* (no-op unless enabled)."""
    if not _file_logging_enabled():
        return
    end_log_file()

    directory = pathlib.Path.cwd() / ".logs"
    directory.mkdir(parents=True, exist_ok=True)
    host = re.sub(r"[^A-Za-z0-9.-]", "_", hostname.removeprefix("www."))[:50]
    started = datetime.now(UTC)
    path = directory / f"{host}_{started:%Y-%m-%d_%H-%M-%S}.log"

    try:
        stream = path.open("a", encoding="utf-8")
    except OSError as exc:
        print(f"{_RED}✗ [Logger] Could not open {path}: {exc}{_RESET}", file=sys.stderr)
        return

    _log_file.set(stream)
    rule = "=" * 80
    stream.write(f"\n{rule}\n  Scan Log - {hostname}\n  Started: {started.isoformat()}\n{rule}\n")
    print(f"{_CYAN}ℹ [Logger] Writing logs to: {path}{_RESET}", file=sys.stderr)


def end_log_file() -> None:
    """Close the current context's log file, if one is open."""
    stream = _log_file.get()
    if stream is None:
        return
    _log_file.set(None)
    try:
        stream.close()
    except OSError:
        print(f"{_YELLOW}⚠ [Logger] Could not close log file{_RESET}", file=sys.stderr)


# ============================================================================
# Logger
# ============================================================================


class Logger:
    """Component-scoped logger with timers and section banners."""

    def __init__(self, context: str = "Server") -> None:
        self._context = context

    def _write(self, line: str) -> None:
        print(line, file=sys.stderr)
        stream = _log_file.get()
        if stream is not None:
            stream.write(_ANSI_ESCAPE.sub("", line) + "\n")
            stream.flush()

    def _line(self, level: str, message: str, data: dict[str, object] | None) -> None:
        colour, glyph = _LEVELS.get(level, _LEVELS["info"])
        parts = [
            f"{_GRAY}[{_clock()}]{_RESET}",
            f"{colour}{glyph}{_RESET}",
            f"{_BOLD}[{self._context}]{_RESET}",
            message,
        ]
        if data:
            parts.extend(f"{_DIM}{key}={_RESET}{_render(value)}" for key, value in data.items())
        self._write(" ".join(parts))

    def info(self, message: str, data: dict[str, object] | None = None) -> None:
        self._line("info", message, data)

    def success(self, message: str, data: dict[str, object] | None = None) -> None:
        self._line("success", message, data)

    def warn(self, message: str, data: dict[str, object] | None = None) -> None:
        self._line("warn", message, data)

    def error(self, message: str, data: dict[str, object] | None = None) -> None:
        self._line("error", message, data)

    def debug(self, message: str, data: dict[str, object] | None = None) -> None:
        self._line("debug", message, data)

    def start_timer(self, label: str) -> None:
        """Start the timer *label* for this component."""
        _context_timers()[f"{self._context}:{label}"] = (time.monotonic(), _clock())
        self._line("timing", f"Starting: {label}", None)

    def end_timer(self, label: str, message: str | None = None) -> float:
        """Stop the timer *label* and log its duration.

        Returns:
            Elapsed milliseconds, or ``0.0`` if the timer never started.
        """
        started = _context_timers().pop(f"{self._context}:{label}", None)
        if started is None:
            self.warn(f'Timer "{label}" was not started')
            return 0.0

        began, began_at = started
        elapsed_ms = (time.monotonic() - began) * 1000
        self._line(
            "timing",
            f"{message or f'Completed: {label}'} {_DIM}took{_RESET} "
            f"{_MAGENTA}{_human_duration(elapsed_ms)}{_RESET} {_DIM}(started {began_at}){_RESET}",
            None,
        )
        return elapsed_ms

    def section(self, title: str) -> None:
        """Banner marking the start of a major stage."""
        rule = f"{_BLUE}{'─' * 60}{_RESET}"
        self._write(f"\n{rule}\n{_BLUE}{_BOLD}  {title}{_RESET}\n{rule}\n")

    def subsection(self, title: str) -> None:
        self._write(f"\n{_CYAN}  ▸ {title}{_RESET}")


def create_logger(context: str) -> Logger:
    """Logger tagged with the component name *context*."""
    return Logger(context)
