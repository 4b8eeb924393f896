"""Logging module for shipline.

Provides colored output, stage headers, stage timers and secret masking.
Every line goes through :func:`_redact` so that tokens and passwords
registered with :func:`mask` never reach the build log.
"""

from __future__ import annotations

import sys
import time

# ANSI color codes -- only used when stdout is a terminal.
_COLORS = {
    "reset": "\033[0m",
    "bold": "\033[1m",
    "red": "\033[31m",
    "green": "\033[32m",
    "yellow": "\033[33m",
    "blue": "\033[34m",
    "cyan": "\033[36m",
}

_MASK = "****"

_use_color: bool | None = None
_secrets: set[str] = set()


def _color_enabled() -> bool:
    global _use_color
    if _use_color is None:
        _use_color = hasattr(sys.stdout, "isatty") and sys.stdout.isatty()
    return _use_color


def set_color(enabled: bool) -> None:
    """Override automatic color detection."""
    global _use_color
    _use_color = enabled


def _c(name: str) -> str:
    if _color_enabled():
        return _COLORS.get(name, "")
    return ""


# ── Secret masking ────────────────────────────────────────────────────

def mask(value: str | None) -> None:
    """Register *value* so it is replaced by ``****`` in all output.

    Empty values and very short strings are ignored; masking a one- or
    two-character string would shred unrelated log lines.
    """
    if value and len(value) >= 3:
        _secrets.add(value)


def clear_masks() -> None:
    _secrets.clear()


def _redact(message: str) -> str:
    # Longest first so a secret containing another secret is fully hidden.
    for secret in sorted(_secrets, key=len, reverse=True):
        message = message.replace(secret, _MASK)
    return message


# ── Public API ────────────────────────────────────────────────────────

def step(message: str) -> None:
    """Print a bold stage header.  e.g. ``=== Stage: release ===``"""
    sys.stdout.write(
        f"{_c('bold')}{_c('cyan')}=== {_redact(message)} ==={_c('reset')}\n"
    )
    sys.stdout.flush()


def info(message: str) -> None:
    sys.stdout.write(f"{_c('blue')}[info]{_c('reset')} {_redact(message)}\n")
    sys.stdout.flush()


def warn(message: str) -> None:
    sys.stderr.write(f"{_c('yellow')}[warn]{_c('reset')} {_redact(message)}\n")
    sys.stderr.flush()


def error(message: str) -> None:
    sys.stderr.write(f"{_c('red')}[error]{_c('reset')} {_redact(message)}\n")
    sys.stderr.flush()


def success(message: str) -> None:
    sys.stdout.write(f"{_c('green')}[ok]{_c('reset')} {_redact(message)}\n")
    sys.stdout.flush()


def output(text: str) -> None:
    """Echo captured tool output, indented, line by line."""
    for line in text.splitlines():
        sys.stdout.write(f"    {_redact(line)}\n")
    sys.stdout.flush()


# ── Timing helpers ────────────────────────────────────────────────────

_timers: dict[str, float] = {}


def timer_start(name: str) -> None:
    _timers[name] = time.monotonic()


def timer_stop(name: str) -> str:
    """Stop a named timer and return a human-readable elapsed string.

    Also prints the elapsed time.
    """
    start = _timers.pop(name, None)
    if start is None:
        warn(f"timer_stop called for unknown timer: {name}")
        return "??s"
    formatted = _format_elapsed(time.monotonic() - start)
    info(f"{name} finished in {formatted}")
    return formatted


def _format_elapsed(seconds: float) -> str:
    if seconds < 60:
        return f"{seconds:.1f}s"
    minutes = int(seconds) // 60
    secs = seconds - minutes * 60
    return f"{minutes}m{secs:.1f}s"
