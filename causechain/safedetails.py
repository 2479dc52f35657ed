"""Reportable, PII-free details attached to errors, and value redaction.

Values are redacted unless they are marked safe with ``safe()`` or provide a
``safe_message()`` method. Errors are redacted structurally: the parts of a
well-known error that cannot hold sensitive data stay readable.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, List, Optional

from causechain.markers import unwrap_once

REDACTED_MARKER = "×"

_VERB = re.compile(r"%(?:([-+# 0]*)(\d*)(?:\.(\d+))?([a-zA-Z%]))?")


@dataclass(frozen=True)
class SafeValue:
    """A value whose printed form may be reported as-is."""

    value: Any

    def safe_message(self) -> str:
        return str(self.value)

    def __str__(self) -> str:
        return str(self.value)


def safe(value: Any) -> SafeValue:
    """Mark ``value`` as safe to include unredacted in reports."""
    return SafeValue(value)


def _safe_payload(obj: Any) -> tuple[Any, bool]:
    if isinstance(obj, SafeValue):
        return obj.value, True
    method = getattr(obj, "safe_message", None)
    if callable(method):
        return method(), True
    return None, False


def _redact_os_error(err: OSError) -> str:
    text = f"[Errno {err.errno}] {err.strerror}"
    if err.filename is not None:
        text += f": {REDACTED_MARKER}"
        if err.filename2 is not None:
            text += f" -> {REDACTED_MARKER}"
    return text


def _redact_error(err: BaseException) -> str:
    try:
        msg = str(err)
    except Exception as exc:  # a broken __str__ must not break reporting
        return f"%!v(PANIC=__str__ method: {exc})"

    if isinstance(err, OSError) and err.errno is not None and err.strerror:
        return _redact_os_error(err)
    if not msg:
        return ""

    cause = unwrap_once(err)
    if cause is not None:
        inner = redact(cause)
        try:
            cause_msg = str(cause)
        except Exception:
            cause_msg = None
        if msg == cause_msg:
            return inner
        if cause_msg and msg.endswith(cause_msg):
            prefix = msg[: -len(cause_msg)]
            if prefix.endswith(": "):
                return f"{REDACTED_MARKER}: {inner}"
    return REDACTED_MARKER


def redact(obj: Any) -> str:
    """Return a printed form of ``obj`` with everything unsafe replaced."""
    if obj is None:
        return "None"
    value, is_safe = _safe_payload(obj)
    if is_safe:
        return str(value)
    if isinstance(obj, BaseException):
        return _redact_error(obj)
    return REDACTED_MARKER


def _format_safe(
    value: Any, verb: str, flags: str, width: str, precision: Optional[str]
) -> str:
    is_int = isinstance(value, int) and not isinstance(value, bool)
    if verb == "d" and is_int:
        text = str(value)
    elif verb in "xX" and is_int:
        text = format(value, verb)
    elif verb == "q":
        text = json.dumps(str(value), ensure_ascii=False)
    elif verb in "fFeEgG" and isinstance(value, (int, float)) and not isinstance(value, bool):
        digits = int(precision) if precision is not None else 6
        text = format(value, f".{digits}{verb.lower() if verb in 'Ff' else verb}")
    else:
        text = str(value)
        if verb == "s" and precision is not None:
            text = text[: int(precision)]
    if width:
        size = int(width)
        text = text.ljust(size) if "-" in flags else text.rjust(size)
    return text


def redacted_format(format: str, *args: Any) -> str:
    """Format ``args`` into ``format`` with printf-style verbs, redacting unsafe args.

    The format text itself is considered safe.
    """
    pending = list(args)
    pieces: List[str] = []
    pos = 0
    for match in _VERB.finditer(format):
        pieces.append(format[pos : match.start()])
        pos = match.end()
        flags, width, precision, verb = match.groups()
        if verb is None:
            pieces.append("%!(NOVERB)")
            continue
        if verb == "%":
            pieces.append("%")
            continue
        if not pending:
            pieces.append(f"%!{verb}(MISSING)")
            continue
        arg = pending.pop(0)
        value, is_safe = _safe_payload(arg)
        if is_safe:
            pieces.append(_format_safe(value, verb, flags or "", width or "", precision))
        else:
            pieces.append(redact(arg))
    pieces.append(format[pos:])
    if pending:
        extra = ", ".join(f"{type(a).__name__}={redact(a)}" for a in pending)
        pieces.append(f"%!(EXTRA {extra})")
    return "".join(pieces)


class WithSafeDetails(Exception):
    """Wraps an error and carries PII-free detail strings."""

    def __init__(self, cause: BaseException, details: List[str]) -> None:
        super().__init__(cause, details)
        self.cause = cause
        self.details = list(details)
        self.__cause__ = cause

    def __str__(self) -> str:
        return str(self.cause)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(cause={self.cause!r}, details={self.details!r})"

    def safe_details(self) -> List[str]:
        """Return the detail strings carried by this layer."""
        return list(self.details)


def with_safe_details(
    err: Optional[BaseException], format: str, *args: Any
) -> Optional[BaseException]:
    """Annotate ``err`` with a redacted rendering of ``format`` and ``args``.

    Returns ``err`` unchanged when there is neither format text nor arguments.
    """
    if err is None:
        return None
    if not format and not args:
        return err
    return WithSafeDetails(err, [redacted_format(format, *args)])