"""Build error reports from causal chains and hand them to a capture function.

A report is an ``Event`` whose message describes every layer of the error,
innermost first. Each layer that recorded a stack trace becomes a
``ReportException``. When no layer did, one is made up from the leaf error
type and the first safe detail line. The details that could identify a user
are redacted.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

from causechain.markers import causes
from causechain.safedetails import REDACTED_MARKER, redact
from causechain.withstack import (
    ReportableStackTrace,
    get_one_line_source,
    get_reportable_stack_trace,
)

ISSUE_REFERRAL = """

Please check the public issue tracker to check whether this problem is
already tracked. If you cannot find it there, please report the error
with details by creating a new issue.

If you would rather not post publicly, please contact us directly
using the support form.

We appreciate your feedback.
"""


@dataclass
class ReportException:
    """One exception entry of a report: a title, a text and a stack trace."""

    type: str = ""
    value: str = ""
    module: str = ""
    stacktrace: Optional[ReportableStackTrace] = None


@dataclass
class Event:
    """A report ready to be captured."""

    message: str = ""
    exception: List[ReportException] = field(default_factory=list)
    extra: Dict[str, Any] = field(default_factory=dict)
    tags: Dict[str, str] = field(default_factory=dict)
    server_name: str = ""


def _full_type_name(err: BaseException) -> str:
    cls = type(err)
    return f"{cls.__module__}/{cls.__qualname__}"


def _last_path_component(name: str) -> str:
    return name.rsplit("/", 1)[-1]


def _base_file_name(path: str) -> str:
    return os.path.basename(_last_path_component(path))


def _safe_details(err: BaseException) -> List[str]:
    method = getattr(err, "safe_details", None)
    if callable(method):
        return list(method())
    return []


def build_report(
    err: Optional[BaseException],
) -> Tuple[Optional[Event], Optional[Dict[str, Any]]]:
    """Build the event and its extra data for ``err``; ``(None, None)`` for no error."""
    if err is None:
        return None, None

    layers = list(causes(err))
    stacks = [get_reportable_stack_trace(c) for c in layers]
    details = [_safe_details(c) for c in layers]
    module = ""

    first_detail_line = ""
    message: List[str] = []

    source = get_one_line_source(err)
    if source is not None:
        message.append(f"{source.file}:{source.line}: ")

    verbose = redact(err)
    if verbose != REDACTED_MARKER:
        first_detail_line = verbose.split("\n", 1)[0]
    message.append(verbose)
    message.append("\n-- report composition:\n")

    extra_num = 1
    type_lines: List[str] = []
    exceptions: List[ReportException] = []
    leaf_error_type = ""
    sep = ""

    for index in reversed(range(len(layers))):
        layer = layers[index]
        full_type_name = _full_type_name(layer)
        type_lines.append(f"{full_type_name} (*::)\n")
        short_type_name = _last_path_component(full_type_name)
        if index == len(layers) - 1:
            leaf_error_type = short_type_name

        message.append(sep)
        sep = "\n"

        stack = stacks[index]
        file = fn = ""
        lineno = 0
        if stack is not None and stack.frames:
            top = stack.frames[-1]
            file = _base_file_name(top.filename)
            fn = top.function
            lineno = top.lineno
            message.append(f"{file}:{lineno}: ")
        message.append(short_type_name)

        if stack is not None:
            exc_type = ""
            if file:
                exc_type += f"{file}:{lineno} "
            if fn:
                exc_type += f"({fn})"
            if not exc_type:
                exc_type = "<unknown error>"
            exc = ReportException(
                type=exc_type, value=short_type_name, module=module, stacktrace=stack
            )
            if not exceptions:
                message.append(" (top exception)")
            else:
                counter = f"({extra_num})"
                extra_num += 1
                exc.type = f"{counter} {exc.type}"
                message.append(f" {counter}")
            exceptions.append(exc)
        elif details[index]:
            detail = details[index][0].split("\n", 1)[0]
            if detail:
                message.append(f": {detail}")
                if not first_detail_line:
                    first_detail_line = detail

    if extra_num > 1:
        message.append("\n(check the extra data payloads)")

    extras: Dict[str, Any] = {"error types": "".join(type_lines)}
    exceptions.reverse()

    event = Event(message="".join(message), exception=exceptions)
    if not event.exception:
        event.exception.append(
            ReportException(type=leaf_error_type, value=first_detail_line, module=module)
        )
    else:
        first = event.exception[-1]
        wrapped = first.value != leaf_error_type
        value = leaf_error_type
        if first_detail_line:
            value += f": {first_detail_line}"
        if wrapped:
            value += f"\nvia {first.value}"
        first.value = value

    return event, extras


def report_error(
    err: BaseException, capture: Callable[[Event], Optional[str]]
) -> str:
    """Build a report for ``err`` and pass it to ``capture``.

    Returns the event identifier given back by ``capture``, or an empty string
    when it gave none.
    """
    if err is None:
        raise TypeError("report_error: cannot report a missing error")
    event, extras = build_report(err)
    event.extra.update(extras)
    event.server_name = "<redacted>"
    event.tags["report_type"] = "error"
    event_id = capture(event)
    return event_id if event_id is not None else ""


def print_stack_trace(stack: ReportableStackTrace) -> str:
    """Render a stack trace one frame per line, innermost call first."""
    return "".join(
        f"{f.filename}:{f.lineno}: in {f.function}()\n" for f in reversed(stack.frames)
    )