"""Stack traces attached to errors, and their conversion to report frames.

A stack is captured as a list of entries naming the function, file and line of
each call frame. Printed with ``format_stack`` it takes this form, one block per
frame, innermost first:

    <module>.<function>
    <TAB><file>:<line>

``parse_printed_stack`` reads that form back into report frames, oldest call
first.
"""

from __future__ import annotations

import inspect
import os
import sys
import sysconfig
from dataclasses import dataclass, field
from typing import Iterable, List, NamedTuple, Optional, Sequence, Tuple

from causechain.markers import causes

_MAX_FRAMES = 32


class StackEntry(NamedTuple):
    """One captured call frame: qualified function name, file and line."""

    function: str
    file: str
    line: int


@dataclass
class Frame:
    """A call frame in the form used by error reports."""

    filename: str
    function: str
    module: str = "unknown"
    lineno: int = 0
    abs_path: str = ""
    in_app: bool = True


@dataclass
class ReportableStackTrace:
    """A stack trace for reporting, with the oldest call frame first."""

    frames: List[Frame] = field(default_factory=list)


class SourceLocation(NamedTuple):
    """File base name, line and function of the topmost caller of a stack."""

    file: str
    line: int
    function: str


def format_stack(entries: Iterable[Tuple[str, str, int]]) -> str:
    """Print stack entries in the multi-line form read by ``parse_printed_stack``."""
    return "".join(f"\n{fn}\n\t{file}:{line}" for fn, file, line in entries)


class WithStack(Exception):
    """Wraps an error and records the call stack where it was wrapped."""

    def __init__(self, cause: BaseException, stack: Sequence[StackEntry]) -> None:
        self.stack = list(stack)
        super().__init__(cause)
        self.cause = cause
        self.__cause__ = cause

    def __str__(self) -> str:
        return str(self.cause)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(cause={self.cause!r}, frames={len(self.stack)})"

    def stack_trace(self) -> List[StackEntry]:
        """Return the recorded stack, innermost call first."""
        return list(self.stack)

    def safe_details(self) -> List[str]:
        """Return the printed stack trace as the only safe detail."""
        return [format_stack(self.stack)]


def _module_name(frame) -> str:
    module = inspect.getmodule(frame)
    if module is not None:
        return module.__name__
    return inspect.getmodulename(frame.f_code.co_filename) or ""


def _capture(start) -> List[StackEntry]:
    entries: List[StackEntry] = []
    frame = start
    while frame is not None and len(entries) < _MAX_FRAMES:
        code = frame.f_code
        module = _module_name(frame)
        name = f"{module}.{code.co_name}" if module else code.co_name
        entries.append(StackEntry(name, os.path.abspath(code.co_filename), frame.f_lineno))
        frame = frame.f_back
    return entries


def with_stack_depth(
    err: Optional[BaseException], depth: int
) -> Optional[WithStack]:
    """Wrap ``err`` with the call stack starting ``depth`` frames above the caller.

    A depth of zero starts at the caller of this function.
    """
    if err is None:
        return None
    if depth < -1:
        raise ValueError(f"with_stack_depth: invalid depth {depth}")
    try:
        start = sys._getframe(depth + 1)
    except ValueError:
        start = None
    return WithStack(err, _capture(start))


def with_stack(err: Optional[BaseException]) -> Optional[WithStack]:
    """Wrap ``err`` with the call stack at the point this function was called."""
    return with_stack_depth(err, 1)


def _trim_prefixes() -> List[str]:
    prefixes = []
    paths = sysconfig.get_paths()
    for key in ("stdlib", "platstdlib", "purelib", "platlib"):
        prefix = paths.get(key)
        if not prefix:
            continue
        if not prefix.endswith(os.sep):
            prefix += os.sep
        if prefix not in prefixes:
            prefixes.append(prefix)
    return prefixes


_TRIM_PREFIXES = _trim_prefixes()


def _trim_path(filename: str) -> str:
    for prefix in _TRIM_PREFIXES:
        if filename.startswith(prefix):
            return filename[len(prefix):]
    return filename


def function_name(fn_name: str) -> Tuple[str, str]:
    """Split a qualified function name into its module and its function part."""
    pack, name = "", fn_name
    idx = name.rfind(".")
    if idx != -1:
        pack, name = name[:idx], name[idx + 1:]
    return pack, name.replace("·", ".")


def _parse_entry(lines: List[str], i: int) -> Tuple[int, str, int, str]:
    fn_name = lines[i]
    file, line = "", 0
    if i < len(lines) - 1 and lines[i + 1].startswith("\t"):
        file_line = lines[i + 1].strip()
        head, sep, tail = file_line.rpartition(":")
        if not sep:
            file = file_line
        else:
            file = head
            try:
                line = int(tail)
            except ValueError:
                line = 0
        i += 1
    return i, file, line, fn_name


def parse_printed_stack(text: str) -> ReportableStackTrace:
    """Read a printed stack trace back into frames, oldest call first."""
    lines = text.strip().split("\n")
    frames: List[Frame] = []
    i = 0
    while i < len(lines):
        i, file, line, fn_name = _parse_entry(lines, i)
        module, function = "unknown", fn_name
        if fn_name != "unknown":
            module, function = function_name(fn_name)
        frames.append(
            Frame(
                filename=_trim_path(file),
                function=function,
                module=module,
                lineno=line,
                abs_path=file,
                in_app=True,
            )
        )
        i += 1
    frames.reverse()
    return ReportableStackTrace(frames)


def _entries_of(err: BaseException) -> Optional[List[Tuple[str, str, int]]]:
    provider = getattr(err, "stack_trace", None)
    if not callable(provider):
        return None
    return list(provider())


def get_reportable_stack_trace(
    err: Optional[BaseException],
) -> Optional[ReportableStackTrace]:
    """Return the stack trace recorded at this layer of ``err``, if any."""
    if err is None:
        return None
    entries = _entries_of(err)
    if not entries:
        return None
    return parse_printed_stack(format_stack(entries))


def _one_line_from_printed(text: str) -> SourceLocation:
    lines = text.strip().split("\n", 2)
    _, file, line, fn_name = _parse_entry(lines, 0)
    fn = function_name(fn_name)[1] if fn_name != "unknown" else ""
    return SourceLocation(os.path.basename(file), line, fn)


def get_one_line_source(err: Optional[BaseException]) -> Optional[SourceLocation]:
    """Return the topmost caller of the innermost stack trace in the chain."""
    for c in reversed(list(causes(err))):
        entries = _entries_of(c)
        if entries:
            return _one_line_from_printed(format_stack(entries[:1]))
    return None