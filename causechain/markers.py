"""Error equivalence along causal chains, with explicit equivalence marks.

Two errors are equivalent when one is the other, when an error's
``matches(reference)`` method says so, or when their marks agree. A mark is
an error's message plus the types of every layer of its causal chain.
``mark()`` overrides that with the mark of another error.
"""

from __future__ import annotations

import abc
from dataclasses import dataclass
from typing import Any, Callable, Iterator, Optional, Tuple

TypeMark = Tuple[str, str]


def unwrap_once(err: Optional[BaseException]) -> Optional[BaseException]:
    """Return the direct cause of ``err``, or None.

    An ``unwrap()`` method takes precedence; otherwise ``__cause__`` is used.
    """
    if err is None:
        return None
    unwrap = getattr(err, "unwrap", None)
    if callable(unwrap):
        return unwrap()
    return getattr(err, "__cause__", None)


def causes(err: Optional[BaseException]) -> Iterator[BaseException]:
    """Yield ``err`` and each of its successive causes, outermost first."""
    seen: set[int] = set()
    while err is not None and id(err) not in seen:
        seen.add(id(err))
        yield err
        err = unwrap_once(err)


@dataclass(frozen=True)
class ErrorMark:
    """The identity used to compare errors: a message and a chain of types."""

    msg: str
    types: Tuple[TypeMark, ...]

    @property
    def family_name(self) -> str:
        return self.types[0][0] if self.types else ""

    @property
    def extension(self) -> str:
        return self.types[0][1] if self.types else ""


class WithMark(Exception):
    """Wraps an error and gives it the equivalence mark of another error."""

    def __init__(self, cause: BaseException, mark: ErrorMark) -> None:
        super().__init__(cause, mark)
        self.cause = cause
        self.mark = mark
        self.__cause__ = cause

    def __str__(self) -> str:
        return str(self.cause)


def _type_mark(err: BaseException) -> TypeMark:
    cls = type(err)
    return (f"{cls.__module__}/{cls.__qualname__}", "")


def _safe_message(err: BaseException) -> str:
    try:
        return str(err)
    except Exception as exc:  # a broken __str__ must not break comparison
        return f"({id(err):#x}).__str__() raised: {exc!r}"


def _get_mark(err: BaseException) -> ErrorMark:
    if isinstance(err, WithMark):
        return err.mark
    return ErrorMark(
        msg=_safe_message(err),
        types=tuple(_type_mark(c) for c in causes(err)),
    )


def _equal_marks(m1: ErrorMark, m2: ErrorMark) -> bool:
    if m1.msg != m2.msg or len(m1.types) > len(m2.types):
        return False
    return all(a == b for a, b in zip(m1.types, m2.types))


def _delegates(err: BaseException, reference: Any) -> bool:
    method = getattr(err, "matches", None)
    return callable(method) and bool(method(reference))


def is_(err: Optional[BaseException], reference: Optional[BaseException]) -> bool:
    """Tell whether ``err`` or any of its causes is equivalent to ``reference``."""
    if reference is None:
        return err is None

    chain = list(causes(err))
    for c in chain:
        if c is reference or _delegates(c, reference):
            return True

    if err is None:
        return False

    ref_mark = _get_mark(reference)
    return any(_equal_marks(_get_mark(c), ref_mark) for c in chain)


def is_any(err: Optional[BaseException], *references: Optional[BaseException]) -> bool:
    """Like ``is_`` but true when any of the references matches."""
    chain = list(causes(err))
    for c in [*chain, None]:
        for ref in references:
            if c is ref:
                return True
            if c is not None and _delegates(c, ref):
                return True

    if err is None:
        return False

    ref_marks = [_get_mark(ref) for ref in references if ref is not None]
    return any(
        _equal_marks(_get_mark(c), ref_mark) for c in chain for ref_mark in ref_marks
    )


def if_(
    err: Optional[BaseException],
    pred: Callable[[BaseException], Tuple[Any, bool]],
) -> Tuple[Any, bool]:
    """Return the first ``(value, True)`` that ``pred`` yields along the chain."""
    for c in causes(err):
        value, ok = pred(c)
        if ok:
            return value, ok
    return None, False


def has_type(err: Optional[BaseException], reference_type: Any) -> bool:
    """Tell whether the chain holds an error of exactly the given class.

    ``reference_type`` may be a class or an instance of it; None never matches.
    """
    if reference_type is None:
        return False
    cls = reference_type if isinstance(reference_type, type) else type(reference_type)
    _, found = if_(err, lambda c: (None, type(c) is cls))
    return found


def has_interface(err: Optional[BaseException], reference_interface: Any) -> bool:
    """Tell whether the chain holds an error implementing an interface.

    The interface must be an abstract base class or a runtime-checkable
    protocol; anything else raises TypeError.
    """
    if not isinstance(reference_interface, abc.ABCMeta):
        raise TypeError(
            "has_interface: reference_interface must be an abstract interface "
            f"class, found {reference_interface!r}"
        )
    _, found = if_(err, lambda c: (None, isinstance(c, reference_interface)))
    return found


def mark(
    err: Optional[BaseException], reference: BaseException
) -> Optional[WithMark]:
    """Wrap ``err`` so that it carries the equivalence mark of ``reference``."""
    if err is None:
        return None
    if reference is None:
        raise TypeError("mark: reference must be an error, not None")
    return WithMark(err, _get_mark(reference))