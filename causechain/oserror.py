"""Predicates on operating-system errors that look through wrapping layers."""

from __future__ import annotations

import errno
from typing import Optional, Type

from causechain.markers import if_

_PERMISSION = {errno.EACCES, errno.EPERM}
_EXIST = {errno.EEXIST, errno.ENOTEMPTY}
_NOT_EXIST = {errno.ENOENT}
_TIMEOUT = {errno.EAGAIN, errno.EWOULDBLOCK, errno.ETIMEDOUT}


def _matches(
    err: Optional[BaseException], cls: Type[BaseException], codes: set
) -> bool:
    def pred(c: BaseException):
        hit = isinstance(c, cls) or (isinstance(c, OSError) and c.errno in codes)
        return None, hit

    return if_(err, pred)[1]


def is_permission(err: Optional[BaseException]) -> bool:
    """Tell whether the error reports that permission was denied."""
    return _matches(err, PermissionError, _PERMISSION)


def is_exist(err: Optional[BaseException]) -> bool:
    """Tell whether the error reports that a file or directory already exists."""
    return _matches(err, FileExistsError, _EXIST)


def is_not_exist(err: Optional[BaseException]) -> bool:
    """Tell whether the error reports that a file or directory does not exist."""
    return _matches(err, FileNotFoundError, _NOT_EXIST)


def is_timeout(err: Optional[BaseException]) -> bool:
    """Tell whether the error reports a timeout.

    Errors providing a ``timeout()`` method that returns true count too.
    """

    def pred(c: BaseException):
        method = getattr(c, "timeout", None)
        if callable(method) and method():
            return None, True
        if isinstance(c, TimeoutError):
            return None, True
        return None, isinstance(c, OSError) and c.errno in _TIMEOUT

    return if_(err, pred)[1]