"""Attach a secondary error that is shown but never treated as a cause."""

from __future__ import annotations

from typing import List, Optional

from causechain.markers import causes


class WithSecondaryError(Exception):
    """Wraps an error and carries another one for context only."""

    def __init__(self, cause: BaseException, secondary_error: BaseException) -> None:
        super().__init__(cause, secondary_error)
        self.cause = cause
        self.secondary_error = secondary_error
        self.__cause__ = cause

    def __str__(self) -> str:
        return str(self.cause)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(cause={self.cause!r}, "
            f"secondary_error={self.secondary_error!r})"
        )

    def safe_details(self) -> List[str]:
        """Collect the safe details of every layer of the secondary error."""
        details: List[str] = []
        for err in causes(self.secondary_error):
            method = getattr(err, "safe_details", None)
            if callable(method):
                details.extend(method())
        return details


def with_secondary_error(
    err: Optional[BaseException], additional_err: Optional[BaseException]
) -> Optional[BaseException]:
    """Attach ``additional_err`` to ``err``; return ``err`` if either is None."""
    if err is None or additional_err is None:
        return err
    return WithSecondaryError(err, additional_err)


def combine_errors(
    err: Optional[BaseException], other_err: Optional[BaseException]
) -> Optional[BaseException]:
    """Return ``err`` with ``other_err`` attached, or ``other_err`` if ``err`` is None."""
    if err is None:
        return other_err
    return with_secondary_error(err, other_err)