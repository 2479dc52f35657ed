"""Attach PII-free telemetry keys to errors and collect them back."""

from __future__ import annotations

from typing import Iterable, List, Optional

from causechain.markers import causes


class WithTelemetry(Exception):
    """Wraps an error and carries telemetry keys."""

    def __init__(self, cause: BaseException, keys: Iterable[str]) -> None:
        self.keys = list(keys)
        super().__init__(cause, self.keys)
        self.cause = cause
        self.__cause__ = cause

    def __str__(self) -> str:
        return str(self.cause)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(cause={self.cause!r}, keys={self.keys!r})"

    def safe_details(self) -> List[str]:
        """Return the telemetry keys of this layer."""
        return list(self.keys)


def with_telemetry(err: Optional[BaseException], *keys: str) -> Optional[WithTelemetry]:
    """Annotate ``err`` with the given telemetry keys."""
    if err is None:
        return None
    return WithTelemetry(err, keys)


def get_telemetry_keys(err: Optional[BaseException]) -> List[str]:
    """Return the de-duplicated telemetry keys found along the causal chain."""
    found: dict[str, None] = {}
    for c in causes(err):
        if isinstance(c, WithTelemetry):
            found.update(dict.fromkeys(c.keys))
    return list(found)