"""Exception wrapping with equivalence marks, secondary errors, safe details,
telemetry keys, OS error predicates, stack traces and report building."""

__version__ = "0.1.0"

__all__ = [
    "markers",
    "secondary",
    "safedetails",
    "telemetrykeys",
    "oserror",
    "withstack",
    "report",
]