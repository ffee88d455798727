"""Error kinds raised by the pricing engine and its store collaborators."""

from __future__ import annotations


class PricingError(Exception):
    """Base class for terminal pricing failures."""


class UnparseableDateTime(PricingError, ValueError):
    """A date + time combination is not a valid calendar moment."""

    def __init__(self, date_value: object, time_value: object):
        self.date_value = date_value
        self.time_value = time_value
        super().__init__(f"Cannot parse date/time: date={date_value!r} time={time_value!r}")


class InvalidTemporalRange(PricingError, ValueError):
    """Exit timestamp is not strictly after the entry timestamp."""

    def __init__(self, entry, exit):
        self.entry = entry
        self.exit = exit
        super().__init__(f"Exit ({exit.isoformat()}) must be after entry ({entry.isoformat()})")


class DataAccessFailure(PricingError):
    """A read from the rate configuration store failed."""

    def __init__(self, operation: str, message: str):
        self.operation = operation
        super().__init__(f"{operation}: {message}")


__all__ = ["PricingError", "UnparseableDateTime", "InvalidTemporalRange", "DataAccessFailure"]
