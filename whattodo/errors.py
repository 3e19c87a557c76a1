"""Error taxonomy for the tracker engine.

Every error is local and recoverable: the operation is aborted and the
document is left as it was. Bad input is signalled with ValueError
subclasses so callers that only know ValueError still catch them.
"""

from __future__ import annotations


class TrackerError(ValueError):
    """Base class for engine errors."""


class ValidationError(TrackerError):
    """A required field is missing or malformed."""


class DuplicateNameError(TrackerError):
    """Another habit already uses this name (case-insensitive)."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Goal already exists: {name}")
        self.name = name


class NotFoundError(TrackerError):
    """No entity with the given id."""


class ConfirmationRequired(TrackerError):
    """Not a failure: the mutation waits for an explicit confirm.

    Raised before anything is applied. Re-invoke the same operation with
    ``confirm=True`` to proceed.
    """

    def __init__(self, *, task_count: int = 0, conflict_date: str | None = None) -> None:
        if conflict_date is not None:
            msg = f"Task is due during vacation ({conflict_date})"
        else:
            msg = f"{task_count} open task(s) fall inside the vacation"
        super().__init__(msg)
        self.task_count = task_count
        self.conflict_date = conflict_date

    def to_dict(self) -> dict[str, object]:
        d: dict[str, object] = {"confirmationRequired": True, "message": str(self)}
        if self.conflict_date is not None:
            d["conflictDate"] = self.conflict_date
        else:
            d["taskCount"] = self.task_count
        return d


class ImportParseError(TrackerError):
    """Import payload is not a JSON object."""


class PersistenceUnavailable(TrackerError):
    """The key-value store could not be read or written."""
