"""Exceptions raised by the engine for integrity faults and lost races.

Expected business outcomes (no assignments, saturated racks, infeasible plans)
are returned as structured results, not raised.
"""


class ArchiveError(Exception):
    """Base exception for planner errors."""

    def __init__(self, message: str, details: dict = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class UnknownRackError(ArchiveError):
    """An assignment references a rack missing from the catalog."""
    pass


class RackSaturatedError(ArchiveError):
    """The chosen rack reached its threshold between evaluation and placement."""
    pass


class DuplicateCustomerError(ArchiveError):
    """A customer with the same code already exists."""
    pass


class StaleAssignmentError(ArchiveError):
    """The link a decision used was retired or changed before placement."""
    pass
