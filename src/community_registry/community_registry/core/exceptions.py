from __future__ import annotations


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class MissingContactError(ValidationError):
    """Neither an email nor a phone number was supplied."""


class InvalidClassNumberError(ValidationError):
    """Class number is not numeric or does not fit the identifier format."""


class DuplicateContactError(DomainError):
    """An email or phone number is already bound to another account."""

    def __init__(self, field: str, message: str | None = None):
        self.field = field
        super().__init__(message or f"{field.capitalize()} is already registered")


class CapacityExceededError(DomainError):
    """The sequence space of a (location, program, class) group is used up."""

    def __init__(self, group: str, limit: int):
        self.group = group
        self.limit = limit
        super().__init__(f"Maximum sequence number ({limit}) reached for {group}")


class SequenceCollisionError(DomainError):
    """A concurrent writer took the same sequence; the transaction must be re-run."""


class TransientConflictError(DomainError):
    """Allocation contention outlasted the retry bound. The caller may resubmit."""


class InvalidEventWindowError(DomainError):
    """Event dates/times cannot be turned into a check-in window."""


class MemberNotFoundError(DomainError):
    """No active member carries the requested community identifier."""
