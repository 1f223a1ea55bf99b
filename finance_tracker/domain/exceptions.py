"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class InvalidRecurringDefinitionError(DomainException):
    """Recurring definition has malformed dates or values"""

    def __init__(self, recurring_id: str, reason: str):
        super().__init__(f"Recurring definition {recurring_id!r} is invalid: {reason}")
        self.recurring_id = recurring_id
        self.reason = reason


class NotFoundError(DomainException):
    """Referenced record does not exist in the ledger"""

    pass


class PersistenceError(DomainException):
    """Ledger store could not read or write its data"""

    pass


class LedgerLoadError(DomainException):
    """Session start-up failed; safe to retry from the last committed state"""

    pass


class LedgerAPIError(DomainException):
    """Remote ledger API returned an error or is unavailable"""

    pass
