"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class InvalidPeriodError(DomainException):
    """Target period does not name a real calendar month"""

    pass


class TransactionSourceError(DomainException):
    """Transaction storage failed or returned unusable rows"""

    pass
