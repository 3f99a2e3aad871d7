"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class NotFoundError(DomainException):
    """Referenced bill or spending entry does not exist"""

    pass


class ValidationError(DomainException):
    """Mutation argument is invalid (negative amount, empty name, bad date)"""

    pass
