class DomainError(Exception):
    """Base class for every error raised by the domain layer."""

    kind = "domain_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFound(DomainError):
    kind = "not_found"


class Forbidden(DomainError):
    kind = "forbidden"


class Conflict(DomainError):
    kind = "conflict"


class InvalidOperation(DomainError):
    kind = "invalid_operation"


class ValidationError(DomainError):
    kind = "validation_error"
