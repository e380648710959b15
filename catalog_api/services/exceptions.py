class ServiceError(Exception):
    """Base exception for service-level errors."""


class NotFoundError(ServiceError):
    pass


class ConflictError(ServiceError):
    pass


class ValidationError(ServiceError):
    """Caller-supplied data breaks a domain rule."""


class InternalError(ServiceError):
    """Storage failure or a stored value that cannot be read back."""
