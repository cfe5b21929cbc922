"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so the CLI layer can catch them uniformly and display user-friendly messages.
"""


class DomainException(Exception):
    """Base class for all domain errors."""


class ValidationError(DomainException):
    """A business rule or invariant was violated."""


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""


class InsufficientStockError(ValidationError):
    """A reservation asked for more units than are left."""


class MinimumQuantityReached(ValidationError):
    """A cart line cannot go below one unit."""


class MaximumQuantityReached(ValidationError):
    """A cart line is already at the per-line ceiling."""


class InvalidImageRecord(ValidationError):
    """An image record points at neither a local file nor a remote copy."""


class ConcurrentUpdateConflict(DomainException):
    """A versioned save lost the race against another writer.

    The only error that is retried automatically, because a retry re-reads
    fresh state.
    """


class RemoteStoreError(DomainException):
    """The remote object store rejected or failed a call."""
