"""Port exceptions for the tenancy bounded context.

These exceptions are raised by repository implementations and handled
by the application layer.
"""


class RepositoryUnavailableError(Exception):
    """Raised when the backing store cannot serve a lookup or insert.

    Wraps the storage driver's own exception so that callers can treat
    any outage uniformly without importing storage libraries.
    """

    pass
