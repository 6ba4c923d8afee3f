"""
SDK Exceptions.

All errors raised by the query builder and the execution façade. Builder-side
errors subclass the builtin exceptions the SDK historically raised
(`ValueError`, `LookupError`, `RuntimeError`), so existing `except ValueError`
handlers keep working.

| Exception | Raised by | Meaning |
| --- | --- | --- |
| `QueryConstructionError` | builders | empty class name, `then_by` before `order_by` |
| `QueryConflictError` | merge engine | same key defined twice |
| `QueryValidationError` | builders, encoder | unsupported regex, bad `or_`, unsaved pointer |
| `ObjectNotFoundError` | `QueryClient` | strict single-object fetch returned nothing |
| `InvalidQueryOperationError` | `QueryClient` | query on a reserved collection |
| `QueryCancelledError` | `QueryClient` | cancellation observed before or during dispatch |
"""


class QueryConstructionError(ValueError):
    """Raised when a query cannot be constructed from the given arguments."""

    pass


class QueryConflictError(ValueError):
    """Raised when two constraints target the same key (or key and operator)."""

    pass


class QueryValidationError(ValueError):
    """Raised when a builder argument is not supported by the remote service."""

    pass


class InvalidQueryOperationError(RuntimeError):
    """Raised when a query targets a collection that cannot be queried directly."""

    pass


class ObjectNotFoundError(LookupError):
    """
    Raised by the strict single-object operations when no object matched.

    Attributes:
        code (int): The remote service error code for a missing object.
    """

    OBJECT_NOT_FOUND = 101

    def __init__(self, message: str):
        super().__init__(message)
        self.code = ObjectNotFoundError.OBJECT_NOT_FOUND


class QueryCancelledError(Exception):
    """
    Raised when a query execution is cancelled through a
    [`CancellationToken`][objectquery.comm.CancellationToken].

    This is intentionally not a subclass of `asyncio.CancelledError`: a
    cancelled query is an ordinary outcome for the caller, not a task
    teardown signal.
    """

    pass
