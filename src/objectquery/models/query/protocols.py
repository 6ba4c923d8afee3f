from typing import Any, Dict, Optional, Protocol, Sequence, runtime_checkable

from ..object_state import ObjectState


@runtime_checkable
class PointerProtocol(Protocol):
    """
    Structural protocol for values encoded as pointers inside a `where` clause.

    A value implicitly satisfies this protocol if it exposes the collection it
    belongs to and its identifier. [`RemoteObject`][objectquery.models.RemoteObject]
    is the reference implementation.
    """

    class_name: str
    object_id: Optional[str]


class QueryExecutorProtocol(Protocol):
    """
    Transport-side collaborator that runs encoded queries against the remote store.

    The [`QueryClient`][objectquery.comm.QueryClient] never talks to the network
    itself: it validates the query, encodes it with
    [`build_parameters()`][objectquery.models.query.builders.Query.build_parameters]
    and hands the result to an executor. Retry policy, authentication and
    caching all belong to the executor.

    Every method receives the same arguments:

    * `params`: the wire parameter mapping (`where`, `order`, `skip`, ...).
    * `class_name`: the collection queried.
    * `user`: the current actor context, as resolved by the client (may be `None`).
    * `cancellation`: the caller's cancellation token (may be `None`), for
      executors that can abort an in-flight request cooperatively.
    """

    async def find(
        self,
        params: Dict[str, Any],
        class_name: str,
        user: Any,
        cancellation: Any,
    ) -> Sequence[ObjectState]:
        """Returns the states of every object matching the query."""
        ...

    async def first(
        self,
        params: Dict[str, Any],
        class_name: str,
        user: Any,
        cancellation: Any,
    ) -> Optional[ObjectState]:
        """Returns the state of the first matching object, or `None`."""
        ...

    async def count(
        self,
        params: Dict[str, Any],
        class_name: str,
        user: Any,
        cancellation: Any,
    ) -> int:
        """Returns the number of matching objects."""
        ...


class ObjectMaterializerProtocol(Protocol):
    """Converts an executor's raw `ObjectState` into a domain object."""

    def from_state(self, state: ObjectState, class_name: str) -> Any: ...
