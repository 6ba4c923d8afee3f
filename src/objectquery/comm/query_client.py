"""
Query Execution Façade.

This module provides the `QueryClient`, the entry point for running
[`Query`][objectquery.models.query.Query] objects. The client itself never
touches the network: it validates the query, encodes it and delegates to a
[`QueryExecutorProtocol`][objectquery.models.query.protocols.QueryExecutorProtocol]
implementation, then turns the returned states into domain objects through an
[`ObjectMaterializerProtocol`][objectquery.models.query.protocols.ObjectMaterializerProtocol].
"""

import asyncio
from contextlib import suppress
from typing import Any, Awaitable, Callable, List, Optional, TypeVar

from ..exceptions import (
    InvalidQueryOperationError,
    ObjectNotFoundError,
    QueryCancelledError,
)
from ..logging_config import get_logger
from ..models.materializer import DefaultMaterializer
from ..models.query import Query, QueryState
from ..models.query.protocols import (
    ObjectMaterializerProtocol,
    QueryExecutorProtocol,
)
from .cancellation import CancellationToken
from .config import QueryClientConfig

# Set the hierarchical logger
logger = get_logger(__name__)

T = TypeVar("T")


class QueryClient:
    """
    Runs queries through an external executor.

    Every operation:

    1. rejects queries on reserved collections (see
       [`QueryClientConfig`][objectquery.comm.QueryClientConfig]) with an
       [`InvalidQueryOperationError`][objectquery.exceptions.InvalidQueryOperationError];
    2. raises [`QueryCancelledError`][objectquery.exceptions.QueryCancelledError]
       if the cancellation token is already cancelled;
    3. encodes the query and awaits the executor, aborting the call if the
       token is cancelled meanwhile.

    In every failing case above the executor is never invoked (or is
    cancelled), and executor errors propagate unchanged. There are no retries
    at this layer.

    Example:
        ```python
        from objectquery import Query, QueryClient

        client = QueryClient(executor=my_executor)
        players = await client.find(
            Query("Player").where_greater_than("score", 1000).order_by_descending("score")
        )
        total = await client.count(Query("Player"))
        ```
    """

    def __init__(
        self,
        executor: QueryExecutorProtocol,
        materializer: Optional[ObjectMaterializerProtocol] = None,
        current_user: Any = None,
        config: Optional[QueryClientConfig] = None,
    ):
        """
        Args:
            executor: The transport-side collaborator running the queries.
            materializer: Converts executor states into objects. Defaults to a
                [`DefaultMaterializer`][objectquery.models.materializer.DefaultMaterializer].
            current_user: The actor context forwarded to the executor; either a
                value or a zero-argument callable evaluated on every call.
            config: Client settings. Defaults to `QueryClientConfig()`.
        """
        self._executor = executor
        self._materializer = materializer or DefaultMaterializer()
        self._current_user = current_user
        self._config = config or QueryClientConfig()

    def _resolve_user(self) -> Any:
        if callable(self._current_user):
            return self._current_user()
        return self._current_user

    def _ensure_queryable(self, query: Query):
        if query.class_name in self._config.reserved_class_names:
            logger.warning(f"Rejected query on reserved class '{query.class_name}'")
            raise InvalidQueryOperationError(
                f"Cannot directly query the '{query.class_name}' class."
            )

    async def _dispatch(
        self,
        operation: Callable[..., Awaitable[T]],
        query: Query,
        cancellation: Optional[CancellationToken],
    ) -> T:
        self._ensure_queryable(query)
        if cancellation is not None and cancellation.is_cancelled:
            logger.debug(f"Query on '{query.class_name}' cancelled before dispatch")
            cancellation.raise_if_cancelled()

        params = query.build_parameters()
        logger.debug(f"Dispatching query on '{query.class_name}': {params}")
        request = operation(
            params, query.class_name, self._resolve_user(), cancellation
        )
        if cancellation is None:
            return await request

        request_task = asyncio.ensure_future(request)
        cancel_task = asyncio.ensure_future(cancellation.wait())
        try:
            done, _ = await asyncio.wait(
                {request_task, cancel_task}, return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            cancel_task.cancel()
            if not request_task.done():
                request_task.cancel()

        if request_task in done:
            return request_task.result()

        # let the executor unwind before reporting
        with suppress(asyncio.CancelledError):
            await request_task
        logger.debug(f"Query on '{query.class_name}' cancelled while in flight")
        raise QueryCancelledError("The query was cancelled.")

    async def find(
        self, query: Query, cancellation: Optional[CancellationToken] = None
    ) -> List[Any]:
        """
        Retrieves every object matching `query`.

        Raises:
            InvalidQueryOperationError: If the query targets a reserved class.
            QueryCancelledError: If `cancellation` fires before or during the call.
        """
        states = await self._dispatch(self._executor.find, query, cancellation)
        return [
            self._materializer.from_state(state, query.class_name) for state in states
        ]

    async def find_first(
        self, query: Query, cancellation: Optional[CancellationToken] = None
    ) -> Optional[Any]:
        """
        Retrieves the first object matching `query`, or `None`.

        Raises:
            InvalidQueryOperationError: If the query targets a reserved class.
            QueryCancelledError: If `cancellation` fires before or during the call.
        """
        state = await self._dispatch(self._executor.first, query, cancellation)
        if state is None:
            return None
        return self._materializer.from_state(state, query.class_name)

    async def find_first_strict(
        self, query: Query, cancellation: Optional[CancellationToken] = None
    ) -> Any:
        """
        Retrieves the first object matching `query`.

        Raises:
            ObjectNotFoundError: If nothing matched.
            InvalidQueryOperationError: If the query targets a reserved class.
            QueryCancelledError: If `cancellation` fires before or during the call.
        """
        result = await self.find_first(query, cancellation)
        if result is None:
            raise ObjectNotFoundError("No results matched the query.")
        return result

    async def count(
        self, query: Query, cancellation: Optional[CancellationToken] = None
    ) -> int:
        """
        Counts the objects matching `query`.

        Raises:
            InvalidQueryOperationError: If the query targets a reserved class.
            QueryCancelledError: If `cancellation` fires before or during the call.
        """
        return await self._dispatch(self._executor.count, query, cancellation)

    async def get(
        self,
        query: Query,
        object_id: str,
        cancellation: Optional[CancellationToken] = None,
    ) -> Any:
        """
        Fetches the object of `query`'s class with the given identifier.

        Only the class name, includes and selected keys of `query` are used;
        its other constraints, ordering and pagination are ignored.

        Raises:
            ObjectNotFoundError: If no object has this identifier.
            InvalidQueryOperationError: If the query targets a reserved class.
            QueryCancelledError: If `cancellation` fires before or during the call.
        """
        single_item_query = Query._from_state(
            QueryState(
                class_name=query.class_name,
                where={self._config.object_id_key: object_id},
                includes=query.state.includes,
                selected_keys=query.state.selected_keys,
                limit=1,
            )
        )
        results = await self.find(single_item_query, cancellation)
        if not results:
            logger.debug(f"No '{query.class_name}' object with id '{object_id}'")
            raise ObjectNotFoundError("Object with the given objectId not found.")
        return results[0]
