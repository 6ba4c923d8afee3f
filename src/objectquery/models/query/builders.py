"""
This module provides the high-level "Fluent" API for composing queries against
a remote object store.

A [`Query`][objectquery.models.query.builders.Query] is immutable: every
refinement (`where_*`, `order_by`, `skip`, `include`, ...) returns a **new**
query and leaves the source untouched, so a query can be branched freely:

```python
from objectquery import Query

base = Query("Item").where_greater_than("price", 10)
cheap = base.where_less_than("price", 20)      # base is unchanged
by_name = base.order_by("name").limit(50)      # independent branch
either = Query.or_([cheap, base.where_equal_to("featured", True)])
```

Nothing is sent anywhere until the query is handed to a
[`QueryClient`][objectquery.comm.QueryClient].
"""

import re
from typing import Any, Dict, Iterable, List, Optional, Type, Union

from ...enum import QueryOperator
from ...exceptions import QueryConstructionError, QueryValidationError
from ...logging_config import get_logger
from ..geo import GeoDistance, GeoPoint
from ..remote_object import RemoteObject
from .encoder import build_parameters
from .expressions import (
    Conditions,
    _EqualityExpression,
    _QueryExpression,
    _RegexExpression,
    quote_pattern,
)
from .state import QueryState

# Set the hierarchical logger
logger = get_logger(__name__)

# ECMAScript-compatible dialect: ASCII character classes, plus the two
# modifiers the remote service understands.
_REGEX_DIALECT_FLAG = re.ASCII
_REGEX_SUPPORTED_FLAGS = re.ASCII | re.IGNORECASE | re.MULTILINE


def _regex_options(regex: "re.Pattern[str]", modifiers: Optional[str]) -> str:
    # None modifiers behave like ""
    options = modifiers or ""
    if regex.flags & re.IGNORECASE and "i" not in options:
        options += "i"
    if regex.flags & re.MULTILINE and "m" not in options:
        options += "m"
    return options


def _compile_pattern(pattern: Union[str, "re.Pattern[str]"]) -> "re.Pattern[str]":
    if isinstance(pattern, str):
        try:
            return re.compile(pattern, _REGEX_DIALECT_FLAG)
        except re.error as exc:
            raise QueryValidationError(
                f"Unsupported regex pattern '{pattern}': {exc}. Please write the "
                "pattern in the syntax shared by ECMAScript and Python."
            ) from exc

    if not pattern.flags & _REGEX_DIALECT_FLAG:
        raise QueryValidationError(
            "Only ECMAScript-compatible regexes are supported. "
            "Please use the re.ASCII flag when compiling your regex."
        )
    unsupported = pattern.flags & ~(_REGEX_SUPPORTED_FLAGS | re.UNICODE)
    if unsupported:
        raise QueryValidationError(
            f"Unsupported regex flags {re.RegexFlag(unsupported)!r}: "
            "only re.IGNORECASE and re.MULTILINE can be combined with re.ASCII."
        )
    return pattern


class Query:
    """
    An immutable, composable query against one collection.

    A query is created from a collection name (`Query("Item")`) or from a
    bound [`RemoteObject`][objectquery.models.RemoteObject] subclass
    (`Query.for_type(Item)`). All other methods return new queries.

    Note: Merging rules
        Constraints are merged key by key. A key can carry several operator
        constraints (`where_greater_than("a", 1).where_less_than("a", 5)`), but
        the same operator twice, or a literal equality together with anything
        else, raises [`QueryConflictError`][objectquery.exceptions.QueryConflictError].

    Note: Skip and limit
        `skip()` accumulates (`skip(3).skip(4)` skips 7), while `limit()`
        replaces the previous limit.
    """

    def __init__(self, class_name: Union[str, Type[RemoteObject]]):
        """
        Args:
            class_name: The collection to query, or a bound `RemoteObject` subclass.

        Raises:
            QueryConstructionError: If the class name is empty or `None`.
        """
        if isinstance(class_name, type) and issubclass(class_name, RemoteObject):
            class_name = class_name.__class_name__
        self._state = QueryState(class_name=class_name)

    @classmethod
    def for_type(cls, object_type: Type[RemoteObject]) -> "Query":
        """Creates a query on the collection bound to `object_type`."""
        if not object_type.__class_name__:
            raise QueryConstructionError(
                f"'{object_type.__name__}' is not bound to a class name."
            )
        return cls(object_type.__class_name__)

    @classmethod
    def _from_state(cls, state: QueryState) -> "Query":
        query = cls.__new__(cls)
        query._state = state
        return query

    def _derive(self, **delta) -> "Query":
        return Query._from_state(self._state.derive(**delta))

    def _with_expression(self, expr: _QueryExpression) -> "Query":
        return self._derive(where=expr.to_dict())

    def _where(self, key: str, op: QueryOperator, value: Any) -> "Query":
        return self._with_expression(_QueryExpression(key, op, value))

    @property
    def class_name(self) -> str:
        """The collection this query targets."""
        return self._state.class_name

    @property
    def state(self) -> QueryState:
        """The immutable state backing this query."""
        return self._state

    # --- Combinators ---

    @classmethod
    def or_(cls, queries: Iterable["Query"]) -> "Query":
        """
        Combines filter-only queries on the same collection with a logical OR.

        Example:
            ```python
            young = Query("Player").where_less_than("age", 18)
            old = Query("Player").where_greater_than("age", 65)
            either = Query.or_([young, old])
            # where: {"$or": [{"age": {"$lt": 18}}, {"age": {"$gt": 65}}]}
            ```

        Args:
            queries: The queries to combine. Queries without any constraint
                are skipped.

        Raises:
            QueryValidationError: If no query is given, the queries target
                different collections, or a query has non-filtering clauses
                (ordering, pagination, includes, ...).
        """
        class_name: Optional[str] = None
        or_value: List[Dict[str, Any]] = []
        for query in queries:
            if class_name is not None and query.class_name != class_name:
                raise QueryValidationError(
                    "All of the queries in an or query must be on the same class."
                )
            class_name = query.class_name

            params = query.build_parameters()
            if not params:
                logger.debug(f"Skipping unconstrained '{class_name}' query in or")
                continue
            if "where" not in params or len(params) > 1:
                raise QueryValidationError(
                    "Cannot combine non-filtering clauses in an or query: "
                    f"got {sorted(params)}."
                )
            or_value.append(params["where"])

        if class_name is None:
            raise QueryValidationError("An or query requires at least one query.")
        return cls(class_name)._with_expression(
            _EqualityExpression(QueryOperator.OR, or_value)
        )

    # --- Ordering ---

    def order_by(self, key: str) -> "Query":
        """Sorts ascending by `key`, replacing any previous ordering."""
        return self._derive(replacement_order_by=[key])

    def order_by_descending(self, key: str) -> "Query":
        """Sorts descending by `key`, replacing any previous ordering."""
        return self._derive(replacement_order_by=["-" + key])

    def then_by(self, key: str) -> "Query":
        """
        Adds an ascending secondary sort key.

        Raises:
            QueryConstructionError: If `order_by` was not called first.
        """
        return self._derive(then_by=[key])

    def then_by_descending(self, key: str) -> "Query":
        """
        Adds a descending secondary sort key.

        Raises:
            QueryConstructionError: If `order_by` was not called first.
        """
        return self._derive(then_by=["-" + key])

    # --- Projection and pagination ---

    def include(self, key: str) -> "Query":
        """Expands the related object at the dot-path `key` in the results."""
        return self._derive(includes=[key])

    def select(self, key: str) -> "Query":
        """Restricts the returned fields to the selected keys (plus system fields)."""
        return self._derive(selected_keys=[key])

    def skip(self, count: int) -> "Query":
        """Skips `count` more results; successive calls add up."""
        return self._derive(skip=count)

    def limit(self, count: int) -> "Query":
        """Returns at most `count` results, replacing any previous limit."""
        return self._derive(limit=count)

    def redirect_class_name(self, key: str) -> "Query":
        """Returns the objects of the relation at `key` instead of this collection."""
        return self._derive(redirect_class_name_for_key=key)

    # --- Comparison ---

    def where_equal_to(self, key: str, value: Any) -> "Query":
        return self._with_expression(_EqualityExpression(key, value))

    def where_not_equal_to(self, key: str, value: Any) -> "Query":
        return self._where(key, QueryOperator.NOT_EQUAL, value)

    def where_greater_than(self, key: str, value: Any) -> "Query":
        return self._where(key, QueryOperator.GREATER_THAN, value)

    def where_greater_than_or_equal_to(self, key: str, value: Any) -> "Query":
        return self._where(key, QueryOperator.GREATER_THAN_OR_EQUAL, value)

    def where_less_than(self, key: str, value: Any) -> "Query":
        return self._where(key, QueryOperator.LESS_THAN, value)

    def where_less_than_or_equal_to(self, key: str, value: Any) -> "Query":
        return self._where(key, QueryOperator.LESS_THAN_OR_EQUAL, value)

    # --- Membership ---

    def where_contained_in(self, key: str, values: Iterable[Any]) -> "Query":
        """Matches objects whose `key` equals one of `values`."""
        return self._where(key, QueryOperator.IN, list(values))

    def where_not_contained_in(self, key: str, values: Iterable[Any]) -> "Query":
        """Matches objects whose `key` equals none of `values`."""
        return self._where(key, QueryOperator.NOT_IN, list(values))

    def where_contains_all(self, key: str, values: Iterable[Any]) -> "Query":
        """Matches objects whose array `key` contains every one of `values`."""
        return self._where(key, QueryOperator.ALL, list(values))

    def where_exists(self, key: str) -> "Query":
        return self._where(key, QueryOperator.EXISTS, True)

    def where_does_not_exist(self, key: str) -> "Query":
        return self._where(key, QueryOperator.EXISTS, False)

    # --- Patterns ---

    def where_starts_with(self, key: str, prefix: str) -> "Query":
        """Matches string values starting with the literal `prefix`."""
        return self._where(key, QueryOperator.REGEX, "^" + quote_pattern(prefix))

    def where_ends_with(self, key: str, suffix: str) -> "Query":
        """Matches string values ending with the literal `suffix`."""
        return self._where(key, QueryOperator.REGEX, quote_pattern(suffix) + "$")

    def where_contains(self, key: str, substring: str) -> "Query":
        """Matches string values containing the literal `substring`."""
        return self._where(key, QueryOperator.REGEX, quote_pattern(substring))

    def where_matches(
        self,
        key: str,
        pattern: Union[str, "re.Pattern[str]"],
        modifiers: Optional[str] = None,
    ) -> "Query":
        """
        Matches string values against a regular expression.

        The remote service evaluates ECMAScript-compatible expressions. String
        patterns are compiled with `re.ASCII`; compiled patterns must carry
        `re.ASCII` themselves and may only add `re.IGNORECASE` (encoded as
        the `i` modifier) and `re.MULTILINE` (encoded as `m`).

        Args:
            key: The field to match.
            pattern: The expression, as a string or a compiled pattern.
            modifiers: Extra modifier characters for the server (e.g. `"i"`).

        Raises:
            QueryValidationError: If a compiled pattern lacks `re.ASCII` or
                uses unsupported flags.
        """
        regex = _compile_pattern(pattern)
        return self._with_expression(
            _RegexExpression(key, regex.pattern, _regex_options(regex, modifiers))
        )

    # --- Subqueries ---

    def where_matches_query(self, key: str, query: "Query") -> "Query":
        """Matches objects whose pointer at `key` is among the results of `query`."""
        params = query.build_parameters(True)
        return self._where(key, QueryOperator.IN_QUERY, params)

    def where_does_not_match_query(self, key: str, query: "Query") -> "Query":
        """Matches objects whose pointer at `key` is not among the `query` results."""
        params = query.build_parameters(True)
        return self._where(key, QueryOperator.NOT_IN_QUERY, params)

    def where_matches_key_in_query(
        self, key: str, key_in_query: str, query: "Query"
    ) -> "Query":
        """Matches objects whose `key` equals `key_in_query` of some result of `query`."""
        return self._with_expression(
            _QueryExpression(
                key,
                QueryOperator.SELECT,
                {"query": query.build_parameters(True), "key": key_in_query},
            )
        )

    def where_does_not_match_key_in_query(
        self, key: str, key_in_query: str, query: "Query"
    ) -> "Query":
        """Matches objects whose `key` equals `key_in_query` of no result of `query`."""
        return self._with_expression(
            _QueryExpression(
                key,
                QueryOperator.DONT_SELECT,
                {"query": query.build_parameters(True), "key": key_in_query},
            )
        )

    def where_related_to(self, parent: RemoteObject, key: str) -> "Query":
        """Matches the objects in the relation `key` of `parent`."""
        return self._with_expression(
            _EqualityExpression(
                QueryOperator.RELATED_TO, {"object": parent, "key": key}
            )
        )

    # --- Geospatial ---

    def where_near(self, key: str, point: GeoPoint) -> "Query":
        """Sorts by distance from `point` (nearest first)."""
        return self._where(key, QueryOperator.NEAR_SPHERE, point)

    def where_within_distance(
        self, key: str, point: GeoPoint, max_distance: GeoDistance
    ) -> "Query":
        """Matches points within `max_distance` of `point`, nearest first."""
        near = self.where_near(key, point)
        return near._where(key, QueryOperator.MAX_DISTANCE, max_distance.radians)

    def where_within_geo_box(
        self, key: str, southwest: GeoPoint, northeast: GeoPoint
    ) -> "Query":
        """Matches points inside the box delimited by `southwest` and `northeast`."""
        return self._where(
            key, QueryOperator.WITHIN, {QueryOperator.BOX: [southwest, northeast]}
        )

    # --- Serialization ---

    def build_parameters(self, include_class_name: bool = False) -> Dict[str, Any]:
        """
        Serializes the query into the remote service's parameter mapping.

        Example Output:
            `{"where": {"score": {"$gt": 10}}, "order": "-score", "limit": 5}`

        Args:
            include_class_name: If `True`, adds the `className` key.

        Returns:
            A new dictionary; later refinements never affect it.
        """
        return build_parameters(self._state, include_class_name)

    def get_constraint(self, key: str) -> Any:
        """
        Returns the constraint currently set for `key`, or `None`.

        Operator constraints are returned as a new `dict`; operands are
        read-only (tuples and mapping views), so the query cannot be changed
        through the result.
        """
        constraint = self._state.get_constraint(key)
        if isinstance(constraint, Conditions):
            return dict(constraint)
        return constraint

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Query):
            return NotImplemented
        return self._state == other._state

    def __hash__(self) -> int:
        return hash(self._state)

    def __repr__(self) -> str:
        return f"Query({self.class_name!r}, {self.build_parameters()!r})"
