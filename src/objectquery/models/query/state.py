"""
Query State.

`QueryState` is the immutable record behind every
[`Query`][objectquery.models.query.builders.Query]. It is created once from a
class name and every refinement goes through `derive()`, which returns a new
state: fields that change get freshly allocated containers, fields that do not
change are shared with the source (they are read-only, so the sharing is never
observable).
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Optional, Tuple

from ...exceptions import QueryConstructionError
from .expressions import freeze_constraints
from .merge import merge_constraints


def _dedup(items: Iterable[str]) -> Tuple[str, ...]:
    # keeps the first occurrence of each entry, in order
    return tuple(dict.fromkeys(items))


@dataclass(frozen=True)
class QueryState:
    """
    The accumulated description of a query prior to execution.

    Attributes:
        class_name: The collection queried. Set once, inherited by every derived state.
        where: Read-only constraint set, or `None` to match every object.
        order_by: Ordering keys; a `-` prefix means descending.
        includes: Dot-paths of related objects to expand in the results.
        selected_keys: Field projection allow-list.
        skip: Number of results to skip.
        limit: Maximum number of results.
        redirect_class_name_for_key: Relation key whose target class is returned instead.
    """

    class_name: str
    where: Optional[Mapping[str, Any]] = None
    order_by: Optional[Tuple[str, ...]] = None
    includes: Optional[Tuple[str, ...]] = None
    selected_keys: Optional[Tuple[str, ...]] = None
    skip: Optional[int] = None
    limit: Optional[int] = None
    redirect_class_name_for_key: Optional[str] = None

    def __post_init__(self):
        if not self.class_name or not isinstance(self.class_name, str):
            raise QueryConstructionError(
                "Must specify a class name when creating a query."
            )
        if self.where is not None and not isinstance(self.where, MappingProxyType):
            object.__setattr__(self, "where", freeze_constraints(self.where))

    def derive(
        self,
        where: Optional[Mapping[str, Any]] = None,
        replacement_order_by: Optional[Iterable[str]] = None,
        then_by: Optional[Iterable[str]] = None,
        skip: Optional[int] = None,
        limit: Optional[int] = None,
        includes: Optional[Iterable[str]] = None,
        selected_keys: Optional[Iterable[str]] = None,
        redirect_class_name_for_key: Optional[str] = None,
    ) -> "QueryState":
        """
        Returns a new state with the given delta applied.

        * `replacement_order_by` replaces the ordering, `then_by` appends to it.
        * `skip` accumulates onto the current skip; `limit` replaces.
        * `where` is merged with the current constraints.
        * `includes` and `selected_keys` are unioned with the current sets.

        Raises:
            QueryConstructionError: If `then_by` is given and no ordering exists.
            QueryConflictError: If `where` conflicts with the current constraints.
        """
        order_by = self.order_by
        if replacement_order_by is not None:
            order_by = tuple(replacement_order_by)

        if then_by is not None:
            if order_by is None:
                raise QueryConstructionError(
                    "You must call order_by before calling then_by."
                )
            order_by = order_by + tuple(then_by)

        if order_by is not None:
            order_by = _dedup(order_by)

        new_where = self.where
        if where is not None:
            new_where = freeze_constraints(merge_constraints(self.where, where))

        new_includes = self.includes
        if includes is not None:
            new_includes = _dedup((*(self.includes or ()), *includes))

        new_selected_keys = self.selected_keys
        if selected_keys is not None:
            new_selected_keys = _dedup((*(self.selected_keys or ()), *selected_keys))

        return QueryState(
            class_name=self.class_name,
            where=new_where,
            order_by=order_by,
            includes=new_includes,
            selected_keys=new_selected_keys,
            # 0 and None are kept apart: skip(0) still emits "skip": 0
            skip=self.skip if skip is None else (self.skip or 0) + skip,
            limit=self.limit if limit is None else limit,
            redirect_class_name_for_key=self.redirect_class_name_for_key
            if redirect_class_name_for_key is None
            else redirect_class_name_for_key,
        )

    def get_constraint(self, key: str) -> Any:
        """Returns the constraint stored for `key`, or `None`."""
        if self.where is None:
            return None
        return self.where.get(key)

    def __hash__(self) -> int:
        # the read-only where view is not hashable; equal states still hash equal
        return hash(
            (
                self.class_name,
                frozenset(self.where or ()),
                self.order_by,
                self.includes,
                self.selected_keys,
                self.skip,
                self.limit,
                self.redirect_class_name_for_key,
            )
        )
