"""
Constraint Value Model.

A `where` clause is a `ConstraintSet`: a mapping from a field key to either

* a **literal** value, meaning equality (`{"name": "Jo"}`), or
* a [`Conditions`][objectquery.models.query.expressions.Conditions] mapping
  from operator symbol to operand (`{"age": Conditions({"$gt": 18})}`).

`Conditions` is the tag that tells the two apart. A plain `dict` passed as a
literal (e.g. `where_equal_to("meta", {"a": 1})`) stays a literal and is never
merged operator-wise.
"""

from types import MappingProxyType
from typing import Any, Dict, Iterator, Mapping, Optional

from ...enum import QueryOperator

ConstraintSet = Dict[str, Any]


class Conditions(Mapping[str, Any]):
    """
    Read-only operator sub-mapping for a single field key.

    Operands are frozen on construction (see `freeze`), so instances never
    change and can be shared between query states. Merging two of them
    (see [`merge_constraints`][objectquery.models.query.merge.merge_constraints])
    allocates a new instance.
    """

    __slots__ = ("_items",)

    def __init__(self, items: Optional[Mapping[str, Any]] = None):
        self._items: Dict[str, Any] = {}
        for op, operand in (items or {}).items():
            _validate_operator_format(op)
            self._items[op] = freeze(operand)

    def __getitem__(self, op: str) -> Any:
        return self._items[op]

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"Conditions({self._items!r})"


def is_conditions(value: Any) -> bool:
    """True if `value` is an operator sub-mapping rather than a literal."""
    return isinstance(value, Conditions)


def freeze(value: Any) -> Any:
    """
    Returns a read-only equivalent of a constraint operand.

    Sequences and sets become tuples, mappings become read-only views over a
    private copy, recursively. `Conditions` are already read-only; any other
    value (primitives, remote objects, geo points, dates) is kept as is.
    """
    if isinstance(value, Conditions):
        return value
    if isinstance(value, Mapping):
        return MappingProxyType({k: freeze(v) for k, v in value.items()})
    if isinstance(value, (list, tuple, set, frozenset)):
        return tuple(freeze(v) for v in value)
    if isinstance(value, bytearray):
        return bytes(value)
    return value


def freeze_constraints(constraints: Mapping[str, Any]) -> Mapping[str, Any]:
    """Returns a read-only copy of a `ConstraintSet` whose operands are frozen."""
    return MappingProxyType({key: freeze(v) for key, v in constraints.items()})


def _validate_operator_format(op: str):
    """
    Private helper to validate an operator symbol.

    Raises a ValueError if the operator does not start with '$'.
    """
    if not isinstance(op, str) or not op.startswith("$"):
        raise ValueError(f"Invalid expression operator '{op}': must start with '$'.")


class _QueryExpression:
    """
    Base class for all atomic comparison operations.

    A `_QueryExpression` represents the smallest indivisible unit of a query.
    It is not instantiated directly by the user, but is the result of a
    `where_*` call on a [`Query`][objectquery.models.query.builders.Query].

    Attributes:
        key: The field key the predicate applies to.
        op: The operator string (e.g., `"$gt"`, `"$in"`, `"$regex"`).
        value: The operand.
    """

    def __init__(self, key: str, op: str, value: Any):
        _validate_operator_format(op)
        self.key = key
        self.op = op
        self.value = value

    def to_dict(self) -> ConstraintSet:
        """
        Converts the expression into a one-key constraint set.

        Example:
            `{"score": Conditions({"$gt": 10})}`
        """
        return {self.key: Conditions({self.op: self.value})}


class _EqualityExpression(_QueryExpression):
    """
    A literal equality predicate: `{key: value}`.

    The remote service treats a bare value as equality, so there is no
    operator in the encoded form.
    """

    def __init__(self, key: str, value: Any):
        self.key = key
        self.op = None
        self.value = freeze(value)

    def to_dict(self) -> ConstraintSet:
        return {self.key: self.value}


class _RegexExpression(_QueryExpression):
    """A `$regex` predicate with an optional `$options` modifier string."""

    def __init__(self, key: str, pattern: str, options: str = ""):
        super().__init__(key, QueryOperator.REGEX, pattern)
        self.options = options

    def to_dict(self) -> ConstraintSet:
        conditions = {QueryOperator.REGEX: self.value}
        if self.options:
            conditions[QueryOperator.REGEX_OPTIONS] = self.options
        return {self.key: Conditions(conditions)}


def quote_pattern(text: str) -> str:
    """
    Quotes `text` so the server's pattern engine matches it literally.

    The text is wrapped in `\\Q ... \\E`; an embedded `\\E` is split out
    as `\\E\\\\E\\Q` so it cannot terminate the quoted block early.
    """
    return "\\Q" + text.replace("\\E", "\\E\\\\E\\Q") + "\\E"
