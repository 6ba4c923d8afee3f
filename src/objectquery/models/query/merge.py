"""
Constraint Merge Engine.

Combines an existing `where` clause with the one-key constraint sets produced
by the `where_*` builders. Two predicates may share a key only when both are
operator sub-mappings with disjoint operators, e.g. `$nearSphere` followed by
`$maxDistance` on the same location field.
"""

from typing import Mapping, Optional

from ...exceptions import QueryConflictError
from ...logging_config import get_logger
from .expressions import Conditions, ConstraintSet, is_conditions

# Set the hierarchical logger
logger = get_logger(__name__)


def _merge_conditions(key: str, existing: Conditions, incoming: Conditions) -> Conditions:
    merged = dict(existing)
    for op, operand in incoming.items():
        if op in merged:
            logger.debug(f"Conflicting operator '{op}' for key '{key}'")
            raise QueryConflictError(
                f"More than one condition for the given key provided: '{key}' already has '{op}'."
            )
        merged[op] = operand
    return Conditions(merged)


def merge_constraints(
    existing: Optional[Mapping[str, object]], incoming: Mapping[str, object]
) -> ConstraintSet:
    """
    Merges `incoming` into `existing` and returns a new constraint set.

    Neither argument is modified and the result never aliases their
    containers (operator sub-mappings are immutable and may be shared).

    Args:
        existing: The constraints accumulated so far, or `None` for "match all".
        incoming: The constraints to add.

    Returns:
        A fresh `dict` holding both sets of constraints.

    Raises:
        QueryConflictError: If a key is constrained by a literal on either side,
            or the same operator appears on both sides for the same key.
    """
    if existing is None:
        return dict(incoming)

    merged = dict(existing)
    for key, value in incoming.items():
        if key not in merged:
            merged[key] = value
            continue

        old_value = merged[key]
        if not (is_conditions(old_value) and is_conditions(value)):
            logger.debug(f"Conflicting where clause for key '{key}'")
            raise QueryConflictError(
                f"More than one where clause for the given key provided: '{key}'."
            )
        merged[key] = _merge_conditions(key, old_value, value)
    return merged
