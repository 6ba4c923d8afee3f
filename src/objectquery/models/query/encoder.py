"""
Parameter Encoder.

Turns a [`QueryState`][objectquery.models.query.state.QueryState] into the
flat parameter mapping understood by the remote service:

| Key | Value | Present when |
| --- | --- | --- |
| `where` | pointer-encoded constraint tree | constraints set |
| `order` | comma-joined ordering keys | ordering set |
| `skip` | int | skip set |
| `limit` | int | limit set |
| `include` | comma-joined include paths | includes set |
| `keys` | comma-joined selected keys | selection set |
| `className` | collection name | requested (subquery embedding) |
| `redirectClassNameForKey` | relation key | redirect set |

The output is always a freshly allocated structure: nothing in it aliases
the state's containers.
"""

import base64
import datetime
from typing import Any, Dict, Mapping

from ...exceptions import QueryValidationError
from ..geo import GeoPoint
from .protocols import PointerProtocol
from .state import QueryState

_PRIMITIVES = (str, int, float, bool, type(None))


def _encode_date(value: datetime.datetime) -> Dict[str, Any]:
    if value.tzinfo is not None:
        value = value.astimezone(datetime.timezone.utc)
    iso = value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"
    return {"__type": "Date", "iso": iso}


class PointerEncoder:
    """
    Encodes constraint values for the wire.

    Remote objects become pointer tokens (`{"__type": "Pointer", ...}`) carrying
    only their collection and identifier; geo points, dates and bytes get their
    typed token; mappings and sequences are rebuilt recursively.
    """

    def encode(self, value: Any) -> Any:
        if isinstance(value, _PRIMITIVES):
            return value
        if isinstance(value, PointerProtocol):
            return self._encode_pointer(value)
        if isinstance(value, GeoPoint):
            return {
                "__type": "GeoPoint",
                "latitude": value.latitude,
                "longitude": value.longitude,
            }
        if isinstance(value, datetime.datetime):
            return _encode_date(value)
        if isinstance(value, (bytes, bytearray)):
            return {
                "__type": "Bytes",
                "base64": base64.b64encode(bytes(value)).decode("ascii"),
            }
        if isinstance(value, Mapping):
            return {str(k): self.encode(v) for k, v in value.items()}
        if isinstance(value, (list, tuple, set, frozenset)):
            return [self.encode(v) for v in value]
        raise TypeError(
            f"Unable to encode value of type '{type(value).__name__}' in a query."
        )

    def _encode_pointer(self, value: PointerProtocol) -> Dict[str, Any]:
        if value.object_id is None:
            raise QueryValidationError(
                f"Cannot create a pointer to an unsaved '{value.class_name}' object."
            )
        return {
            "__type": "Pointer",
            "className": value.class_name,
            "objectId": value.object_id,
        }


_ENCODER = PointerEncoder()


def build_parameters(
    state: QueryState, include_class_name: bool = False
) -> Dict[str, Any]:
    """
    Serializes `state` into the wire parameter mapping.

    Args:
        state: The query state to encode.
        include_class_name: If `True`, adds `className` (used when the query is
            embedded as a subquery operand).

    Returns:
        A new `dict`; encoding the same state twice yields equal results.
    """
    result: Dict[str, Any] = {}
    if state.where is not None:
        result["where"] = _ENCODER.encode(state.where)
    if state.order_by is not None:
        result["order"] = ",".join(state.order_by)
    if state.skip is not None:
        result["skip"] = state.skip
    if state.limit is not None:
        result["limit"] = state.limit
    if state.includes is not None:
        result["include"] = ",".join(state.includes)
    if state.selected_keys is not None:
        result["keys"] = ",".join(state.selected_keys)
    if include_class_name:
        result["className"] = state.class_name
    if state.redirect_class_name_for_key is not None:
        result["redirectClassNameForKey"] = state.redirect_class_name_for_key
    return result
