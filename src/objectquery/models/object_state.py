from dataclasses import dataclass, field
import datetime
from typing import Any, Dict, Optional

_RESERVED_FIELDS = ("objectId", "className", "createdAt", "updatedAt")


def _parse_datetime(value: Any) -> Optional[datetime.datetime]:
    if value is None:
        return None
    if isinstance(value, dict):
        # {"__type": "Date", "iso": "..."}
        value = value.get("iso")
    return datetime.datetime.fromisoformat(str(value).replace("Z", "+00:00"))


@dataclass
class ObjectState:
    """
    Raw state of a remote object, as returned by a query executor.

    This Data Transfer Object is what the executor hands back to the
    [`QueryClient`][objectquery.comm.QueryClient]; an object materializer
    turns it into a [`RemoteObject`][objectquery.models.RemoteObject].

    Attributes:
        class_name (str): The collection the object belongs to.
        object_id (Optional[str]): The server-assigned identifier.
        created_at (Optional[datetime.datetime]): Creation time (UTC).
        updated_at (Optional[datetime.datetime]): Last update time (UTC).
        server_data (Dict[str, Any]): All remaining fields.
    """

    class_name: str
    object_id: Optional[str] = None
    created_at: Optional[datetime.datetime] = None
    updated_at: Optional[datetime.datetime] = None
    server_data: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def _from_dict(cls, odict: Dict[str, Any], class_name: str) -> "ObjectState":
        return cls(
            class_name=odict.get("className", class_name),
            object_id=odict.get("objectId"),
            created_at=_parse_datetime(odict.get("createdAt")),
            updated_at=_parse_datetime(odict.get("updatedAt")),
            server_data={
                k: v for k, v in odict.items() if k not in _RESERVED_FIELDS
            },
        )
