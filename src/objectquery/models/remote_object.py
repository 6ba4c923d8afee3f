"""
Remote Object Model.

`RemoteObject` is the client-side view of an object stored in a remote
collection. Subclasses bind themselves to a collection by declaring
`__class_name__`; the binding is registered at class-definition time so that
query results can be materialized into the right subclass and queries can be
created directly from the type (`Query.for_type(Item)`).

Example:
    ```python
    from objectquery import RemoteObject, Query

    class Item(RemoteObject):
        __class_name__ = "Item"

    query = Query.for_type(Item).where_greater_than("price", 10)
    ```
"""

import datetime
from typing import Any, ClassVar, Dict, Optional, Type

from pydantic import BaseModel, model_validator
from typing_extensions import Self


class RemoteObject(BaseModel):
    """
    Base class for objects fetched from (or referenced in) the remote store.

    When a `RemoteObject` with an `object_id` is used as a constraint value,
    it is encoded as a lightweight pointer (`className` + `objectId`), never
    as its full data.

    Attributes:
        class_name: The collection the object belongs to.
        object_id: Server-assigned identifier; `None` for unsaved objects.
        created_at: Creation time, when known.
        updated_at: Last update time, when known.
        data: The object's user fields.
    """

    __class_name__: ClassVar[Optional[str]] = None
    __registry__: ClassVar[Dict[str, Type["RemoteObject"]]] = {}

    class_name: str = ""
    object_id: Optional[str] = None
    created_at: Optional[datetime.datetime] = None
    updated_at: Optional[datetime.datetime] = None
    data: Dict[str, Any] = {}

    @classmethod
    def __pydantic_init_subclass__(cls, **kwargs: Any) -> None:
        super().__pydantic_init_subclass__(**kwargs)
        tag = cls.__dict__.get("__class_name__") or cls.__name__
        registered = RemoteObject.__registry__.get(tag)
        if registered is not None and registered is not cls:
            raise ValueError(
                f"Class name '{tag}' is already bound to '{registered.__name__}'."
            )
        cls.__class_name__ = tag
        RemoteObject.__registry__[tag] = cls

    @model_validator(mode="after")
    def validate_class_name(self) -> Self:
        """Fills `class_name` from the subclass binding and checks it matches."""
        bound = type(self).__class_name__
        if not self.class_name:
            if not bound:
                raise ValueError("A RemoteObject requires a class_name.")
            self.class_name = bound
        elif bound and self.class_name != bound:
            raise ValueError(
                f"Class '{type(self).__name__}' is bound to '{bound}', got '{self.class_name}'."
            )
        return self

    @classmethod
    def class_for_name(cls, class_name: str) -> Type["RemoteObject"]:
        """Returns the subclass bound to `class_name`, or `RemoteObject` itself."""
        if not cls._is_registered(class_name):
            return RemoteObject
        return RemoteObject.__registry__[class_name]

    @classmethod
    def _is_registered(cls, class_name: str) -> bool:
        return class_name in RemoteObject.__registry__

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)

    def __getitem__(self, key: str) -> Any:
        return self.data[key]
