from .object_state import ObjectState
from .remote_object import RemoteObject


class DefaultMaterializer:
    """
    Builds [`RemoteObject`][objectquery.models.RemoteObject] instances from
    executor states.

    The object is created as the subclass bound to `class_name` when one is
    registered, as a plain `RemoteObject` otherwise.
    """

    def from_state(self, state: ObjectState, class_name: str) -> RemoteObject:
        object_type = RemoteObject.class_for_name(class_name)
        return object_type(
            class_name=class_name,
            object_id=state.object_id,
            created_at=state.created_at,
            updated_at=state.updated_at,
            data=dict(state.server_data),
        )
