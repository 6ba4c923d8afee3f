from .geo import GeoDistance as GeoDistance, GeoPoint as GeoPoint
from .object_state import ObjectState as ObjectState
from .remote_object import RemoteObject as RemoteObject
