import datetime

import pydantic
import pytest

from objectquery import ObjectState, RemoteObject
from objectquery.models.materializer import DefaultMaterializer
from testing.unit.my_objects import Player, Team


def test_subclass_registered():
    assert Player.__class_name__ == "Player"
    assert RemoteObject.class_for_name("Player") is Player
    assert RemoteObject._is_registered("Team")
    # Unknown collections fall back to the base class
    assert RemoteObject.class_for_name("Unknown") is RemoteObject
    assert not RemoteObject._is_registered("Unknown")


def test_subclass_default_binding_is_class_name():
    class Scoreboard(RemoteObject):
        pass

    assert Scoreboard.__class_name__ == "Scoreboard"
    assert RemoteObject.class_for_name("Scoreboard") is Scoreboard


def test_duplicate_binding_rejected():
    with pytest.raises(ValueError, match="already bound"):

        class OtherPlayer(RemoteObject):
            __class_name__ = "Player"

    assert RemoteObject.class_for_name("Player") is Player


def test_class_name_filled_from_binding():
    assert Team().class_name == "Team"
    assert Team(class_name="Team", object_id="t1").object_id == "t1"


def test_class_name_mismatch():
    with pytest.raises(pydantic.ValidationError, match="bound to 'Team'"):
        Team(class_name="Player")


def test_base_object_requires_class_name():
    with pytest.raises(pydantic.ValidationError, match="requires a class_name"):
        RemoteObject()


def test_data_access():
    player = Player(object_id="p1", data={"name": "Jo"})

    assert player["name"] == "Jo"
    assert player.get("score") is None
    assert player.get("score", 0) == 0
    with pytest.raises(KeyError):
        player["score"]


def test_object_state_from_dict():
    state = ObjectState._from_dict(
        {
            "objectId": "p1",
            "createdAt": "2024-01-02T03:04:05.678Z",
            "updatedAt": {"__type": "Date", "iso": "2024-01-03T00:00:00.000Z"},
            "name": "Jo",
            "score": 3,
        },
        class_name="Player",
    )

    assert state.class_name == "Player"
    assert state.object_id == "p1"
    assert state.created_at == datetime.datetime(
        2024, 1, 2, 3, 4, 5, 678000, tzinfo=datetime.timezone.utc
    )
    assert state.updated_at == datetime.datetime(
        2024, 1, 3, tzinfo=datetime.timezone.utc
    )
    assert state.server_data == {"name": "Jo", "score": 3}


def test_object_state_missing_dates():
    state = ObjectState._from_dict({"objectId": "n1"}, class_name="Note")

    assert state.created_at is None
    assert state.updated_at is None
    assert state.server_data == {}


def test_default_materializer():
    state = ObjectState(class_name="Player", object_id="p1", server_data={"a": 1})
    materializer = DefaultMaterializer()

    player = materializer.from_state(state, "Player")
    assert isinstance(player, Player)
    assert player.data == {"a": 1}
    # the object does not alias the executor's state
    assert player.data is not state.server_data

    note = materializer.from_state(state, "Note")
    assert type(note) is RemoteObject
    assert note.class_name == "Note"
