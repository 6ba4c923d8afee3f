import asyncio
from typing import Any, Dict, List, Optional

import pytest

from objectquery import (
    CancellationToken,
    InvalidQueryOperationError,
    ObjectNotFoundError,
    ObjectState,
    Query,
    QueryCancelledError,
    QueryClient,
    QueryClientConfig,
    RemoteObject,
)
from testing.unit.my_objects import Player


class FakeExecutor:
    """Records every call and answers with canned states."""

    def __init__(
        self,
        states: Optional[List[ObjectState]] = None,
        count: int = 0,
        delay: float = 0.0,
        error: Optional[Exception] = None,
    ):
        self.states = states or []
        self.count_result = count
        self.delay = delay
        self.error = error
        self.calls: List[Dict[str, Any]] = []
        self.cancelled = False

    async def _run(self, op: str, params, class_name, user, cancellation):
        self.calls.append(
            {"op": op, "params": params, "class_name": class_name, "user": user}
        )
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
        except asyncio.CancelledError:
            self.cancelled = True
            raise
        if self.error is not None:
            raise self.error

    async def find(self, params, class_name, user, cancellation):
        await self._run("find", params, class_name, user, cancellation)
        return list(self.states)

    async def first(self, params, class_name, user, cancellation):
        await self._run("first", params, class_name, user, cancellation)
        return self.states[0] if self.states else None

    async def count(self, params, class_name, user, cancellation):
        await self._run("count", params, class_name, user, cancellation)
        return self.count_result


def _player_state(object_id: str = "p1", **data) -> ObjectState:
    return ObjectState(class_name="Player", object_id=object_id, server_data=data)


def test_find_materializes_bound_subclass():
    executor = FakeExecutor(states=[_player_state(name="Jo"), _player_state("p2")])
    client = QueryClient(executor)

    query = Query("Player").where_greater_than("score", 10).limit(5)
    players = asyncio.run(client.find(query))

    assert [p.object_id for p in players] == ["p1", "p2"]
    assert isinstance(players[0], Player)
    assert players[0]["name"] == "Jo"
    assert executor.calls == [
        {
            "op": "find",
            "params": {"where": {"score": {"$gt": 10}}, "limit": 5},
            "class_name": "Player",
            "user": None,
        }
    ]


def test_unbound_class_materializes_plain_object():
    executor = FakeExecutor(states=[ObjectState(class_name="Note", object_id="n1")])
    notes = asyncio.run(QueryClient(executor).find(Query("Note")))

    assert type(notes[0]) is RemoteObject
    assert notes[0].class_name == "Note"


def test_find_first():
    client = QueryClient(FakeExecutor(states=[_player_state()]))
    assert asyncio.run(client.find_first(Query("Player"))).object_id == "p1"

    empty = QueryClient(FakeExecutor())
    assert asyncio.run(empty.find_first(Query("Player"))) is None


def test_find_first_strict():
    client = QueryClient(FakeExecutor())

    with pytest.raises(ObjectNotFoundError) as exc_info:
        asyncio.run(client.find_first_strict(Query("Player")))
    assert exc_info.value.code == ObjectNotFoundError.OBJECT_NOT_FOUND == 101


def test_count():
    executor = FakeExecutor(count=42)
    assert asyncio.run(QueryClient(executor).count(Query("Player"))) == 42
    assert executor.calls[0]["op"] == "count"


def test_get_uses_only_projection_of_query():
    executor = FakeExecutor(states=[_player_state("abc")])
    client = QueryClient(executor)
    query = (
        Query("Player")
        .where_equal_to("name", "Jo")
        .order_by("name")
        .skip(4)
        .include("team")
        .select("name")
    )

    player = asyncio.run(client.get(query, "abc"))

    assert player.object_id == "abc"
    assert executor.calls[0]["params"] == {
        "where": {"objectId": "abc"},
        "limit": 1,
        "include": "team",
        "keys": "name",
    }


def test_get_missing_object():
    client = QueryClient(FakeExecutor())

    with pytest.raises(ObjectNotFoundError, match="objectId") as exc_info:
        asyncio.run(client.get(Query("Player"), "nope"))
    assert exc_info.value.code == 101


@pytest.mark.parametrize("op", ["find", "find_first", "find_first_strict", "count"])
def test_reserved_class_is_rejected(op: str):
    executor = FakeExecutor()
    client = QueryClient(executor)

    with pytest.raises(InvalidQueryOperationError, match="_Installation"):
        asyncio.run(getattr(client, op)(Query("_Installation")))
    assert executor.calls == []


def test_reserved_class_is_rejected_by_get():
    executor = FakeExecutor()

    with pytest.raises(InvalidQueryOperationError):
        asyncio.run(QueryClient(executor).get(Query("_Installation"), "x"))
    assert executor.calls == []


def test_custom_reserved_classes():
    executor = FakeExecutor()
    client = QueryClient(
        executor, config=QueryClientConfig(reserved_class_names=("_Session",))
    )

    with pytest.raises(InvalidQueryOperationError):
        asyncio.run(client.find(Query("_Session")))
    asyncio.run(client.find(Query("_Installation")))
    assert len(executor.calls) == 1


def test_current_user_is_forwarded():
    executor = FakeExecutor()
    users = iter(["alice", "bob"])
    client = QueryClient(executor, current_user=lambda: next(users))

    asyncio.run(client.count(Query("Player")))
    asyncio.run(client.count(Query("Player")))

    assert [c["user"] for c in executor.calls] == ["alice", "bob"]


def test_executor_errors_propagate():
    client = QueryClient(FakeExecutor(error=ConnectionError("boom")))

    with pytest.raises(ConnectionError, match="boom"):
        asyncio.run(client.find(Query("Player")))


def test_cancelled_before_dispatch():
    executor = FakeExecutor()
    token = CancellationToken()
    token.cancel()

    with pytest.raises(QueryCancelledError):
        asyncio.run(QueryClient(executor).find(Query("Player"), token))
    assert executor.calls == []


def test_reserved_check_precedes_cancellation():
    token = CancellationToken()
    token.cancel()

    with pytest.raises(InvalidQueryOperationError):
        asyncio.run(QueryClient(FakeExecutor()).find(Query("_Installation"), token))


def test_cancelled_in_flight():
    executor = FakeExecutor(states=[_player_state()], delay=10)
    token = CancellationToken()

    async def run():
        asyncio.get_running_loop().call_later(0.01, token.cancel)
        return await QueryClient(executor).find(Query("Player"), token)

    with pytest.raises(QueryCancelledError):
        asyncio.run(run())
    assert len(executor.calls) == 1
    assert executor.cancelled


def test_token_not_cancelled_completes():
    executor = FakeExecutor(states=[_player_state()], delay=0.01)
    token = CancellationToken()

    players = asyncio.run(QueryClient(executor).find(Query("Player"), token))

    assert [p.object_id for p in players] == ["p1"]
    assert not token.is_cancelled


def test_cancel_is_idempotent():
    token = CancellationToken()
    token.cancel()
    token.cancel()

    assert token.is_cancelled
    with pytest.raises(QueryCancelledError):
        token.raise_if_cancelled()
