import pytest

from objectquery import Query, QueryConstructionError, QueryState


@pytest.mark.parametrize("class_name", ["", None])
def test_empty_class_name(class_name):
    with pytest.raises(QueryConstructionError, match="class name"):
        QueryState(class_name=class_name)
    with pytest.raises(QueryConstructionError, match="class name"):
        Query(class_name)


def test_skip_is_cumulative():
    assert Query("Item").skip(3).skip(4).build_parameters() == {"skip": 7}


def test_skip_zero_is_emitted():
    assert Query("Item").skip(0).build_parameters() == {"skip": 0}


def test_limit_replaces():
    assert Query("Item").limit(3).limit(4).build_parameters() == {"limit": 4}


def test_then_by_requires_order_by():
    with pytest.raises(QueryConstructionError, match="order_by"):
        Query("Item").then_by("x")
    with pytest.raises(QueryConstructionError, match="order_by"):
        Query("Item").then_by_descending("x")


def test_then_by_appends():
    query = Query("Item").order_by("a").then_by("x").then_by_descending("y")
    assert query.build_parameters()["order"] == "a,x,-y"


def test_order_by_replaces():
    query = Query("Item").order_by("a").then_by("b").order_by_descending("c")
    assert query.build_parameters()["order"] == "-c"


def test_order_dedup_keeps_first_seen_order():
    query = Query("Item").order_by("b").then_by("a").then_by("b")
    assert query.state.order_by == ("b", "a")


def test_include_and_select_are_unions():
    query = (
        Query("Item")
        .include("owner")
        .include("owner.team")
        .include("owner")
        .select("name")
        .select("name")
    )
    params = query.build_parameters()
    assert params["include"] == "owner,owner.team"
    assert params["keys"] == "name"


def test_redirect_class_name():
    params = Query("Item").redirect_class_name("owner").build_parameters()
    assert params == {"redirectClassNameForKey": "owner"}


def test_refinement_leaves_source_untouched():
    q1 = Query("Item").where_equal_to("a", 1).include("owner")
    before = q1.build_parameters()

    q2 = q1.where_equal_to("b", 2).order_by("x").skip(5).limit(1).include("team")

    assert q1.build_parameters() == before
    assert q2.build_parameters() == {
        "where": {"a": 1, "b": 2},
        "order": "x",
        "skip": 5,
        "limit": 1,
        "include": "owner,team",
    }


def test_branches_are_independent():
    base = Query("Item").where_greater_than("price", 10)
    cheap = base.where_less_than("price", 20)
    featured = base.where_equal_to("featured", True)

    assert base.build_parameters() == {"where": {"price": {"$gt": 10}}}
    assert cheap.build_parameters() == {"where": {"price": {"$gt": 10, "$lt": 20}}}
    assert featured.build_parameters() == {
        "where": {"price": {"$gt": 10}, "featured": True}
    }


def test_state_where_is_read_only():
    query = Query("Item").where_equal_to("a", 1)
    with pytest.raises(TypeError):
        query.state.where["b"] = 2  # type: ignore[index]


def test_untouched_fields_are_shared():
    q1 = Query("Item").where_equal_to("a", 1)
    q2 = q1.limit(3)
    # read-only containers can be shared safely
    assert q2.state.where is q1.state.where
    assert q2.state is not q1.state


def test_get_constraint():
    query = Query("Item").where_equal_to("a", 1).where_greater_than("b", 2)
    assert query.get_constraint("a") == 1
    assert query.get_constraint("b") == {"$gt": 2}
    assert query.get_constraint("missing") is None
    assert Query("Item").get_constraint("a") is None


def test_query_equality():
    assert Query("Item").where_equal_to("a", 1).limit(2) == Query("Item").limit(
        2
    ).where_equal_to("a", 1)
    assert Query("Item").where_equal_to("a", 1) != Query("Item").where_equal_to("a", 2)
    assert Query("Item") != Query("Other")


def test_literal_operands_are_copied():
    tags = ["a"]
    meta = {"k": [1]}
    query = Query("Item").where_equal_to("tags", tags).where_equal_to("meta", meta)

    tags.append("b")
    meta["k"].append(2)
    meta["new"] = True

    assert query.build_parameters() == {"where": {"tags": ["a"], "meta": {"k": [1]}}}


def test_operator_operands_are_copied():
    inner = {"x": 1}
    query = Query("Item").where_contained_in("k", [inner])
    inner["x"] = 2

    assert query.build_parameters() == {"where": {"k": {"$in": [{"x": 1}]}}}


def test_get_constraint_cannot_change_query():
    q1 = Query("Item").where_contained_in("k", [1]).where_equal_to("meta", {"a": 1})
    q2 = q1.where_greater_than("n", 0)

    with pytest.raises(AttributeError):
        q2.get_constraint("k")["$in"].append(99)
    with pytest.raises(TypeError):
        q2.get_constraint("meta")["a"] = 2

    # the returned dict is a copy
    q2.get_constraint("k")["$nin"] = (5,)

    expected = {"k": {"$in": [1]}, "meta": {"a": 1}}
    assert q1.build_parameters() == {"where": expected}
    assert q2.build_parameters() == {"where": {**expected, "n": {"$gt": 0}}}


def test_or_operands_cannot_be_changed():
    either = Query.or_([Query("Item").where_equal_to("a", 1)])

    with pytest.raises(AttributeError):
        either.get_constraint("$or").append({"b": 2})
    with pytest.raises(TypeError):
        either.get_constraint("$or")[0]["a"] = 3

    assert either.build_parameters() == {"where": {"$or": [{"a": 1}]}}


def test_state_constructor_freezes_where():
    ids = ["x"]
    state = QueryState(class_name="Item", where={"objectId": ids})
    ids.append("y")

    assert state.get_constraint("objectId") == ("x",)


def test_queries_are_hashable():
    q1 = Query("Item").where_contained_in("k", [1]).order_by("a").limit(2)
    q2 = Query("Item").limit(2).order_by("a").where_contained_in("k", [1])

    assert q1 == q2
    assert hash(q1) == hash(q2)
    assert len({q1, q2, Query("Item")}) == 2


def test_redirect_class_name_replaces_with_empty_key():
    query = Query("Item").redirect_class_name("owner").redirect_class_name("")
    assert query.build_parameters() == {"redirectClassNameForKey": ""}
