"""
Deterministic unit tests for the channel store and its reducers.
"""

from typing import Annotated, List, TypedDict

import pytest

from stategraph import (
    ChannelSchema,
    ConfigurationError,
    append,
    channel,
    override_if_present,
)


def _schema() -> ChannelSchema:
    return (
        ChannelSchema()
        .define("messages", append, list)
        .define("next", override_if_present, lambda: "supervisor")
    )


def test_append_preserves_order_and_never_drops():
    assert append(["a"], ["b", "c"]) == ["a", "b", "c"]
    assert append(["a"], None) == ["a"]
    assert append([], "single") == ["single"]
    assert append(None, ("x", "y")) == ["x", "y"]


def test_append_returns_new_list():
    old = ["a"]
    merged = append(old, ["b"])
    assert old == ["a"]
    assert merged is not old


def test_override_if_present_keeps_old_on_none():
    assert override_if_present("old", None) == "old"
    assert override_if_present("old", "new") == "new"
    assert override_if_present("old", "") == ""


def test_store_starts_from_defaults_with_initial_values_merged():
    store = _schema().create_store({"messages": ["hello"]})
    assert store.get("messages") == ["hello"]
    assert store.get("next") == "supervisor"


def test_append_channel_accumulates_n_times_k_items_in_call_order():
    store = _schema().create_store()
    for step in range(4):
        store.apply({"messages": [f"{step}-a", f"{step}-b", f"{step}-c"]})

    messages = store.get("messages")
    assert len(messages) == 12
    assert messages[:3] == ["0-a", "0-b", "0-c"]
    assert messages[-1] == "3-c"


def test_merge_single_channel():
    store = _schema().create_store()
    assert store.merge("next", "Search") == "Search"
    assert store.merge("next", None) == "Search"


def test_apply_rejects_unknown_channel_without_partial_write():
    store = _schema().create_store()
    with pytest.raises(ConfigurationError):
        store.apply({"messages": ["kept?"], "nope": 1})
    assert store.get("messages") == []


def test_unknown_channel_lookup_is_configuration_error():
    with pytest.raises(ConfigurationError):
        _schema().get("missing")


def test_initial_state_with_unknown_channel_fails():
    with pytest.raises(ConfigurationError):
        _schema().create_store({"topic": "x"})


def test_missing_default_is_reported():
    schema = ChannelSchema().define("topic", override_if_present)
    assert schema.validate() == ["Channel 'topic' has no default"]
    with pytest.raises(ConfigurationError):
        schema.create_store()


def test_duplicate_channel_definition_fails():
    with pytest.raises(ConfigurationError):
        _schema().define("next", override_if_present, str)


def test_snapshot_is_read_only():
    snapshot = _schema().create_store().snapshot()
    with pytest.raises(TypeError):
        snapshot["next"] = "other"


def test_in_place_changes_to_a_snapshot_never_reach_the_store():
    store = _schema().create_store({"messages": ["start"]})

    store.snapshot()["messages"].append("smuggled")
    store.get("messages").append("smuggled")

    assert store.snapshot()["messages"] == ["start"]


def test_frozen_copy_rejects_new_channels():
    schema = _schema()
    frozen = schema.frozen_copy()

    schema.define("topic", override_if_present, str)

    assert frozen.frozen
    assert "topic" not in frozen
    with pytest.raises(ConfigurationError):
        frozen.define("extra", override_if_present, str)


class _AnnotatedState(TypedDict, total=False):
    messages: Annotated[List[str], channel(append, list)]
    topic: Annotated[str, channel(override_if_present, str)]


class _UnmarkedState(TypedDict, total=False):
    query: str


def test_schema_from_typed_dict():
    schema = ChannelSchema.from_typed_dict(_AnnotatedState)
    assert schema.names == ["messages", "topic"]
    store = schema.create_store()
    assert store.get("topic") == ""


def test_typed_dict_field_without_marker_fails():
    with pytest.raises(ConfigurationError):
        ChannelSchema.from_typed_dict(_UnmarkedState)
