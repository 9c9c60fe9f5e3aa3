"""
Compile-time validation of graph definitions. No run is ever started here.
"""

from typing import Literal

import pytest

from stategraph import (
    END,
    START,
    ChannelSchema,
    GraphDefinitionError,
    StateGraph,
    append,
    override_if_present,
)


def _schema() -> ChannelSchema:
    return (
        ChannelSchema()
        .define("messages", append, list)
        .define("next", override_if_present, lambda: "supervisor")
    )


def _noop(state):
    return {}


def route_literal(state) -> Literal["A", "FINISH"]:
    return state["next"]


def _star() -> StateGraph:
    builder = StateGraph(_schema(), name="star")
    builder.add_node("supervisor", _noop)
    builder.add_node("A", _noop)
    builder.add_edge(START, "supervisor")
    builder.add_edge("A", "supervisor")
    return builder


def test_valid_star_compiles():
    builder = _star()
    builder.add_conditional_edges("supervisor", route_literal, {"A": "A", "FINISH": END})
    graph = builder.compile()
    assert graph.entry_point == "supervisor"
    assert set(graph.nodes) == {"supervisor", "A"}


def test_unmapped_literal_router_key_fails_compile():
    builder = _star()
    builder.add_conditional_edges("supervisor", route_literal, {"A": "A"})
    with pytest.raises(GraphDefinitionError) as excinfo:
        builder.compile()
    assert any("'FINISH' is not mapped" in p for p in excinfo.value.problems)


def test_unmapped_declared_key_fails_compile():
    builder = _star()
    builder.add_conditional_edges(
        "supervisor", lambda s: s["next"], {"A": "A", "FINISH": END}, keys=["A", "B", "FINISH"]
    )
    with pytest.raises(GraphDefinitionError, match="'B' is not mapped"):
        builder.compile()


def test_conditional_target_must_be_registered():
    builder = _star()
    builder.add_conditional_edges("supervisor", lambda s: s["next"], {"A": "A", "B": "B"})
    with pytest.raises(GraphDefinitionError, match="unknown node 'B'"):
        builder.compile()


def test_static_target_must_be_registered():
    builder = StateGraph(_schema())
    builder.add_node("A", _noop)
    builder.add_edge(START, "A")
    builder.add_edge("A", "ghost")
    with pytest.raises(GraphDefinitionError, match="ghost"):
        builder.compile()


def test_duplicate_node_name_fails():
    builder = StateGraph(_schema())
    builder.add_node("A", _noop)
    with pytest.raises(GraphDefinitionError, match="already exists"):
        builder.add_node("A", _noop)


def test_reserved_node_name_fails():
    with pytest.raises(GraphDefinitionError):
        StateGraph(_schema()).add_node(END, _noop)


def test_entry_point_required_and_registered():
    builder = StateGraph(_schema())
    builder.add_node("A", _noop)
    builder.add_edge("A", END)
    with pytest.raises(GraphDefinitionError, match="No entry point"):
        builder.compile()

    builder.set_entry_point("missing")
    with pytest.raises(GraphDefinitionError, match="Entry point 'missing'"):
        builder.compile()


def test_node_without_outbound_edge_fails():
    builder = StateGraph(_schema())
    builder.add_node("A", _noop)
    builder.add_edge(START, "A")
    with pytest.raises(GraphDefinitionError, match="no outbound edge"):
        builder.compile()


def test_multiple_outbound_edges_rejected():
    builder = StateGraph(_schema())
    builder.add_node("A", _noop)
    builder.add_node("B", _noop)
    builder.add_edge(START, "A")
    builder.add_edge("A", "B")
    builder.add_edge("A", END)
    builder.add_edge("B", END)
    with pytest.raises(GraphDefinitionError, match="only one is allowed"):
        builder.compile()


def test_cycle_that_never_reaches_end_fails():
    builder = StateGraph(_schema())
    builder.add_node("A", _noop)
    builder.add_node("B", _noop)
    builder.add_edge(START, "A")
    builder.add_edge("A", "B")
    builder.add_edge("B", "A")
    with pytest.raises(GraphDefinitionError, match="can never reach END"):
        builder.compile()


def test_unreachable_node_reported():
    builder = StateGraph(_schema())
    builder.add_node("A", _noop)
    builder.add_node("island", _noop)
    builder.add_edge(START, "A")
    builder.add_edge("A", END)
    builder.add_edge("island", END)
    with pytest.raises(GraphDefinitionError, match="'island' is unreachable"):
        builder.compile()


def test_missing_channel_default_fails_compile():
    schema = ChannelSchema().define("topic", override_if_present)
    builder = StateGraph(schema)
    builder.add_node("A", _noop)
    builder.add_edge(START, "A")
    builder.add_edge("A", END)
    with pytest.raises(GraphDefinitionError, match="no default"):
        builder.compile()


def test_all_problems_reported_together():
    builder = StateGraph(_schema())
    builder.add_node("A", _noop)
    builder.add_edge("A", "ghost")
    with pytest.raises(GraphDefinitionError) as excinfo:
        builder.compile()
    assert len(excinfo.value.problems) == 2


def test_list_path_map_routes_names_to_themselves():
    builder = _star()
    builder.add_conditional_edges("supervisor", lambda s: s["next"], ["A", END])
    graph = builder.compile()
    assert dict(graph.edges["supervisor"].path_map) == {"A": "A", END: END}


def test_compiled_graph_tables_are_read_only():
    builder = _star()
    builder.add_conditional_edges("supervisor", route_literal, {"A": "A", "FINISH": END})
    graph = builder.compile()
    with pytest.raises(TypeError):
        graph.nodes["B"] = _noop
