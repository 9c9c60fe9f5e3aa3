"""
Tests for embedding a compiled graph as a single node of a parent graph.
"""

import pytest

from stategraph import (
    END,
    START,
    ChannelSchema,
    HandlerError,
    RecursionLimitExceeded,
    RunStatus,
    StateGraph,
    SubgraphNode,
    append,
    last_message,
    override_if_present,
    select_channels,
)


def _team_schema() -> ChannelSchema:
    return (
        ChannelSchema()
        .define("messages", append, list)
        .define("team_members", append, list)
        .define("next", override_if_present, lambda: "supervisor")
    )


def _outer_schema() -> ChannelSchema:
    return (
        ChannelSchema()
        .define("messages", append, list)
        .define("next", override_if_present, lambda: "Team")
    )


def _inner_team(worker_steps=2, step_limit=None):
    """Inner team whose supervisor sends work to W `worker_steps` times."""

    def supervisor(state):
        done = sum(1 for m in state["messages"] if m.startswith("inner"))
        return {"next": "W" if done < worker_steps else "FINISH"}

    def worker(state):
        return {"messages": [f"inner {len(state['messages'])}"]}

    builder = StateGraph(_team_schema(), name="Team")
    builder.add_node("supervisor", supervisor)
    builder.add_node("W", worker)
    builder.add_edge(START, "supervisor")
    builder.add_edge("W", "supervisor")
    builder.add_conditional_edges("supervisor", lambda s: s["next"], {"W": "W", "FINISH": END})
    return builder.compile(step_limit=step_limit)


def _outer(team_node):
    decisions = ["Team", "FINISH"]

    def supervisor(state):
        return {"next": decisions.pop(0)}

    builder = StateGraph(_outer_schema(), name="outer")
    builder.add_node("supervisor", supervisor)
    builder.add_node("Team", team_node)
    builder.add_edge(START, "supervisor")
    builder.add_edge("Team", "supervisor")
    builder.add_conditional_edges(
        "supervisor", lambda s: s["next"], {"Team": "Team", "FINISH": END}
    )
    return builder.compile()


def test_subgraph_contributes_exactly_one_outer_update():
    team = _inner_team().as_node(select_channels("messages"), last_message())
    graph = _outer(team)

    snapshots = list(graph.stream({"messages": ["user request"]}, step_limit=10))

    assert [s.node for s in snapshots] == ["supervisor", "Team", "supervisor"]
    team_delta = dict(snapshots[1].delta)
    assert team_delta == {"messages": ["inner 2"]}


def test_subgraph_final_state_only_reports_last_message():
    team = SubgraphNode(_inner_team(), select_channels("messages"), last_message())
    state = _outer(team).invoke({"messages": ["user request"]}, step_limit=10)
    assert state["messages"] == ["user request", "inner 2"]


def test_input_adapter_controls_inner_initial_state():
    seen = []

    def enter(state):
        inner = {"messages": list(state["messages"]), "team_members": ["W"]}
        seen.append(inner)
        return inner

    team = _inner_team().as_node(enter, lambda final: {"messages": final["team_members"]})
    state = _outer(team).invoke({"messages": ["user request"]}, step_limit=10)

    assert seen == [{"messages": ["user request"], "team_members": ["W"]}]
    assert state["messages"] == ["user request", "W"]


def test_inner_step_limit_failure_fails_the_wrapping_node_with_the_same_kind():
    inner = _inner_team(worker_steps=100, step_limit=4)
    team = inner.as_node(select_channels("messages"), last_message(), name="Team")
    run = _outer(team).stream({"messages": ["user request"]}, step_limit=10)

    with pytest.raises(RecursionLimitExceeded) as excinfo:
        list(run)

    error = excinfo.value
    assert error.node == "Team"
    assert error.step_limit == 4
    assert error.last_state["messages"] == ["user request"]
    assert run.status is RunStatus.ABORTED
    assert run.error is error

    assert error.inner is error.__cause__
    assert isinstance(error.inner, RecursionLimitExceeded)
    assert error.inner.node == "supervisor"
    assert error.inner.step == 4


def test_inner_handler_failure_stays_a_handler_error():
    def broken(state):
        raise ValueError("boom")

    builder = StateGraph(_team_schema(), name="Team")
    builder.add_node("supervisor", broken)
    builder.add_edge(START, "supervisor")
    builder.set_finish_point("supervisor")
    team = builder.compile().as_node(select_channels("messages"), last_message(), name="Team")

    with pytest.raises(HandlerError) as excinfo:
        _outer(team).invoke({"messages": []}, step_limit=10)

    assert excinfo.value.node == "Team"
    assert excinfo.value.inner.node == "supervisor"
    assert isinstance(excinfo.value.inner.__cause__, ValueError)


def test_select_channels_skips_absent_channels():
    adapter = select_channels("messages", "topic")
    assert adapter({"messages": ["a"]}) == {"messages": ["a"]}


def test_last_message_on_empty_log():
    assert last_message()({"messages": []}) == {"messages": []}
