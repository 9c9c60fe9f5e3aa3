import logging
from typing import Any, Callable, Mapping, Optional, Union

from agents.supervisor import FINISH, TeamSupervisor, route_by_next
from stategraph import END, START, ChannelSchema, CompiledGraph, StateGraph


logger = logging.getLogger(__name__)


SUPERVISOR_NODE = "supervisor"


def build_team_graph(
    schema: Union[ChannelSchema, type],
    supervisor: TeamSupervisor,
    workers: Mapping[str, Callable[[Mapping[str, Any]], Any]],
    step_limit: Optional[int] = None,
    name: Optional[str] = None,
) -> CompiledGraph:
    """
    Construct and compile a supervisor/worker star.

    - START -> supervisor
    - every worker -> supervisor
    - supervisor -> worker named in `next`, or END on FINISH

    The supervisor's members must match the workers exactly; the router's
    keys are declared so an unmapped member fails compilation.
    """
    if sorted(supervisor.members) != sorted(workers):
        raise ValueError(
            f"Supervisor members {supervisor.members} do not match workers {list(workers)}"
        )

    builder = StateGraph(schema, name=name)
    builder.add_node(SUPERVISOR_NODE, supervisor)
    for worker_name, handler in workers.items():
        builder.add_node(worker_name, handler)
        builder.add_edge(worker_name, SUPERVISOR_NODE)

    path_map = {worker_name: worker_name for worker_name in workers}
    path_map[FINISH] = END
    builder.add_conditional_edges(
        SUPERVISOR_NODE,
        route_by_next,
        path_map,
        keys=supervisor.options,
    )
    builder.add_edge(START, SUPERVISOR_NODE)

    logger.info("Building team graph %s with workers %s", name, ", ".join(workers))
    return builder.compile(step_limit=step_limit)


__all__ = ["SUPERVISOR_NODE", "build_team_graph"]
