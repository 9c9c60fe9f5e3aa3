"""
State-graph execution engine.

Contains:
- channels: reducer-governed shared state (ChannelSchema / ChannelStore)
- graph: the StateGraph builder and compile-time validation
- engine: CompiledGraph and the stepped GraphRun interpreter
- subgraph: embedding a compiled graph as a single node
- errors: the engine's exception hierarchy
"""

from .channels import (
    ChannelSchema,
    ChannelStore,
    append,
    channel,
    override_if_present,
)
from .edges import END, START
from .engine import (
    DEFAULT_STEP_LIMIT,
    STEP_LIMIT_ENV,
    CompiledGraph,
    GraphRun,
    RunStatus,
    StepSnapshot,
    default_step_limit,
    run,
)
from .errors import (
    ConfigurationError,
    GraphDefinitionError,
    GraphError,
    GraphRunError,
    HandlerError,
    OracleContractError,
    RecursionLimitExceeded,
    RoutingError,
)
from .graph import StateGraph
from .subgraph import SubgraphNode, last_message, select_channels


__all__ = [
    "DEFAULT_STEP_LIMIT",
    "END",
    "STEP_LIMIT_ENV",
    "START",
    "ChannelSchema",
    "ChannelStore",
    "CompiledGraph",
    "ConfigurationError",
    "GraphDefinitionError",
    "GraphError",
    "GraphRun",
    "GraphRunError",
    "HandlerError",
    "OracleContractError",
    "RecursionLimitExceeded",
    "RoutingError",
    "RunStatus",
    "StateGraph",
    "StepSnapshot",
    "SubgraphNode",
    "append",
    "channel",
    "default_step_limit",
    "last_message",
    "override_if_present",
    "run",
    "select_channels",
]
