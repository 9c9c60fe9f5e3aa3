from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterator, Mapping, Optional, Union

from .channels import ChannelSchema
from .edges import END, ConditionalEdge, StaticEdge
from .errors import (
    ConfigurationError,
    GraphRunError,
    HandlerError,
    RecursionLimitExceeded,
    RoutingError,
)
from .subgraph import InputAdapter, OutputAdapter, SubgraphNode


logger = logging.getLogger(__name__)


DEFAULT_STEP_LIMIT = 25
STEP_LIMIT_ENV = "TEAMGRAPH_STEP_LIMIT"

Handler = Callable[[Mapping[str, Any]], Optional[Mapping[str, Any]]]
Edge = Union[StaticEdge, ConditionalEdge]


def default_step_limit() -> int:
    """Step limit for runs that set none, overridable with TEAMGRAPH_STEP_LIMIT."""
    raw = os.getenv(STEP_LIMIT_ENV)
    if raw is None or raw.strip() == "":
        return DEFAULT_STEP_LIMIT
    try:
        value = int(raw)
    except ValueError:
        raise ConfigurationError(f"{STEP_LIMIT_ENV} must be an integer, got {raw!r}") from None
    if value < 1:
        raise ConfigurationError(f"{STEP_LIMIT_ENV} must be positive, got {value}")
    return value


class RunStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    ABORTED = "aborted"


@dataclass(frozen=True)
class StepSnapshot:
    """One successful step: the node that ran and the partial update it returned."""

    step: int
    node: str
    delta: Mapping[str, Any]


class CompiledGraph:
    """
    Immutable execution plan produced by `StateGraph.compile()`.

    A compiled graph holds no per-run state, so any number of runs may drive
    it at the same time; each `stream()` call gets its own `GraphRun`.
    """

    def __init__(
        self,
        schema: ChannelSchema,
        nodes: Mapping[str, Handler],
        edges: Mapping[str, Edge],
        entry_point: str,
        step_limit: Optional[int] = None,
        name: Optional[str] = None,
    ):
        self._schema = schema
        self._nodes = MappingProxyType(dict(nodes))
        self._edges = MappingProxyType(dict(edges))
        self._entry_point = entry_point
        self._step_limit = step_limit
        self._name = name or "graph"

    @property
    def name(self) -> str:
        return self._name

    @property
    def schema(self) -> ChannelSchema:
        return self._schema

    @property
    def nodes(self) -> Mapping[str, Handler]:
        return self._nodes

    @property
    def edges(self) -> Mapping[str, Edge]:
        return self._edges

    @property
    def entry_point(self) -> str:
        return self._entry_point

    @property
    def step_limit(self) -> Optional[int]:
        return self._step_limit

    def resolve_step_limit(self, step_limit: Optional[int] = None) -> int:
        if step_limit is None:
            step_limit = self._step_limit
        if step_limit is None:
            step_limit = default_step_limit()
        if isinstance(step_limit, bool) or not isinstance(step_limit, int) or step_limit < 1:
            raise ConfigurationError(f"Step limit must be a positive integer, got {step_limit!r}")
        return step_limit

    def next_node(self, node: str, state: Mapping[str, Any]) -> str:
        """Resolve the node that follows `node`, given the post-merge state."""
        edge = self._edges[node]
        if isinstance(edge, StaticEdge):
            return edge.target

        try:
            key = edge.router(state)
        except Exception as exc:
            raise HandlerError(f"Router for node '{node}' failed: {exc}", node=node) from exc

        try:
            target = edge.path_map[key]
        except (KeyError, TypeError):
            raise RoutingError(node, key) from None
        logger.debug("Router for '%s' returned %r -> %s", node, key, target)
        return target

    def stream(
        self,
        initial_state: Optional[Mapping[str, Any]] = None,
        step_limit: Optional[int] = None,
    ) -> "GraphRun":
        """
        Start a new run. The returned `GraphRun` yields one `StepSnapshot` per
        step and raises the run's error, if any, after the last good step.
        """
        return GraphRun(self, initial_state, self.resolve_step_limit(step_limit))

    def invoke(
        self,
        initial_state: Optional[Mapping[str, Any]] = None,
        step_limit: Optional[int] = None,
        on_step: Optional[Callable[[StepSnapshot], None]] = None,
    ) -> Dict[str, Any]:
        """Run to completion and return the final state."""
        run = self.stream(initial_state, step_limit)
        for snapshot in run:
            if on_step is not None:
                on_step(snapshot)
        return dict(run.state)

    def as_node(
        self,
        input_adapter: InputAdapter,
        output_adapter: OutputAdapter,
        step_limit: Optional[int] = None,
        name: Optional[str] = None,
    ) -> SubgraphNode:
        return SubgraphNode(self, input_adapter, output_adapter, step_limit=step_limit, name=name)

    def __repr__(self) -> str:
        return f"CompiledGraph(name={self._name!r}, nodes={list(self._nodes)}, entry={self._entry_point!r})"


class GraphRun:
    """
    Execution context for one run of a compiled graph.

    Iterate it to drive the run. A run cannot be restarted: iterating it a
    second time raises `RuntimeError`, and running again means calling
    `CompiledGraph.stream()` again.
    """

    def __init__(
        self,
        graph: CompiledGraph,
        initial_state: Optional[Mapping[str, Any]],
        step_limit: int,
    ):
        self.graph = graph
        self.step_limit = step_limit
        self.step_count = 0
        self.current_node = graph.entry_point
        self.status = RunStatus.PENDING
        self.error: Optional[GraphRunError] = None
        self._store = graph.schema.create_store(initial_state)
        self._started = False

    @property
    def state(self) -> Mapping[str, Any]:
        """The last fully merged state."""
        return self._store.snapshot()

    def __iter__(self) -> Iterator[StepSnapshot]:
        if self._started:
            raise RuntimeError("GraphRun has already been started; call stream() for a new run")
        self._started = True
        return self._steps()

    def _steps(self) -> Iterator[StepSnapshot]:
        self.status = RunStatus.RUNNING
        logger.info(
            "Starting run of %s at '%s' with step_limit=%s",
            self.graph.name,
            self.current_node,
            self.step_limit,
        )

        while True:
            node = self.current_node
            try:
                update = self._execute(node)
            except GraphRunError as exc:
                self._fail(exc, node)
                raise

            self.step_count += 1
            logger.debug("Step %s at '%s' produced %s", self.step_count, node, update)
            yield StepSnapshot(self.step_count, node, MappingProxyType(dict(update)))

            try:
                target = self.graph.next_node(node, self._store.snapshot())
            except GraphRunError as exc:
                self._fail(exc, node)
                raise

            if target == END:
                self.current_node = END
                self.status = RunStatus.COMPLETED
                logger.info("Run of %s completed after %s step(s)", self.graph.name, self.step_count)
                return

            if self.step_count >= self.step_limit:
                exc = RecursionLimitExceeded(self.step_limit, node=target)
                self._fail(exc, target)
                raise exc

            self.current_node = target

    def _execute(self, node: str) -> Mapping[str, Any]:
        handler = self.graph.nodes[node]
        try:
            update = handler(self._store.snapshot())
        except GraphRunError as exc:
            if exc.annotated:
                # Already reported by a nested run; fail this node with the same kind.
                raise exc.nested_in(node) from exc
            raise
        except Exception as exc:
            raise HandlerError(f"Node '{node}' failed: {exc}", node=node) from exc

        if update is None:
            return {}
        if not isinstance(update, Mapping):
            raise HandlerError(
                f"Node '{node}' returned {type(update).__name__}, expected a mapping",
                node=node,
            )

        try:
            self._store.apply(update)
        except ConfigurationError as exc:
            raise HandlerError(f"Node '{node}' returned an invalid update: {exc}", node=node) from exc
        return update

    def _fail(self, exc: GraphRunError, node: str) -> None:
        exc.annotate(node, self.step_count, self._store.snapshot())
        self.error = exc
        if isinstance(exc, RecursionLimitExceeded):
            self.status = RunStatus.ABORTED
        else:
            self.status = RunStatus.FAILED
        logger.error(
            "Run of %s %s at '%s' after %s step(s): %s",
            self.graph.name,
            self.status.value,
            node,
            self.step_count,
            exc,
        )


def run(
    graph: CompiledGraph,
    initial_state: Optional[Mapping[str, Any]] = None,
    step_limit: Optional[int] = None,
) -> GraphRun:
    """Start a fresh run of `graph`; the result is a lazy, single-use step sequence."""
    return graph.stream(initial_state, step_limit)


__all__ = [
    "DEFAULT_STEP_LIMIT",
    "STEP_LIMIT_ENV",
    "CompiledGraph",
    "GraphRun",
    "RunStatus",
    "StepSnapshot",
    "default_step_limit",
    "run",
]
