from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set, Union

from .channels import ChannelSchema
from .edges import END, START, ConditionalEdge, Router, StaticEdge, freeze_path_map, router_keys
from .engine import CompiledGraph, Edge, Handler
from .errors import GraphDefinitionError


logger = logging.getLogger(__name__)


class StateGraph:
    """
    Additive builder for a state graph.

    Example:
        builder = StateGraph(TeamState)
        builder.add_node("supervisor", supervisor)
        builder.add_node("Search", search)
        builder.add_edge(START, "supervisor")
        builder.add_edge("Search", "supervisor")
        builder.add_conditional_edges(
            "supervisor", route_by_next, {"Search": "Search", "FINISH": END}
        )
        graph = builder.compile()

    Problems with edges are collected and reported together by `compile()`.
    """

    def __init__(self, schema: Union[ChannelSchema, type], name: Optional[str] = None):
        if isinstance(schema, ChannelSchema):
            self._schema = schema
        else:
            self._schema = ChannelSchema.from_typed_dict(schema)
        self._name = name
        self._nodes: Dict[str, Handler] = {}
        self._edges: Dict[str, List[Edge]] = {}
        self._entry_point: Optional[str] = None

    @property
    def schema(self) -> ChannelSchema:
        return self._schema

    def add_node(self, name: str, handler: Handler) -> "StateGraph":
        if name in (START, END):
            raise GraphDefinitionError([f"'{name}' is reserved and cannot be a node name"])
        if name in self._nodes:
            raise GraphDefinitionError([f"Node '{name}' already exists"])
        if not callable(handler):
            raise GraphDefinitionError([f"Handler for node '{name}' is not callable"])
        self._nodes[name] = handler
        logger.debug("Added node: %s", name)
        return self

    def add_edge(self, source: str, target: str) -> "StateGraph":
        if source == START:
            return self.set_entry_point(target)
        self._edges.setdefault(source, []).append(StaticEdge(source, target))
        logger.debug("Added edge: %s -> %s", source, target)
        return self

    def add_conditional_edges(
        self,
        source: str,
        router: Router,
        path_map: Union[Mapping[Any, str], Iterable[str]],
        keys: Optional[Iterable[Any]] = None,
    ) -> "StateGraph":
        if keys is not None:
            known_keys = frozenset(keys)
        else:
            known_keys = router_keys(router)
        edge = ConditionalEdge(source, router, freeze_path_map(path_map), known_keys)
        self._edges.setdefault(source, []).append(edge)
        logger.debug("Added conditional edge: %s -> %s", source, sorted(edge.targets))
        return self

    def set_entry_point(self, name: str) -> "StateGraph":
        self._entry_point = name
        return self

    def set_finish_point(self, name: str) -> "StateGraph":
        return self.add_edge(name, END)

    def compile(self, step_limit: Optional[int] = None) -> CompiledGraph:
        problems = self.validate()
        if problems:
            logger.error("Graph %s failed validation: %s", self._name or "", problems)
            raise GraphDefinitionError(problems)

        graph = CompiledGraph(
            schema=self._schema.frozen_copy(),
            nodes=self._nodes,
            edges={source: edges[0] for source, edges in self._edges.items()},
            entry_point=self._entry_point,
            step_limit=step_limit,
            name=self._name,
        )
        logger.info(
            "Compiled graph %s with nodes %s",
            graph.name,
            ", ".join(self._nodes),
        )
        return graph

    def validate(self) -> List[str]:
        """Return every problem that would prevent compilation."""
        problems = list(self._schema.validate())

        if not self._nodes:
            problems.append("Graph has no nodes")
        if self._entry_point is None:
            problems.append("No entry point set")
        elif self._entry_point not in self._nodes:
            problems.append(f"Entry point '{self._entry_point}' is not a registered node")

        for source, edges in self._edges.items():
            if source not in self._nodes:
                problems.append(f"Edge source '{source}' is not a registered node")
            if len(edges) > 1:
                problems.append(
                    f"Node '{source}' has {len(edges)} outbound edges; only one is allowed"
                )
            for edge in edges:
                problems.extend(self._check_edge(edge))

        for name in self._nodes:
            if name not in self._edges:
                problems.append(f"Node '{name}' has no outbound edge")

        if not problems:
            problems.extend(self._check_reachability())
        return problems

    def _check_edge(self, edge: Edge) -> List[str]:
        problems = []
        if isinstance(edge, StaticEdge):
            if edge.target != END and edge.target not in self._nodes:
                problems.append(
                    f"Edge {edge.source} -> {edge.target}: target is not a registered node"
                )
            return problems

        if not edge.path_map:
            problems.append(f"Conditional edge from '{edge.source}' has an empty path map")
        for key, target in edge.path_map.items():
            if target != END and target not in self._nodes:
                problems.append(
                    f"Conditional edge from '{edge.source}': key {key!r} targets "
                    f"unknown node '{target}'"
                )
        for key in sorted(edge.unmapped_keys(), key=repr):
            problems.append(
                f"Conditional edge from '{edge.source}': router key {key!r} is not mapped"
            )
        return problems

    def _successors(self, name: str) -> Set[str]:
        targets: Set[str] = set()
        for edge in self._edges.get(name, []):
            targets |= edge.targets
        return targets

    def _check_reachability(self) -> List[str]:
        reachable: Set[str] = set()
        to_visit = [self._entry_point]
        while to_visit:
            name = to_visit.pop()
            if name in reachable or name == END:
                continue
            reachable.add(name)
            to_visit.extend(self._successors(name))

        finishing: Set[str] = set()
        changed = True
        while changed:
            changed = False
            for name in reachable - finishing:
                successors = self._successors(name)
                if END in successors or successors & finishing:
                    finishing.add(name)
                    changed = True

        problems = []
        for name in self._nodes:
            if name not in reachable:
                problems.append(f"Node '{name}' is unreachable from the entry point")
        for name in sorted(reachable - finishing):
            problems.append(f"Node '{name}' can never reach END")
        return problems


__all__ = ["END", "START", "StateGraph"]
