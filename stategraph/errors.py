from __future__ import annotations

from types import MappingProxyType
from typing import Any, Iterable, List, Mapping, Optional


class GraphError(Exception):
    """Base class for every error raised by the state-graph engine."""


class ConfigurationError(GraphError):
    """A channel schema or initial state is invalid."""


class GraphDefinitionError(ConfigurationError):
    """
    The graph definition cannot be compiled.

    `problems` lists every issue found, so a single compile reports all of
    them at once.
    """

    def __init__(self, problems: Iterable[str]):
        self.problems: List[str] = list(problems)
        super().__init__("Invalid graph: " + "; ".join(self.problems))


class GraphRunError(GraphError):
    """
    Base class for failures that terminate a run.

    The engine fills in `node`, `step` and `last_state` before the error
    reaches the caller. `last_state` is the last state that was fully merged,
    never a half-applied update.
    """

    def __init__(
        self,
        message: str,
        *,
        node: Optional[str] = None,
        step: Optional[int] = None,
        last_state: Optional[Mapping[str, Any]] = None,
    ):
        super().__init__(message)
        self.node = node
        self.step = step
        self.last_state = last_state
        self.inner: Optional[GraphRunError] = None

    def annotate(self, node: str, step: int, last_state: Mapping[str, Any]) -> None:
        if self.node is None:
            self.node = node
        self.step = step
        self.last_state = MappingProxyType(dict(last_state))

    @property
    def annotated(self) -> bool:
        return self.last_state is not None

    def nested_in(self, node: str) -> "GraphRunError":
        """
        Re-issue an error from a nested run as the failure of the enclosing
        `node`, keeping its class so callers still see the same error kind.
        The nested error stays reachable as `inner`.
        """
        outer = type(self).__new__(type(self))
        outer.args = self.args
        outer.__dict__.update(self.__dict__)
        outer.node = node
        outer.step = None
        outer.last_state = None
        outer.inner = self
        return outer


class RoutingError(GraphRunError):
    """A conditional router produced a key absent from its mapping."""

    def __init__(self, node: str, key: Any):
        super().__init__(
            f"Router for node '{node}' returned unmapped key {key!r}", node=node
        )
        self.key = key


class OracleContractError(GraphRunError):
    """A decision oracle answered outside its enumerated contract."""


class RecursionLimitExceeded(GraphRunError):
    """The run reached its step limit without reaching the terminal marker."""

    def __init__(self, step_limit: int, node: Optional[str] = None):
        super().__init__(
            f"Step limit of {step_limit} reached without hitting END", node=node
        )
        self.step_limit = step_limit


class HandlerError(GraphRunError):
    """A node handler failed; the original exception is the `__cause__`."""


__all__ = [
    "ConfigurationError",
    "GraphDefinitionError",
    "GraphError",
    "GraphRunError",
    "HandlerError",
    "OracleContractError",
    "RecursionLimitExceeded",
    "RoutingError",
]
