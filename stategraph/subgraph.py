from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Callable, Dict, Mapping, Optional


if TYPE_CHECKING:
    from .engine import CompiledGraph


logger = logging.getLogger(__name__)


InputAdapter = Callable[[Mapping[str, Any]], Mapping[str, Any]]
OutputAdapter = Callable[[Mapping[str, Any]], Mapping[str, Any]]


class SubgraphNode:
    """
    Presents a compiled graph as a single node of an enclosing graph.

    - `input_adapter` shapes the outer state into the inner run's initial state.
    - The inner run executes to completion with its own step limit; its
      intermediate steps are logged but never reach the outer stream.
    - `output_adapter` collapses the inner final state into one outer
      partial update.

    An inner failure propagates out of the handler and fails the wrapping node.
    """

    def __init__(
        self,
        graph: "CompiledGraph",
        input_adapter: InputAdapter,
        output_adapter: OutputAdapter,
        step_limit: Optional[int] = None,
        name: Optional[str] = None,
    ):
        self.graph = graph
        self.input_adapter = input_adapter
        self.output_adapter = output_adapter
        self.step_limit = step_limit
        self.name = name or graph.name

    def __call__(self, state: Mapping[str, Any]) -> Dict[str, Any]:
        inner_input = self.input_adapter(state)
        logger.info("Entering subgraph %s", self.name)

        def _log_inner_step(snapshot) -> None:
            logger.debug("[%s] step %s at '%s'", self.name, snapshot.step, snapshot.node)

        final_state = self.graph.invoke(
            inner_input,
            step_limit=self.step_limit,
            on_step=_log_inner_step,
        )
        logger.info("Subgraph %s finished", self.name)
        return dict(self.output_adapter(final_state))

    def __repr__(self) -> str:
        return f"SubgraphNode({self.name!r})"


def select_channels(*names: str) -> InputAdapter:
    """Input adapter that copies only the named channels into the inner run."""

    def _select(state: Mapping[str, Any]) -> Dict[str, Any]:
        return {name: state[name] for name in names if name in state}

    return _select


def last_message(channel: str = "messages") -> OutputAdapter:
    """Output adapter that reports only the final entry of an append channel."""

    def _collapse(state: Mapping[str, Any]) -> Dict[str, Any]:
        entries = list(state.get(channel) or [])
        return {channel: entries[-1:]}

    return _collapse


__all__ = ["InputAdapter", "OutputAdapter", "SubgraphNode", "last_message", "select_channels"]
