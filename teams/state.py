from __future__ import annotations

from typing import Annotated, List, TypedDict

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage

from stategraph import append, channel, override_if_present


class ResearchTeamState(TypedDict, total=False):
    """
    State shared by the research team.

    - `messages` and `brainstormed_queries` are append channels.
    - `next`, `instructions` and `topic` are routing-control channels written
      by the supervisor with override-if-present semantics.
    """

    messages: Annotated[List[BaseMessage], channel(append, list)]
    team_members: Annotated[List[str], channel(append, list)]
    brainstormed_queries: Annotated[List[str], channel(append, list)]
    next: Annotated[str, channel(override_if_present, lambda: "supervisor")]
    instructions: Annotated[
        str, channel(override_if_present, lambda: "Thoroughly research the current topic.")
    ]
    topic: Annotated[str, channel(override_if_present, str)]


class DocWritingState(TypedDict, total=False):
    messages: Annotated[List[BaseMessage], channel(append, list)]
    team_members: Annotated[List[str], channel(append, list)]
    next: Annotated[str, channel(override_if_present, lambda: "supervisor")]
    # Latest workspace listing, as shown in the writers' prompts.
    current_files: Annotated[str, channel(override_if_present, lambda: "No files written.")]
    instructions: Annotated[
        str, channel(override_if_present, lambda: "Solve the human's question.")
    ]


class TopLevelState(TypedDict, total=False):
    messages: Annotated[List[BaseMessage], channel(append, list)]
    next: Annotated[str, channel(override_if_present, lambda: "ResearchTeam")]
    instructions: Annotated[
        str, channel(override_if_present, lambda: "Resolve the user's request.")
    ]


__all__ = [
    "AIMessage",
    "BaseMessage",
    "DocWritingState",
    "HumanMessage",
    "ResearchTeamState",
    "TopLevelState",
]
