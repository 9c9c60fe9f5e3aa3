import logging
from typing import Any, Dict, List, Mapping, Optional

from agents.models import get_supervisor_model
from agents.supervisor import ChatModelOracle, DecisionOracle, create_team_supervisor
from stategraph import CompiledGraph, last_message
from teams.builder import build_team_graph
from teams.document import DOC_TEAM_MEMBERS
from teams.state import TopLevelState
from utils.prompts import TOP_LEVEL_SUPERVISOR_PROMPT


logger = logging.getLogger(__name__)


RESEARCH_TEAM = "ResearchTeam"
PAPER_WRITING_TEAM = "PaperWritingTeam"

TOP_LEVEL_MEMBERS = [RESEARCH_TEAM, PAPER_WRITING_TEAM]


def enter_team(team_members: Optional[List[str]] = None):
    """Input adapter: a team starts from the conversation only."""

    def _enter(state: Mapping[str, Any]) -> Dict[str, Any]:
        inner: Dict[str, Any] = {"messages": list(state.get("messages") or [])}
        if team_members:
            inner["team_members"] = list(team_members)
        return inner

    return _enter


def build_hierarchy(
    research_team: CompiledGraph,
    document_team: CompiledGraph,
    oracle: Optional[DecisionOracle] = None,
    step_limit: Optional[int] = None,
) -> CompiledGraph:
    """
    Top-level graph: a supervisor routing between the research and paper
    writing teams, each embedded as a single node.

    Only the last message of a team's run is reported back to the top level.
    """
    oracle = oracle or ChatModelOracle(get_supervisor_model())
    supervisor = create_team_supervisor(oracle, TOP_LEVEL_SUPERVISOR_PROMPT, TOP_LEVEL_MEMBERS)

    workers = {
        RESEARCH_TEAM: research_team.as_node(
            enter_team(),
            last_message(),
            name=RESEARCH_TEAM,
        ),
        PAPER_WRITING_TEAM: document_team.as_node(
            enter_team(DOC_TEAM_MEMBERS),
            last_message(),
            name=PAPER_WRITING_TEAM,
        ),
    }
    return build_team_graph(
        TopLevelState,
        supervisor,
        workers,
        step_limit=step_limit,
        name="TopLevel",
    )


__all__ = [
    "PAPER_WRITING_TEAM",
    "RESEARCH_TEAM",
    "TOP_LEVEL_MEMBERS",
    "build_hierarchy",
    "enter_team",
]
