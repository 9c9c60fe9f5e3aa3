import logging
from typing import Any, Callable, Dict, Mapping, Optional

from agents.models import get_supervisor_model, get_worker_model
from agents.supervisor import ChatModelOracle, DecisionOracle, create_team_supervisor
from agents.workers import create_agent_node
from config import get_workspace_dir
from stategraph import CompiledGraph
from teams.builder import build_team_graph
from teams.state import DocWritingState
from utils.prompts import (
    CHART_GENERATOR_PROMPT,
    DOC_WRITER_PROMPT,
    DOCUMENT_SUPERVISOR_PROMPT,
    NOTE_TAKER_PROMPT,
)
from utils.workspace import Workspace, make_document_tools


logger = logging.getLogger(__name__)


DOC_WRITER = "DocWriter"
NOTE_TAKER = "NoteTaker"
CHART_GENERATOR = "ChartGenerator"

DOC_TEAM_MEMBERS = [DOC_WRITER, NOTE_TAKER, CHART_GENERATOR]


def _with_file_listing(
    handler: Callable[[Mapping[str, Any]], Dict[str, Any]],
    workspace: Workspace,
) -> Callable[[Mapping[str, Any]], Dict[str, Any]]:
    """
    Run a worker with `current_files` set to the workspace listing, and
    record the listing in the channel when the worker changed it.
    """

    def run_with_listing(state: Mapping[str, Any]) -> Dict[str, Any]:
        update = dict(handler({**state, "current_files": workspace.describe_files()}))
        listing = workspace.describe_files()
        if listing != state.get("current_files"):
            logger.info("Workspace listing changed: %s", workspace.list_files())
            update["current_files"] = listing
        return update

    return run_with_listing


def build_document_team(
    llm=None,
    oracle: Optional[DecisionOracle] = None,
    workspace: Optional[Workspace] = None,
    step_limit: Optional[int] = None,
) -> CompiledGraph:
    """
    Document writing team: DocWriter, NoteTaker and ChartGenerator working
    in a shared workspace directory.

    Each worker's prompt lists the files currently in the workspace.
    """
    llm = llm or get_worker_model()
    oracle = oracle or ChatModelOracle(get_supervisor_model())
    workspace = workspace or Workspace(get_workspace_dir())
    workspace.ensure()
    tools = make_document_tools(workspace)

    def files_context(state: Mapping[str, Any]) -> Dict[str, str]:
        return {"current_files": state["current_files"]}

    worker_tools = {
        DOC_WRITER: (
            DOC_WRITER_PROMPT,
            [tools["write_document"], tools["edit_document"], tools["read_document"]],
        ),
        NOTE_TAKER: (NOTE_TAKER_PROMPT, [tools["create_outline"], tools["read_document"]]),
        CHART_GENERATOR: (CHART_GENERATOR_PROMPT, [tools["read_document"]]),
    }

    workers = {}
    for name, (prompt, member_tools) in worker_tools.items():
        handler = create_agent_node(
            llm,
            name=name,
            system_prompt=prompt,
            tools=member_tools,
            team_members=DOC_TEAM_MEMBERS,
            context=files_context,
        )
        workers[name] = _with_file_listing(handler, workspace)

    supervisor = create_team_supervisor(oracle, DOCUMENT_SUPERVISOR_PROMPT, DOC_TEAM_MEMBERS)
    return build_team_graph(
        DocWritingState,
        supervisor,
        workers,
        step_limit=step_limit,
        name="PaperWritingTeam",
    )


__all__ = [
    "CHART_GENERATOR",
    "DOC_TEAM_MEMBERS",
    "DOC_WRITER",
    "NOTE_TAKER",
    "build_document_team",
]
