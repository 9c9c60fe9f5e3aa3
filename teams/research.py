import logging
from typing import Optional

from langchain_core.tools import BaseTool

from agents.models import get_search_model, get_supervisor_model, get_worker_model
from agents.supervisor import ChatModelOracle, DecisionOracle, create_team_supervisor
from agents.workers import create_agent_node, create_brainstormer_node, create_search_node
from stategraph import CompiledGraph
from teams.builder import build_team_graph
from teams.state import ResearchTeamState
from utils.prompts import RESEARCH_SUPERVISOR_PROMPT, SCRAPER_WORKER_PROMPT


logger = logging.getLogger(__name__)


BRAINSTORMER = "Brainstormer"
SEARCH = "Search"
WEB_SCRAPER = "WebScraper"


def build_research_team(
    llm=None,
    search_llm=None,
    oracle: Optional[DecisionOracle] = None,
    scrape_tool: Optional[BaseTool] = None,
    step_limit: Optional[int] = None,
) -> CompiledGraph:
    """
    Research team: a topic-aware supervisor over Brainstormer, Search and
    (when a scrape tool is supplied) WebScraper.

    The supervisor picks the next topic from the queries the Brainstormer has
    accumulated in `brainstormed_queries`.
    """
    llm = llm or get_worker_model()
    search_llm = search_llm or get_search_model()
    oracle = oracle or ChatModelOracle(get_supervisor_model())

    members = [BRAINSTORMER, SEARCH]
    if scrape_tool is not None:
        members.append(WEB_SCRAPER)

    workers = {
        BRAINSTORMER: create_brainstormer_node(llm, name=BRAINSTORMER),
        SEARCH: create_search_node(search_llm, name=SEARCH),
    }
    if scrape_tool is not None:
        workers[WEB_SCRAPER] = create_agent_node(
            llm,
            name=WEB_SCRAPER,
            system_prompt=SCRAPER_WORKER_PROMPT,
            tools=[scrape_tool],
            team_members=members,
        )
    else:
        logger.info("No scrape tool supplied; research team runs without %s.", WEB_SCRAPER)

    supervisor = create_team_supervisor(
        oracle,
        RESEARCH_SUPERVISOR_PROMPT,
        members,
        topics_channel="brainstormed_queries",
    )
    return build_team_graph(
        ResearchTeamState,
        supervisor,
        workers,
        step_limit=step_limit,
        name="ResearchTeam",
    )


__all__ = ["BRAINSTORMER", "SEARCH", "WEB_SCRAPER", "build_research_team"]
