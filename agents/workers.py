import logging
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from langchain_core.messages import (
    AIMessage,
    BaseMessage,
    HumanMessage,
    SystemMessage,
    ToolMessage,
)
from langchain_core.tools import BaseTool
from pydantic import BaseModel, Field

from utils.prompts import (
    BRAINSTORM_PROMPT,
    SEARCH_WORKER_PROMPT,
    WORKER_INSTRUCTIONS,
    WORKER_PREAMBLE,
)


logger = logging.getLogger(__name__)


Handler = Callable[[Mapping[str, Any]], Dict[str, Any]]


def message_text(response: Any) -> str:
    """Extract plain text from a chat model response."""
    if not isinstance(response, AIMessage):
        logger.error("Unexpected response type from model: %s", type(response))
        raise RuntimeError("Unexpected response type from model.")

    content = response.content
    if isinstance(content, str):
        return content.strip()

    text_blocks = []
    if isinstance(content, list):
        for block in content:
            if isinstance(block, str):
                text_blocks.append(block)
            elif isinstance(block, dict):
                value = block.get("text")
                if isinstance(value, str):
                    text_blocks.append(value)
    return "\n".join(text_blocks).strip()


def build_worker_messages(
    system_prompt: str,
    state: Mapping[str, Any],
    tools: Sequence[BaseTool],
    team_members: Sequence[str],
) -> List[BaseMessage]:
    preamble = SystemMessage(
        content=WORKER_PREAMBLE.format(
            system_prompt=system_prompt,
            team_members=", ".join(team_members),
        )
    )
    closing = HumanMessage(
        content=WORKER_INSTRUCTIONS.format(
            instructions=state.get("instructions") or "",
            tool_names=", ".join(t.name for t in tools) or "none",
        )
    )
    return [preamble] + list(state.get("messages") or []) + [closing]


def _run_tool_call(tools_by_name: Mapping[str, BaseTool], tool_call: Mapping[str, Any]) -> ToolMessage:
    selected = tools_by_name.get(tool_call["name"])
    if selected is None:
        return ToolMessage(
            content=f"Error: unknown tool {tool_call['name']!r}",
            tool_call_id=tool_call["id"],
            status="error",
        )
    try:
        return selected.invoke({**tool_call, "type": "tool_call"})
    except Exception as exc:
        # Reported back to the model so it can correct the call.
        logger.warning("Tool %s failed: %s", tool_call["name"], exc)
        return ToolMessage(
            content=f"Error: {exc}",
            tool_call_id=tool_call["id"],
            status="error",
        )


def create_agent_node(
    llm,
    name: str,
    system_prompt: str,
    tools: Sequence[BaseTool],
    team_members: Sequence[str],
    max_tool_rounds: int = 5,
    context: Optional[Callable[[Mapping[str, Any]], Mapping[str, Any]]] = None,
) -> Handler:
    """
    Worker that answers with a bounded tool-calling loop.

    - `system_prompt` may contain placeholders filled from `context(state)`.
    - The team roster comes from the `team_members` channel when the state
      carries one, else from `team_members`.
    - Tool calls are executed and fed back until the model answers in plain
      text or `max_tool_rounds` is exhausted (RuntimeError).
    - The answer is appended to `messages` as a HumanMessage named after the
      worker, so the supervisor sees who reported it.
    """
    tools = list(tools)
    tools_by_name = {t.name: t for t in tools}

    def run_agent(state: Mapping[str, Any]) -> Dict[str, Any]:
        logger.info("Running worker %s.", name)
        prompt = system_prompt.format(**context(state)) if context else system_prompt
        members = state.get("team_members") or team_members
        messages = build_worker_messages(prompt, state, tools, members)
        model = llm.bind_tools(tools) if tools else llm

        for round_number in range(max_tool_rounds + 1):
            response = model.invoke(messages)
            tool_calls = getattr(response, "tool_calls", None) or []
            if not tool_calls:
                text = message_text(response)
                if not text:
                    logger.error("Empty response from worker %s.", name)
                    raise RuntimeError(f"Worker {name} produced an empty response.")
                logger.debug("Worker %s answered: %s", name, text)
                return {"messages": [HumanMessage(content=text, name=name)]}

            logger.info(
                "Worker %s requested tools (round %s): %s",
                name,
                round_number + 1,
                [call["name"] for call in tool_calls],
            )
            messages.append(response)
            for tool_call in tool_calls:
                messages.append(_run_tool_call(tools_by_name, tool_call))

        logger.error("Worker %s exceeded %s tool rounds.", name, max_tool_rounds)
        raise RuntimeError(f"Worker {name} did not finish within {max_tool_rounds} tool rounds.")

    run_agent.__name__ = f"run_{name}"
    return run_agent


def create_search_node(llm, name: str = "Search") -> Handler:
    """Worker that answers with Gemini's built-in Google Search grounding."""

    def run_search(state: Mapping[str, Any]) -> Dict[str, Any]:
        logger.info("Running search worker %s.", name)
        parts = [SEARCH_WORKER_PROMPT]
        if state.get("topic"):
            parts.append(f"Topic: {state['topic']}")
        if state.get("instructions"):
            parts.append(f"Supervisor instructions: {state['instructions']}")
        prompt = [SystemMessage(content="\n\n".join(parts))] + list(state.get("messages") or [])
        if len(prompt) == 1:
            prompt.append(HumanMessage(content=state.get("instructions") or ""))

        response = llm.invoke(prompt, tools=[{"google_search": {}}])
        text = message_text(response)
        if not text:
            logger.error("Empty search results returned from Gemini.")
            raise RuntimeError("Gemini returned empty search results.")

        logger.debug("Search findings: %s", text)
        return {"messages": [HumanMessage(content=text, name=name)]}

    return run_search


class BrainstormResult(BaseModel):
    queries: List[str] = Field(description="Potential research queries for the user topic.")


def create_brainstormer_node(llm, name: str = "Brainstormer") -> Handler:
    """Worker that proposes research queries into `brainstormed_queries`."""

    def run_brainstormer(state: Mapping[str, Any]) -> Dict[str, Any]:
        logger.info("Running brainstormer %s.", name)
        existing = list(state.get("brainstormed_queries") or [])
        request = "Output the field 'queries' containing an array of possible search queries."
        if existing:
            request += "\nAlready brainstormed:\n" + "\n".join(f"- {q}" for q in existing)
        messages = (
            [SystemMessage(content=BRAINSTORM_PROMPT)]
            + list(state.get("messages") or [])
            + [HumanMessage(content=request)]
        )

        result: BrainstormResult = llm.with_structured_output(BrainstormResult).invoke(messages)
        new_queries = []
        for query in result.queries:
            query = query.strip()
            if query and query not in existing and query not in new_queries:
                new_queries.append(query)
        logger.info("Brainstormer proposed %s new queries.", len(new_queries))

        summary = "Brainstormed queries:\n" + "\n".join(f"- {q}" for q in new_queries)
        return {
            "brainstormed_queries": new_queries,
            "messages": [HumanMessage(content=summary, name=name)],
        }

    return run_brainstormer


__all__ = [
    "BrainstormResult",
    "build_worker_messages",
    "create_agent_node",
    "create_brainstormer_node",
    "create_search_node",
    "message_text",
]
