"""
Demo script: runs the hierarchical research/writing teams against Gemini.

Requires GEMINI_API_KEY in .env. Builds both teams and the top-level graph,
then streams one request, printing every top-level step as it happens.

Usage:
    python demo.py ["your request"]
"""

from __future__ import annotations

import logging
import sys

from config import get_step_limit, get_workspace_dir
from stategraph import GraphRunError, RecursionLimitExceeded
from teams.document import build_document_team
from teams.hierarchy import build_hierarchy
from teams.research import build_research_team
from teams.state import HumanMessage
from utils.workspace import Workspace


# ANSI colors
GREEN = "\033[92m"
CYAN = "\033[96m"
YELLOW = "\033[93m"
BOLD = "\033[1m"
RESET = "\033[0m"

MAX_RESPONSE_LEN = 500

DEFAULT_REQUEST = (
    "Create a comprehensive overview of what tax sales are in Tarrant county TX "
    "and what the process is to buy property."
)


def _configure_logging() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
    )


def _truncate(text: str) -> str:
    text = text.strip()
    if len(text) > MAX_RESPONSE_LEN:
        return text[:MAX_RESPONSE_LEN] + "..."
    return text


def _print_step(snapshot) -> None:
    print(f"{CYAN}{BOLD}Step {snapshot.step}: {snapshot.node}{RESET}")
    for key, value in snapshot.delta.items():
        if key == "messages":
            for message in value:
                sender = getattr(message, "name", None) or message.type
                print(f"  {GREEN}{sender}:{RESET} {_truncate(str(message.content))}")
        else:
            print(f"  {key}={value!r}")
    print("---")


def main() -> int:
    _configure_logging()
    request = " ".join(sys.argv[1:]) or DEFAULT_REQUEST

    print(f"{BOLD}Building teams...{RESET}")
    workspace = Workspace(get_workspace_dir())
    graph = build_hierarchy(
        research_team=build_research_team(),
        document_team=build_document_team(workspace=workspace),
    )
    print(f"{BOLD}Graph built.{RESET}")
    print(f"{GREEN}{BOLD}User request:{RESET} {GREEN}{request}{RESET}\n")

    run = graph.stream(
        {"messages": [HumanMessage(content=request)]},
        step_limit=get_step_limit(),
    )
    try:
        for snapshot in run:
            _print_step(snapshot)
    except RecursionLimitExceeded as exc:
        print(f"\n{YELLOW}Ran out of steps: {exc}{RESET}")
        return 2
    except GraphRunError as exc:
        print(f"\n{YELLOW}Run failed at {exc.node}: {exc}{RESET}")
        return 1

    messages = run.state.get("messages") or []
    if messages:
        print(f"\n{BOLD}Final message:{RESET}\n{_truncate(str(messages[-1].content))}")
    print(f"\nFiles in {workspace.root}: {', '.join(workspace.list_files()) or '(none)'}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
