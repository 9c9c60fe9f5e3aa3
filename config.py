import logging
import os
from pathlib import Path

from dotenv import load_dotenv

from stategraph import DEFAULT_STEP_LIMIT, default_step_limit


logger = logging.getLogger(__name__)


load_dotenv()


SUPERVISOR_MODEL = os.getenv("SUPERVISOR_MODEL", "gemini-2.0-flash")
WORKER_MODEL = os.getenv("WORKER_MODEL", "gemini-2.0-flash")
SEARCH_MODEL = os.getenv("SEARCH_MODEL", "gemini-2.5-flash")


def get_gemini_api_key() -> str:
    """
    Return the GEMINI_API_KEY from the environment.

    python-dotenv populates the environment at import time; nothing else reads
    the .env file directly.
    """
    api_key = os.getenv("GEMINI_API_KEY")
    if not api_key:
        logger.error("GEMINI_API_KEY environment variable is not set.")
        raise RuntimeError("GEMINI_API_KEY environment variable is required to use Gemini.")
    return api_key


def get_step_limit() -> int:
    """
    Default per-run step limit, overridable with TEAMGRAPH_STEP_LIMIT.

    Read after load_dotenv(), so a value in .env applies too.
    """
    return default_step_limit()


def get_workspace_dir() -> Path:
    """Directory the document team reads and writes, from TEAMGRAPH_WORKSPACE."""
    return Path(os.getenv("TEAMGRAPH_WORKSPACE", "workspace")).resolve()
