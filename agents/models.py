import logging
from typing import Dict, Tuple

from langchain_google_genai import ChatGoogleGenerativeAI

from config import SEARCH_MODEL, SUPERVISOR_MODEL, WORKER_MODEL, get_gemini_api_key


logger = logging.getLogger(__name__)


_models: Dict[Tuple[str, float], ChatGoogleGenerativeAI] = {}


def get_chat_model(model: str, temperature: float = 0.0) -> ChatGoogleGenerativeAI:
    """Return a shared Gemini chat model, created on first use."""
    key = (model, temperature)
    if key not in _models:
        logger.info("Creating Gemini chat model %s (temperature=%s)", model, temperature)
        _models[key] = ChatGoogleGenerativeAI(
            model=model,
            api_key=get_gemini_api_key(),
            temperature=temperature,
        )
    return _models[key]


def get_supervisor_model() -> ChatGoogleGenerativeAI:
    return get_chat_model(SUPERVISOR_MODEL, temperature=0.0)


def get_worker_model() -> ChatGoogleGenerativeAI:
    return get_chat_model(WORKER_MODEL, temperature=0.3)


def get_search_model() -> ChatGoogleGenerativeAI:
    return get_chat_model(SEARCH_MODEL, temperature=0.0)


__all__ = [
    "get_chat_model",
    "get_search_model",
    "get_supervisor_model",
    "get_worker_model",
]
