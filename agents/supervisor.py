import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Literal, Mapping, Optional, Protocol, Sequence

from langchain_core.exceptions import OutputParserException
from langchain_core.messages import BaseMessage, HumanMessage, SystemMessage
from pydantic import BaseModel, Field, ValidationError, create_model

from stategraph import OracleContractError
from utils.prompts import ROUTE_SELECTION_PROMPT, ROUTE_TOPIC_SELECTION_PROMPT


logger = logging.getLogger(__name__)


FINISH = "FINISH"
NO_TOPIC = "NONE"


@dataclass(frozen=True)
class DecisionRequest:
    """Everything a decision oracle is allowed to see for one routing decision."""

    conversation: Sequence[BaseMessage]
    options: Sequence[str]
    guidance: str
    topics: Optional[Sequence[str]] = None


class RouteDecision(BaseModel):
    reasoning: str = ""
    next: str
    instructions: str
    topic: Optional[str] = None


class DecisionOracle(Protocol):
    def decide(self, request: DecisionRequest) -> Any: ...


def build_route_model(options: Sequence[str], topics: Optional[Sequence[str]] = None) -> type:
    """
    Build the structured-output schema for a routing decision.

    `next` (and `topic`, when topics are in play) are Literal enumerations so
    the model is asked to answer from the legal set only.
    """
    fields: Dict[str, Any] = {
        "reasoning": (str, Field(description="Why this actor should act next.")),
        "next": (Literal[tuple(options)], Field(description="The specific actor to act next.")),
        "instructions": (
            str,
            Field(
                description="The specific instructions of the sub-task the next role should accomplish."
            ),
        ),
    }
    if topics is not None:
        fields["topic"] = (
            Literal[tuple([NO_TOPIC, *topics])],
            Field(description="The specific topic the next role should work on."),
        )
    return create_model("route", __doc__="Select the next role.", **fields)


class ChatModelOracle:
    """Decision oracle backed by a chat model with structured output."""

    def __init__(self, llm):
        self.llm = llm

    def _build_messages(self, request: DecisionRequest) -> List[BaseMessage]:
        if request.topics is not None:
            selection = ROUTE_TOPIC_SELECTION_PROMPT.format(
                options=", ".join(request.options),
                topics=", ".join([NO_TOPIC, *request.topics]),
            )
        else:
            selection = ROUTE_SELECTION_PROMPT.format(options=", ".join(request.options))
        return (
            [SystemMessage(content=request.guidance)]
            + list(request.conversation)
            + [HumanMessage(content=selection)]
        )

    def decide(self, request: DecisionRequest) -> Any:
        route_model = build_route_model(request.options, request.topics)
        messages = self._build_messages(request)
        logger.debug("Supervisor prompt messages: %s", messages)
        try:
            return self.llm.with_structured_output(route_model).invoke(messages)
        except (ValidationError, OutputParserException) as exc:
            logger.error("Oracle response did not match the route schema: %s", exc)
            raise OracleContractError(f"Oracle response did not match the route schema: {exc}") from exc


class TeamSupervisor:
    """
    Node handler that delegates the next-actor decision to an oracle.

    The answer must name one of `options` ("FINISH" plus the members) and,
    when `topics_channel` is set, one of "NONE" plus the topics currently in
    that channel. Anything else fails with OracleContractError; no fallback
    actor is ever substituted.
    """

    def __init__(
        self,
        oracle: DecisionOracle,
        system_prompt: str,
        members: Sequence[str],
        topics_channel: Optional[str] = None,
    ):
        if FINISH in members:
            raise ValueError(f"'{FINISH}' cannot be a team member name")
        self.oracle = oracle
        self.system_prompt = system_prompt
        self.members = list(members)
        self.options = [FINISH, *self.members]
        self.topics_channel = topics_channel

    def _known_topics(self, state: Mapping[str, Any]) -> Optional[List[str]]:
        if self.topics_channel is None:
            return None
        topics: List[str] = []
        for topic in state.get(self.topics_channel) or []:
            if topic not in topics:
                topics.append(topic)
        return topics

    def build_request(self, state: Mapping[str, Any]) -> DecisionRequest:
        guidance = self.system_prompt.format(
            team_members=", ".join(self.members),
            topic=state.get("topic") or "the user's request",
        )
        return DecisionRequest(
            conversation=list(state.get("messages") or []),
            options=list(self.options),
            guidance=guidance,
            topics=self._known_topics(state),
        )

    def _validate(self, answer: Any, request: DecisionRequest) -> Dict[str, Any]:
        if isinstance(answer, BaseModel):
            data = answer.model_dump()
        elif isinstance(answer, Mapping):
            data = dict(answer)
        else:
            raise OracleContractError(
                f"Oracle returned {type(answer).__name__}, expected a route decision"
            )

        next_actor = data.get("next")
        if next_actor not in request.options:
            raise OracleContractError(
                f"Oracle chose {next_actor!r}; legal choices are {', '.join(request.options)}"
            )
        instructions = data.get("instructions")
        if not isinstance(instructions, str):
            raise OracleContractError("Oracle answer is missing string instructions")

        update: Dict[str, Any] = {"next": next_actor, "instructions": instructions}
        if request.topics is not None:
            topic = data.get("topic")
            legal_topics = [NO_TOPIC, *request.topics]
            if topic not in legal_topics:
                raise OracleContractError(
                    f"Oracle chose topic {topic!r}; legal topics are {', '.join(legal_topics)}"
                )
            update["topic"] = "" if topic == NO_TOPIC else topic
        return update

    def __call__(self, state: Mapping[str, Any]) -> Dict[str, Any]:
        request = self.build_request(state)
        answer = self.oracle.decide(request)
        update = self._validate(answer, request)
        logger.info(
            "Supervisor decision: next=%s, topic=%s, instructions=%s",
            update["next"],
            update.get("topic"),
            update["instructions"],
        )
        return update


def create_team_supervisor(
    oracle: DecisionOracle,
    system_prompt: str,
    members: Sequence[str],
    topics_channel: Optional[str] = None,
) -> TeamSupervisor:
    return TeamSupervisor(oracle, system_prompt, members, topics_channel=topics_channel)


def route_by_next(state: Mapping[str, Any]) -> str:
    """Router for supervisor conditional edges: the actor named in `next`."""
    return state.get("next")


__all__ = [
    "FINISH",
    "NO_TOPIC",
    "ChatModelOracle",
    "DecisionOracle",
    "DecisionRequest",
    "RouteDecision",
    "TeamSupervisor",
    "build_route_model",
    "create_team_supervisor",
    "route_by_next",
]
