import logging
from typing import Any, List

import pytest


logger = logging.getLogger(__name__)


class ScriptedOracle:
    """Decision oracle that replays a fixed list of answers and records requests."""

    def __init__(self, answers: List[Any]):
        self.answers = list(answers)
        self.requests = []

    def decide(self, request):
        self.requests.append(request)
        if not self.answers:
            raise AssertionError("ScriptedOracle ran out of answers")
        answer = self.answers.pop(0)
        if isinstance(answer, str):
            return {"next": answer, "instructions": f"go {answer}"}
        return answer


class CyclingOracle:
    """Decision oracle that never finishes, alternating between workers."""

    def __init__(self, workers: List[str]):
        self.workers = list(workers)
        self.calls = 0

    def decide(self, request):
        worker = self.workers[self.calls % len(self.workers)]
        self.calls += 1
        return {"next": worker, "instructions": "keep going"}


@pytest.fixture
def scripted_oracle():
    return ScriptedOracle


@pytest.fixture
def cycling_oracle():
    return CyclingOracle
