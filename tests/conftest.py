# tests/conftest.py
import os
import sys

import pytest

# Ensure repository root is on PYTHONPATH for tests
repo_root = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
if repo_root not in sys.path:
    sys.path.insert(0, repo_root)

# Keep the missing-key warning quiet and avoid writing a log file during tests
os.environ.setdefault("GROQ_API_KEY", "test-key")
os.environ.setdefault("LOG_FILE", "")

from models import StoryMeta  # noqa: E402
from rubric_constants import ITEM_NAMES  # noqa: E402

SAMPLE_SCORES = [8.5, 7.0, 9.0, 6.5, 7.5, 8.0, 7.0, 9.5, 8.0, 9.0, 7.5, 8.5, 9.5, 8.0]


def numbered_scoring_text(scores, skip=()):
    """Evaluator output in the ``01. 項目：8.5`` format, omitting ``skip`` indices."""
    return "\n".join(
        f"{i:02d}. {name}：{score}"
        for i, (name, score) in enumerate(zip(ITEM_NAMES, scores), start=1)
        if i - 1 not in skip
    )


class FakeClock:
    """Records requested waits instead of sleeping."""

    def __init__(self) -> None:
        self.sleeps: list[float] = []

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)


class FakeLLM:
    """Returns scripted replies in order; exceptions in the script are raised."""

    def __init__(self, replies=None, default: str = "ok"):
        self.replies = list(replies or [])
        self.default = default
        self.prompts: list[str] = []
        self.models: list[str | None] = []

    async def async_call_llm(self, prompt, model_name=None):
        self.prompts.append(prompt)
        self.models.append(model_name)
        reply = self.replies.pop(0) if self.replies else self.default
        if isinstance(reply, BaseException):
            raise reply
        if isinstance(reply, tuple):
            return reply
        return reply, {"completion_tokens": 10, "total_tokens": 20}


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def story_meta():
    return StoryMeta(
        protagonist="ミナ",
        genre="ファンタジー",
        theme="喪失と再生",
        symbols="灯台",
        key_characters="ミナ、カイ",
    )


@pytest.fixture
def sample_scores():
    return list(SAMPLE_SCORES)
