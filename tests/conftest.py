"""
Shared test fixtures for CaptionGenie tests.
Points the data dir at a temp folder so tests never touch real history/preferences,
and provides an in-memory fake of the Gemini gateway.
"""
import asyncio
import io
import pathlib
import sys

import pytest
from PIL import Image

# Ensure project root is on path
_root = pathlib.Path(__file__).resolve().parent.parent
sys.path.insert(0, str(_root))

from core.errors import GenerationError  # noqa: E402
from core.models import (  # noqa: E402
    GeneratedContent,
    InputSeoAnalysis,
    RewriteResult,
)


@pytest.fixture(autouse=True)
def _isolated_settings(tmp_path, monkeypatch):
    """Fresh settings per test, data dir under tmp_path, no real API key."""
    from core import config

    monkeypatch.setenv("CAPTIONGENIE_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("GEMINI_API_KEY", "")
    monkeypatch.delenv("API_KEY", raising=False)
    monkeypatch.delenv("CAPTIONGENIE_THEME", raising=False)
    monkeypatch.delenv("CAPTIONGENIE_ENV", raising=False)
    config.reset_settings()
    yield
    config.reset_settings()


def make_content(**overrides) -> GeneratedContent:
    data = {
        "caption": "Mornings taste better with fresh beans ☕",
        "hashtags": {
            "broad": ["coffee", "#morning"],
            "niche": ["homebarista", "Coffee"],
            "trending": ["mondaymotivation"],
        },
        "title": "Brew Better",
        "postingTimes": ["Tuesday at 8:00 AM EST", "Thursday at 12:00 PM EST"],
        "seoInsights": {
            "score": 78,
            "keywords": ["coffee", "morning routine"],
            "suggestions": ["Add a question to invite comments"],
        },
    }
    data.update(overrides)
    return GeneratedContent.model_validate(data)


class FakeGateway:
    """Records calls; `fail` names the operations that raise GenerationError."""

    def __init__(self, content=None, seo=None, rewrite=None, fail=(), delay=0.0):
        self.content = content or make_content()
        self.seo = seo or InputSeoAnalysis(
            score=64, keywords=["coffee"], suggestions=["Be specific"], emotional_power="Medium",
        )
        self.rewrite = rewrite or RewriteResult(rewritten_text="Discover the best fresh coffee for busy mornings!")
        self.fail = set(fail)
        self.delay = delay
        self.events: list[str] = []
        self.calls: list[tuple[str, object]] = []

    async def _step(self, name: str, arg):
        self.calls.append((name, arg))
        self.events.append(f"{name}:start")
        if self.delay:
            await asyncio.sleep(self.delay)
        self.events.append(f"{name}:end")
        if name in self.fail:
            raise GenerationError(f"{name} boom")

    async def generate_caption(self, request):
        await self._step("caption", request)
        return self.content

    async def analyze_input_for_seo(self, text):
        await self._step("seo", text)
        return self.seo

    async def rewrite_text_for_seo(self, text):
        await self._step("rewrite", text)
        return self.rewrite


@pytest.fixture
def sample_content():
    return make_content()


@pytest.fixture
def content_factory():
    return make_content


@pytest.fixture
def fake_gateway():
    return FakeGateway


@pytest.fixture
def png_bytes():
    """A small real 200x120 PNG."""
    buf = io.BytesIO()
    Image.new("RGB", (200, 120), color="blue").save(buf, "PNG")
    return buf.getvalue()
