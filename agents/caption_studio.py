"""
Caption Studio — the user-facing flows on top of the Gemini gateway.

Flows:
  generate   : caption (+ concurrent input SEO analysis when auto-optimize
               is on), hashtag cleanup, posting-time fallback, history
  analyze    : standalone SEO analysis of the post idea
  fix        : rewrite the post idea for SEO, then analyze the rewrite
  quick      : local heuristic analysis, no gateway call

Gateway failures are caught here and turned into one user-facing error
string on the studio state; nothing partial is kept from a failed flow.
Only one gateway flow runs at a time: a second request while one is in
flight raises RequestInProgressError.
"""

from __future__ import annotations

import asyncio
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Optional, Protocol

import structlog
from pydantic import ValidationError as PydanticValidationError

from core.errors import GenerationError, RequestInProgressError, ValidationError
from core.history import HistoryStore
from core.models import (
    CaptionRequest,
    GeneratedContent,
    InputSeoAnalysis,
    RewriteResult,
)
from core.text_analyzer import ScoredText, analyze
from core.time_slot_engine import suggest_posting_times
from hashtags.categorized import normalize_hashtags

logger = structlog.get_logger()

MSG_NEED_IDEA_OR_IMAGE = "Please enter a post idea or upload an image."
MSG_NEED_IDEA_ANALYZE = "Please enter a post idea to analyze."
MSG_NEED_IDEA_FIX = "Please enter a post idea to fix."


class Gateway(Protocol):
    async def generate_caption(self, request: CaptionRequest) -> GeneratedContent: ...
    async def analyze_input_for_seo(self, text: str) -> InputSeoAnalysis: ...
    async def rewrite_text_for_seo(self, text: str) -> RewriteResult: ...


@dataclass
class StudioState:
    """What the output panel shows after the last flow."""
    post_idea: str = ""
    generated_content: Optional[GeneratedContent] = None
    input_seo_analysis: Optional[InputSeoAnalysis] = None
    error: Optional[str] = None
    error_kind: Optional[str] = None   # validation | generation
    active_tab: str = "content"        # content | seo

    def to_dict(self) -> dict:
        return {
            "postIdea": self.post_idea,
            "generatedContent": self.generated_content.to_json_dict() if self.generated_content else None,
            "inputSeoAnalysis": self.input_seo_analysis.to_json_dict() if self.input_seo_analysis else None,
            "error": self.error,
            "errorKind": self.error_kind,
            "activeTab": self.active_tab,
        }


@dataclass
class CaptionStudio:
    gateway: Gateway
    history: HistoryStore
    state: StudioState = field(default_factory=StudioState)
    _busy: bool = field(default=False, init=False, repr=False)

    @property
    def busy(self) -> bool:
        return self._busy

    @contextmanager
    def _in_flight(self, flow: str):
        if self._busy:
            logger.warning("studio.request_rejected", flow=flow, reason="in_flight")
            raise RequestInProgressError("A request is already in progress. Please wait for it to finish.")
        self._busy = True
        try:
            yield
        finally:
            self._busy = False

    def _fail(self, kind: str, message: str) -> StudioState:
        self.state.error = message
        self.state.error_kind = kind
        return self.state

    # ── Local ─────────────────────────────────────

    def quick_analysis(self, text: str) -> ScoredText:
        return analyze(text)

    # ── Generate ──────────────────────────────────

    async def generate(self, request: CaptionRequest, auto_optimize_seo: bool = False) -> StudioState:
        with self._in_flight("generate"):
            self.state.post_idea = request.post_idea
            if not request.post_idea.strip() and not request.image:
                return self._fail("validation", MSG_NEED_IDEA_OR_IMAGE)

            self.state.error = None
            self.state.error_kind = None
            self.state.generated_content = None
            self.state.input_seo_analysis = None

            # The SEO half only runs when there is text to analyze
            run_seo = auto_optimize_seo and bool(request.post_idea.strip())
            try:
                if run_seo:
                    content, seo = await asyncio.gather(
                        self.gateway.generate_caption(request),
                        self.gateway.analyze_input_for_seo(request.post_idea),
                    )
                else:
                    content, seo = await self.gateway.generate_caption(request), None
            except GenerationError as e:
                logger.error("studio.generate_failed", error=str(e), auto_seo=run_seo)
                return self._fail("generation", f"Failed to generate content. {e}")

            content = self._finish_content(content, request)
            self.state.generated_content = content
            self.state.input_seo_analysis = seo
            self.state.active_tab = "content"
            preview = request.image.preview if request.image else None
            self.history.add(content, request.post_idea, preview)
            logger.info("studio.generated", platform=request.platform.value, auto_seo=run_seo)
            return self.state

    @staticmethod
    def _finish_content(content: GeneratedContent, request: CaptionRequest) -> GeneratedContent:
        updates: dict = {"hashtags": normalize_hashtags(content.hashtags, request.hashtag_count)}
        if not content.posting_times:
            updates["posting_times"] = suggest_posting_times(request.platform)
        if not request.include_title:
            updates["title"] = None
        elif content.title is not None and not content.title.strip():
            updates["title"] = None
        return content.model_copy(update=updates)

    # ── SEO ───────────────────────────────────────

    async def analyze_seo(self, post_idea: str) -> StudioState:
        with self._in_flight("analyze_seo"):
            self.state.post_idea = post_idea
            if not post_idea.strip():
                return self._fail("validation", MSG_NEED_IDEA_ANALYZE)

            self.state.error = None
            self.state.error_kind = None
            self.state.input_seo_analysis = None
            try:
                analysis = await self.gateway.analyze_input_for_seo(post_idea)
            except GenerationError as e:
                logger.error("studio.analyze_failed", error=str(e))
                return self._fail("generation", f"Failed to analyze SEO. {e}")

            self.state.input_seo_analysis = analysis
            self.state.active_tab = "seo"
            return self.state

    async def fix_seo(self, post_idea: str) -> StudioState:
        """Rewrite the idea for SEO, then analyze the rewritten text (strictly in that order)."""
        with self._in_flight("fix_seo"):
            self.state.post_idea = post_idea
            if not post_idea.strip():
                return self._fail("validation", MSG_NEED_IDEA_FIX)

            self.state.error = None
            self.state.error_kind = None
            self.state.input_seo_analysis = None
            try:
                rewrite = await self.gateway.rewrite_text_for_seo(post_idea)
                self.state.post_idea = rewrite.rewritten_text
                analysis = await self.gateway.analyze_input_for_seo(rewrite.rewritten_text)
            except GenerationError as e:
                logger.error("studio.fix_failed", error=str(e))
                return self._fail("generation", f"Failed to fix SEO. {e}")

            self.state.input_seo_analysis = analysis
            self.state.active_tab = "seo"
            logger.info("studio.seo_fixed", score=analysis.score)
            return self.state


def build_request(
    post_idea: str = "",
    tone: str = "Auto",
    platform: str = "Instagram",
    include_title: bool = False,
    hashtag_count: int = 10,
    enhance_style: bool = False,
    image=None,
) -> CaptionRequest:
    """CaptionRequest from loose UI/CLI values; bad options raise ValidationError."""
    try:
        return CaptionRequest(
            post_idea=post_idea,
            tone=tone,
            platform=platform,
            include_title=include_title,
            hashtag_count=hashtag_count,
            enhance_style=enhance_style,
            image=image,
        )
    except PydanticValidationError as e:
        first = e.errors()[0]
        field_name = ".".join(map(str, first["loc"]))
        raise ValidationError(f"Invalid {field_name}: {first['msg']}") from e
