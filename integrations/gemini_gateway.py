"""
Gemini Gateway — the only place CaptionGenie talks to the model.

Operations (all async, single-shot, no streaming, no retries):
  - generate_caption(request)      → GeneratedContent
  - analyze_input_for_seo(text)    → InputSeoAnalysis
  - rewrite_text_for_seo(text)     → RewriteResult

Every call asks for application/json with a response schema, then:
  1. Extract the JSON object from the text (tolerates ``` fences / stray prose)
  2. Validate it against the pydantic model (strict primitive types)
Any failure (missing key, SDK or network error, bad JSON, wrong shape)
surfaces as GenerationError.
"""

import json
import re
from typing import Any, Optional, Type, TypeVar

import structlog
from google import genai
from google.genai import types
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from core.config import get_settings
from core.errors import GenerationError
from core.models import CaptionRequest, GeneratedContent, InputSeoAnalysis, RewriteResult
from integrations.image_payload import decode_image_data

logger = structlog.get_logger()

ModelT = TypeVar("ModelT", bound=BaseModel)

_STR_LIST = {"type": "ARRAY", "items": {"type": "STRING"}}

CAPTION_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "caption": {
            "type": "STRING",
            "description": "The main caption for the social media post. It should be engaging and relevant to the topic and/or image provided.",
        },
        "hashtags": {
            "type": "OBJECT",
            "properties": {
                "broad": {**_STR_LIST, "description": "A list of broad-category hashtags without the '#' symbol."},
                "niche": {**_STR_LIST, "description": "A list of specific, niche hashtags without the '#' symbol."},
                "trending": {**_STR_LIST, "description": "A list of currently trending hashtags relevant to the topic, if any, without the '#' symbol."},
            },
            "required": ["broad", "niche", "trending"],
        },
        "title": {
            "type": "STRING",
            "description": "A catchy, optional title for the post (e.g., for YouTube Shorts, Reels, or a blog post). Only present if requested.",
        },
        "postingTimes": {
            **_STR_LIST,
            "description": "2-3 suggested optimal times to post for maximum engagement (e.g., 'Tuesday at 2:00 PM EST').",
        },
        "seoInsights": {
            "type": "OBJECT",
            "properties": {
                "score": {"type": "INTEGER", "description": "An SEO score from 0 to 100, estimating the content's potential for visibility and engagement."},
                "keywords": {**_STR_LIST, "description": "Primary and secondary keywords identified from the post idea and/or image."},
                "suggestions": {**_STR_LIST, "description": "Actionable suggestions to improve the content's SEO and engagement."},
                "optimizedTitles": {**_STR_LIST, "description": "2-3 alternative, SEO-optimized titles."},
                "optimizedDescriptions": {**_STR_LIST, "description": "2-3 alternative, SEO-optimized descriptions or captions."},
            },
            "required": ["score", "keywords", "suggestions"],
        },
    },
    "required": ["caption", "hashtags", "seoInsights"],
}

INPUT_SEO_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "score": {"type": "INTEGER", "description": "An SEO score from 0 to 100 for the user's input text, based on keyword richness, clarity, and engagement potential."},
        "keywords": {**_STR_LIST, "description": "The most relevant keywords found in the text."},
        "suggestions": {**_STR_LIST, "description": "Actionable suggestions to improve the text's SEO."},
        "emotionalPower": {"type": "STRING", "enum": ["Low", "Medium", "High"], "description": "The text's emotional impact: 'Low', 'Medium', or 'High'."},
    },
    "required": ["score", "keywords", "suggestions", "emotionalPower"],
}

REWRITE_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "rewrittenText": {"type": "STRING", "description": "The rewritten, SEO-optimized version of the original text."},
    },
    "required": ["rewrittenText"],
}

SEO_SYSTEM_INSTRUCTION = (
    "You are an SEO expert. Analyze the provided text for its SEO performance, focusing on "
    "keyword richness, readability, tone, and engagement potential. For 'emotionalPower', weigh the "
    "overall sentiment (positive, negative, neutral), the intensity of the language (e.g., 'good' vs. "
    "'revolutionary') and the presence of emotional triggers or power words, then rate it 'Low', "
    "'Medium', or 'High'. Provide a score, the primary keywords, actionable suggestions and the "
    "emotional power rating. Respond with a single, valid JSON object that strictly follows the schema."
)

REWRITE_SYSTEM_INSTRUCTION = (
    "You are an expert copywriter and SEO specialist. Rewrite the text to raise its SEO score above 85: "
    "work relevant keywords in naturally, improve clarity, strengthen the call-to-action and make the "
    "tone more engaging. Respond with a single, valid JSON object containing the rewritten text."
)


def caption_system_instruction(hashtag_count: int) -> str:
    return (
        "You are CaptionGenie, an expert social media marketing assistant. Your goal is to generate "
        "viral, engaging, and SEO-optimized content.\n"
        "- Adhere strictly to the user's requirements for tone, platform, and other options.\n"
        "- If tone is 'Auto', select the most appropriate tone.\n"
        f"- Generate exactly {hashtag_count} total hashtags, categorized into 'broad', 'niche', and "
        "'trending'. Do not include the '#' symbol in the strings.\n"
        "- Provide detailed SEO insights for the *generated caption*: a score (0-100), relevant keywords, "
        "and actionable improvement suggestions.\n"
        "- If 'Include Title' is true, provide a catchy title. Otherwise, the title field can be null or "
        "an empty string.\n"
        "- If 'Enhance Style' is true, use relevant emojis, creative formatting (like bullet points or "
        "short paragraphs), and a strong call-to-action.\n"
        "- Your entire response MUST be a single, valid JSON object that strictly adheres to the provided "
        "schema. Do not include any text, markdown, or formatting outside of the JSON object."
    )


def caption_user_prompt(request: CaptionRequest) -> str:
    lines = [
        f"Generate a social media post for {request.platform.value}.",
        f"- Tone: {request.tone.value}",
    ]
    if request.post_idea:
        lines.append(f'- Post Idea: "{request.post_idea}"')
    if request.image:
        lines.append("- An image is provided as context. Base the content on this image.")
    lines.append(f"- Include Title: {str(request.include_title).lower()}")
    lines.append(f"- Enhance Style: {str(request.enhance_style).lower()}")
    return "\n".join(lines) + "\n"


# ═══════════════════════════════════════════════════════════════
# JSON EXTRACTION
# ═══════════════════════════════════════════════════════════════

def _repair_json_text(text: str) -> str:
    """Fix common LLM JSON issues: smart quotes, raw control chars inside strings, bad escapes."""
    text = text.replace('“', '"').replace('”', '"')
    text = text.replace('‘', "'").replace('’', "'")

    result = []
    in_string = False
    i = 0
    while i < len(text):
        ch = text[i]
        if ch == "\\" and in_string and i + 1 < len(text):
            if text[i + 1] in '"\\/bfnrtu':
                result.append(text[i:i + 2])
                i += 2
            else:
                result.append("\\\\")
                i += 1
            continue
        if ch == '"':
            in_string = not in_string
        elif in_string and ch == "\n":
            ch = "\\n"
        elif in_string and ch == "\r":
            ch = "\\r"
        elif in_string and ch == "\t":
            ch = "\\t"
        elif in_string and ord(ch) < 0x20:
            ch = " "
        result.append(ch)
        i += 1
    return "".join(result)


def _matching_brace_span(text: str) -> Optional[str]:
    start = text.find("{")
    if start == -1:
        return None
    depth = 0
    in_string = False
    escape_next = False
    for i in range(start, len(text)):
        ch = text[i]
        if escape_next:
            escape_next = False
        elif ch == "\\" and in_string:
            escape_next = True
        elif ch == '"':
            in_string = not in_string
        elif not in_string and ch == "{":
            depth += 1
        elif not in_string and ch == "}":
            depth -= 1
            if depth == 0:
                return text[start:i + 1]
    return None


def extract_json(text: Optional[str]) -> Optional[Any]:
    """
    Pull a JSON value out of model text.

    Strategies, least to most aggressive:
      0. Strip a markdown code fence
      1. Direct parse
      2. Repair then parse
      3. First balanced {...} span, direct then repaired
    """
    if not text or not text.strip():
        return None
    text = text.strip()

    fence = re.search(r"```(?:json|JSON)?\s*\n(.*?)```", text, re.DOTALL)
    if fence:
        text = fence.group(1).strip()

    candidates = [text]
    span = _matching_brace_span(text)
    if span and span != text:
        candidates.append(span)

    for candidate in candidates:
        for attempt in (candidate, _repair_json_text(candidate)):
            try:
                return json.loads(attempt)
            except ValueError:
                continue
    return None


# ═══════════════════════════════════════════════════════════════
# GATEWAY
# ═══════════════════════════════════════════════════════════════

class GeminiGateway:
    """Async Gemini client for the three CaptionGenie operations."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        top_p: Optional[float] = None,
        client: Optional[genai.Client] = None,
    ):
        settings = get_settings()
        self.api_key = api_key if api_key is not None else settings.gemini_api_key
        self.model = model or settings.model
        self.temperature = settings.caption_temperature if temperature is None else temperature
        self.top_p = settings.caption_top_p if top_p is None else top_p
        self._client = client

    def _get_client(self) -> genai.Client:
        """Create the SDK client on first use so the app can start without a key."""
        if self._client is None:
            if not self.api_key:
                raise GenerationError("GEMINI_API_KEY is not configured.")
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    async def _generate_json(
        self,
        contents: Any,
        system_instruction: str,
        schema: dict,
        response_model: Type[ModelT],
        **sampling: float,
    ) -> ModelT:
        client = self._get_client()
        response = await client.aio.models.generate_content(
            model=self.model,
            contents=contents,
            config=types.GenerateContentConfig(
                system_instruction=system_instruction,
                response_mime_type="application/json",
                response_schema=schema,
                **sampling,
            ),
        )
        text = response.text
        data = extract_json(text)
        if data is None:
            snippet = (text or "").strip()[:120]
            raise GenerationError(f"Response was not valid JSON: {snippet!r}")
        if not isinstance(data, dict):
            raise GenerationError(f"Expected a JSON object, got {type(data).__name__}")
        try:
            return response_model.model_validate(data)
        except PydanticValidationError as e:
            raise GenerationError(
                f"Response did not match the expected shape ({e.error_count()} errors): "
                + "; ".join(f"{'.'.join(map(str, err['loc']))}: {err['msg']}" for err in e.errors()[:3])
            ) from e

    async def generate_caption(self, request: CaptionRequest) -> GeneratedContent:
        parts = []
        if request.image:
            parts.append(types.Part.from_bytes(
                data=decode_image_data(request.image),
                mime_type=request.image.mime_type,
            ))
        parts.append(types.Part.from_text(text=caption_user_prompt(request)))

        try:
            content = await self._generate_json(
                parts,
                caption_system_instruction(request.hashtag_count),
                CAPTION_SCHEMA,
                GeneratedContent,
                temperature=self.temperature,
                top_p=self.top_p,
            )
        except Exception as e:
            logger.error("gateway.caption_failed", model=self.model, error=str(e))
            raise GenerationError(f"Failed to generate content: {e}") from e

        logger.info("gateway.caption_generated", model=self.model,
                    platform=request.platform.value, has_image=bool(request.image))
        return content

    async def analyze_input_for_seo(self, text: str) -> InputSeoAnalysis:
        try:
            analysis = await self._generate_json(
                f'Analyze this text: "{text}"',
                SEO_SYSTEM_INSTRUCTION,
                INPUT_SEO_SCHEMA,
                InputSeoAnalysis,
            )
        except Exception as e:
            logger.error("gateway.seo_failed", model=self.model, error=str(e))
            raise GenerationError(f"Failed to analyze SEO: {e}") from e

        logger.info("gateway.seo_analyzed", model=self.model, score=analysis.score)
        return analysis

    async def rewrite_text_for_seo(self, text: str) -> RewriteResult:
        try:
            result = await self._generate_json(
                f'Rewrite this text for better SEO: "{text}"',
                REWRITE_SYSTEM_INSTRUCTION,
                REWRITE_SCHEMA,
                RewriteResult,
            )
        except Exception as e:
            logger.error("gateway.rewrite_failed", model=self.model, error=str(e))
            raise GenerationError(f"Failed to rewrite text: {e}") from e

        logger.info("gateway.text_rewritten", model=self.model, chars=len(result.rewritten_text))
        return result
