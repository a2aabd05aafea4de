"""
CaptionGenie — Data Models

Enums for the generation options, plus pydantic models for everything that
crosses the Gemini boundary or gets persisted. Wire/persisted JSON is
camelCase (postingTimes, seoInsights, ...); Python attributes are snake_case.

Primitive fields are strict: a model that answers "85" for an integer score
or a bare string where a list is expected fails validation instead of being
coerced.
"""

from __future__ import annotations

from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictInt, StrictStr
from pydantic.alias_generators import to_camel


class Tone(str, Enum):
    AUTO = "Auto"
    WITTY = "Witty"
    PROFESSIONAL = "Professional"
    CASUAL = "Casual"
    INSPIRATIONAL = "Inspirational"
    HUMOROUS = "Humorous"


class Platform(str, Enum):
    INSTAGRAM = "Instagram"
    TWITTER = "Twitter / X"
    LINKEDIN = "LinkedIn"
    FACEBOOK = "Facebook"
    TIKTOK = "TikTok"
    BLOG = "Blog"


class EmotionalLevel(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json_dict(self) -> dict:
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)


# ── Requests ──

class ImagePayload(_CamelModel):
    mime_type: StrictStr
    data: StrictStr                     # base64, no data: prefix
    preview: Optional[StrictStr] = None  # small data-URL thumbnail for history


class CaptionRequest(_CamelModel):
    post_idea: StrictStr = ""
    tone: Tone = Tone.AUTO
    platform: Platform = Platform.INSTAGRAM
    include_title: StrictBool = False
    hashtag_count: StrictInt = Field(default=10, ge=0, le=30)
    enhance_style: StrictBool = False
    image: Optional[ImagePayload] = None


# ── Gemini responses ──

class Hashtags(_CamelModel):
    broad: list[StrictStr]
    niche: list[StrictStr]
    trending: list[StrictStr]

    def flatten(self) -> list[str]:
        return [*self.broad, *self.niche, *self.trending]


class SeoInsights(_CamelModel):
    score: StrictInt = Field(ge=0, le=100)
    keywords: list[StrictStr]
    suggestions: list[StrictStr]
    optimized_titles: Optional[list[StrictStr]] = None
    optimized_descriptions: Optional[list[StrictStr]] = None


class GeneratedContent(_CamelModel):
    caption: StrictStr
    hashtags: Hashtags
    title: Optional[StrictStr] = None
    posting_times: Optional[list[StrictStr]] = None
    seo_insights: SeoInsights


class InputSeoAnalysis(_CamelModel):
    score: StrictInt = Field(ge=0, le=100)
    keywords: list[StrictStr]
    suggestions: list[StrictStr]
    emotional_power: Optional[Literal["Low", "Medium", "High"]] = None


class RewriteResult(_CamelModel):
    rewritten_text: StrictStr


# ── History ──

class HistoryItem(GeneratedContent):
    id: StrictStr
    post_idea: StrictStr
    timestamp: StrictStr
    image_preview: Optional[StrictStr] = None
