"""
Categorized Hashtags — cleanup for Gemini's broad / niche / trending split.

Gemini is asked for exactly N hashtags without '#', but answers drift:
leading '#', padding, the same tag in two categories, one or two extra.
normalize_hashtags() fixes those without inventing new tags.
"""

from __future__ import annotations

import structlog

from core.models import Hashtags

logger = structlog.get_logger()

CATEGORIES = ("broad", "niche", "trending")
# Trimmed first when over the requested count
TRIM_ORDER = ("trending", "niche", "broad")


def clean_tag(tag: str) -> str:
    return tag.strip().lstrip("#").strip().replace(" ", "")


def normalize_hashtags(hashtags: Hashtags, limit: int | None = None) -> Hashtags:
    """Strip '#', drop blanks, dedupe across categories, cap the total at `limit`."""
    seen: set[str] = set()
    cleaned: dict[str, list[str]] = {}
    for category in CATEGORIES:
        tags = []
        for raw in getattr(hashtags, category):
            tag = clean_tag(raw)
            if tag and tag.lower() not in seen:
                seen.add(tag.lower())
                tags.append(tag)
        cleaned[category] = tags

    if limit is not None:
        excess = sum(len(t) for t in cleaned.values()) - limit
        for category in TRIM_ORDER:
            if excess <= 0:
                break
            drop = min(excess, len(cleaned[category]))
            if drop:
                cleaned[category] = cleaned[category][: len(cleaned[category]) - drop]
                excess -= drop
        if limit < len(hashtags.flatten()):
            logger.info("hashtags.trimmed", requested=limit, received=len(hashtags.flatten()))

    return Hashtags(**cleaned)


def format_hashtags(hashtags: Hashtags) -> str:
    """Space-separated '#tag' string, ready to paste under a caption."""
    return " ".join(f"#{tag}" for tag in hashtags.flatten())
