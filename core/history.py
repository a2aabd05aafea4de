"""
CaptionGenie — Recent Generations History

Keeps the last N (default 5) generated results, newest first, persisted as a
JSON list. Every change is written through to disk. A corrupt file is
discarded and the history starts empty.
"""

from __future__ import annotations

import json
import logging
import os
import random
from datetime import datetime
from typing import Optional

from pydantic import ValidationError as PydanticValidationError

from core.errors import StorageCorruptionError
from core.models import GeneratedContent, HistoryItem

logger = logging.getLogger("captiongenie.history")

DEFAULT_LIMIT = 5


def _display_timestamp(now: datetime) -> str:
    # e.g. "10/19/2026, 2:05:09 PM"
    return f"{now.month}/{now.day}/{now.year}, {now.strftime('%I:%M:%S %p').lstrip('0')}"


class HistoryStore:

    def __init__(self, path: str, limit: int = DEFAULT_LIMIT):
        self.path = path
        self.limit = limit
        self._items: list[HistoryItem] = []

    @property
    def items(self) -> list[HistoryItem]:
        return list(self._items)

    def load(self) -> list[HistoryItem]:
        """Read the persisted list. Missing file → empty, corrupt file → reset."""
        if not os.path.exists(self.path):
            self._items = []
            return self.items
        try:
            self._items = self._parse(self.path)[: self.limit]
        except StorageCorruptionError as e:
            logger.warning("Discarding corrupt history at %s: %s", self.path, e)
            self._items = []
            try:
                os.remove(self.path)
            except OSError:
                logger.warning("Could not remove corrupt history file %s", self.path)
        return self.items

    @staticmethod
    def _parse(path: str) -> list[HistoryItem]:
        try:
            with open(path, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            raise StorageCorruptionError(str(e)) from e
        if not isinstance(raw, list):
            raise StorageCorruptionError("history is not a list")
        try:
            return [HistoryItem.model_validate(entry) for entry in raw]
        except PydanticValidationError as e:
            raise StorageCorruptionError(str(e)) from e

    def add(
        self,
        content: GeneratedContent,
        post_idea: str,
        image_preview: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> HistoryItem:
        """Prepend a generated result, evicting the oldest past the limit."""
        now = now or datetime.now()
        fallback = "Image-based post" if image_preview else "Untitled post"
        item = HistoryItem(
            **content.model_dump(),
            id=f"{now.isoformat()}{random.random()}",
            post_idea=post_idea or fallback,
            timestamp=_display_timestamp(now),
            image_preview=image_preview,
        )
        self._items = [item, *self._items][: self.limit]
        self._save()
        logger.info("History: added %s (%d stored)", item.id, len(self._items))
        return item

    def clear(self) -> None:
        self._items = []
        self._save()

    def _save(self) -> None:
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump([i.to_json_dict() for i in self._items], f, indent=2, ensure_ascii=False)
