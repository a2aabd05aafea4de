"""
CaptionGenie — Theme Preference

Light/dark theme, persisted as {"theme": "..."} and written through on every
change. On init the persisted value wins; otherwise the configured default
(CAPTIONGENIE_THEME or config/captiongenie.yaml) is used.
"""

from __future__ import annotations

import json
import logging
import os

logger = logging.getLogger("captiongenie.preferences")

THEMES = ("light", "dark")


class ThemePreference:

    def __init__(self, path: str, default: str = "light"):
        self.path = path
        self.default = default if default in THEMES else "light"
        self._theme = self._read()

    def _read(self) -> str:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                stored = json.load(f).get("theme")
        except FileNotFoundError:
            return self.default
        except (OSError, ValueError, AttributeError) as e:
            logger.warning("Ignoring unreadable preferences at %s: %s", self.path, e)
            return self.default
        return stored if stored in THEMES else self.default

    @property
    def theme(self) -> str:
        return self._theme

    def set(self, theme: str) -> str:
        if theme not in THEMES:
            raise ValueError(f"Unknown theme: {theme!r} (expected one of {THEMES})")
        self._theme = theme
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump({"theme": theme}, f)
        return theme

    def toggle(self) -> str:
        return self.set("dark" if self._theme == "light" else "light")
