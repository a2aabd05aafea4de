"""
CaptionGenie — Settings

Resolution order (later wins):
  1. Hardcoded defaults below
  2. config/captiongenie.yaml
  3. Environment (.env loaded via python-dotenv)
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field

import yaml
from dotenv import load_dotenv

logger = logging.getLogger("captiongenie.config")

PROJECT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
CONFIG_PATH = os.path.join(PROJECT_DIR, "config", "captiongenie.yaml")


@dataclass
class Settings:
    gemini_api_key: str = ""
    model: str = "gemini-2.5-flash"
    caption_temperature: float = 0.7
    caption_top_p: float = 0.95
    default_hashtag_count: int = 10
    history_limit: int = 5
    default_theme: str = "light"
    max_image_bytes: int = 4 * 1024 * 1024
    accepted_image_types: tuple[str, ...] = ("image/png", "image/jpeg", "image/webp")
    data_dir: str = field(default_factory=lambda: os.path.join(PROJECT_DIR, "data"))
    env: str = "development"

    @property
    def history_path(self) -> str:
        return os.path.join(self.data_dir, "history.json")

    @property
    def preferences_path(self) -> str:
        return os.path.join(self.data_dir, "preferences.json")

    @property
    def is_production(self) -> bool:
        return self.env == "production"


def _load_yaml(path: str) -> dict:
    try:
        with open(path, "r", encoding="utf-8") as f:
            cfg = yaml.safe_load(f) or {}
    except FileNotFoundError:
        logger.info("No config file at %s, using defaults", path)
        return {}
    except yaml.YAMLError as e:
        logger.warning("Could not parse %s: %s", path, e)
        return {}
    if not isinstance(cfg, dict):
        logger.warning("Ignoring %s: top level is not a mapping", path)
        return {}
    return cfg


def _section(cfg: dict, name: str) -> dict:
    section = cfg.get(name) or {}
    if not isinstance(section, dict):
        logger.warning("Ignoring config section %r: not a mapping", name)
        return {}
    return section


def _number(section: dict, key: str, default, cast):
    if key not in section:
        return default
    try:
        return cast(section[key])
    except (TypeError, ValueError):
        logger.warning("Invalid %s=%r in config, using default %r", key, section[key], default)
        return default


def load_settings(config_path: str = CONFIG_PATH) -> Settings:
    load_dotenv()
    settings = Settings()
    cfg = _load_yaml(config_path)

    gemini = _section(cfg, "gemini")
    studio = _section(cfg, "studio")
    images = _section(cfg, "images")
    storage = _section(cfg, "storage")

    settings.model = gemini.get("model", settings.model)
    settings.caption_temperature = _number(gemini, "caption_temperature", settings.caption_temperature, float)
    settings.caption_top_p = _number(gemini, "caption_top_p", settings.caption_top_p, float)
    settings.default_hashtag_count = _number(studio, "default_hashtag_count", settings.default_hashtag_count, int)
    settings.history_limit = _number(studio, "history_limit", settings.history_limit, int)
    settings.default_theme = studio.get("default_theme", settings.default_theme)
    settings.max_image_bytes = _number(images, "max_bytes", settings.max_image_bytes, int)
    if images.get("accepted_types"):
        settings.accepted_image_types = tuple(images["accepted_types"])
    if storage.get("data_dir"):
        data_dir = storage["data_dir"]
        settings.data_dir = data_dir if os.path.isabs(data_dir) else os.path.join(PROJECT_DIR, data_dir)

    # Environment overrides
    settings.gemini_api_key = os.environ.get("GEMINI_API_KEY") or os.environ.get("API_KEY", "")
    settings.model = os.environ.get("CAPTIONGENIE_MODEL", settings.model)
    settings.data_dir = os.environ.get("CAPTIONGENIE_DATA_DIR", settings.data_dir)
    settings.default_theme = os.environ.get("CAPTIONGENIE_THEME", settings.default_theme)
    settings.env = os.environ.get("CAPTIONGENIE_ENV", settings.env)
    return settings


_settings: Settings | None = None


def get_settings() -> Settings:
    """Process-wide settings, loaded on first use."""
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings


def reset_settings() -> None:
    global _settings
    _settings = None
