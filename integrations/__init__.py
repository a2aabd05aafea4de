"""
CaptionGenie — Integrations Package

External boundaries:
  - GeminiGateway      → Google Gemini (caption, input SEO analysis, SEO rewrite)
  - load_image_payload → uploaded image bytes → validated inline payload
"""

from integrations.gemini_gateway import GeminiGateway, extract_json
from integrations.image_payload import load_image_file, load_image_payload

__all__ = [
    "GeminiGateway",
    "extract_json",
    "load_image_file",
    "load_image_payload",
]
