"""
CaptionGenie — Main Entry Point
CLI + web server for the caption/hashtag/SEO assistant.

Usage:
  python main.py --analyze "I love this!"                      # local heuristics only
  python main.py --generate "New coffee machine" --platform LinkedIn --tone Witty --title
  python main.py --generate "" --image photo.jpg --hashtags 15 --auto-seo
  python main.py --seo "Our summer sale starts today"
  python main.py --fix-seo "Our summer sale starts today"
  python main.py --history
  python main.py --theme toggle
  python main.py --web --port 8000
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys

import structlog

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("captiongenie.main")

# stdout carries the JSON results
structlog.configure(logger_factory=structlog.PrintLoggerFactory(file=sys.stderr))


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    from core.models import Platform, Tone

    parser = argparse.ArgumentParser(
        description="CaptionGenie — social captions, hashtags and SEO insights via Gemini",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    action = parser.add_mutually_exclusive_group(required=True)
    action.add_argument("--analyze", metavar="TEXT", help="Quick local analysis (emotional power, length)")
    action.add_argument("--generate", metavar="IDEA", help="Generate a caption for a post idea")
    action.add_argument("--seo", metavar="TEXT", help="SEO analysis of the text")
    action.add_argument("--fix-seo", metavar="TEXT", help="Rewrite the text for SEO and re-analyze it")
    action.add_argument("--history", action="store_true", help="Show the last generations")
    action.add_argument("--theme", choices=["status", "toggle", "light", "dark"], help="Theme preference")
    action.add_argument("--web", action="store_true", help="Start the web app (default: localhost:8000)")

    parser.add_argument("--tone", choices=[t.value for t in Tone], default=Tone.AUTO.value)
    parser.add_argument("--platform", choices=[p.value for p in Platform], default=Platform.INSTAGRAM.value)
    parser.add_argument("--hashtags", type=int, default=None, help="Total hashtag count (0-30)")
    parser.add_argument("--title", action="store_true", help="Include a title")
    parser.add_argument("--enhance", action="store_true", help="Emojis, formatting and a strong CTA")
    parser.add_argument("--auto-seo", action="store_true", help="Also analyze the post idea for SEO")
    parser.add_argument("--image", metavar="PATH", help="Image to base the post on")
    parser.add_argument("--port", type=int, default=8000, help="Web server port")
    return parser.parse_args(argv)


def start_web_server(port: int = 8000) -> None:
    """Start the FastAPI web app."""
    import uvicorn
    logger.info("Starting CaptionGenie at http://localhost:%d", port)
    uvicorn.run("web.app:app", host="127.0.0.1", port=port, reload=False)


def _print(data) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False))


def _build_studio():
    from agents.caption_studio import CaptionStudio
    from core.config import get_settings
    from core.history import HistoryStore
    from integrations.gemini_gateway import GeminiGateway

    settings = get_settings()
    history = HistoryStore(settings.history_path, limit=settings.history_limit)
    history.load()
    return CaptionStudio(gateway=GeminiGateway(), history=history)


async def run_studio(args: argparse.Namespace) -> int:
    from agents.caption_studio import build_request
    from core.config import get_settings
    from integrations.image_payload import load_image_file

    studio = _build_studio()
    settings = get_settings()

    if args.generate is not None:
        image = None
        if args.image:
            image = load_image_file(
                args.image,
                max_bytes=settings.max_image_bytes,
                accepted_types=settings.accepted_image_types,
            )
        request = build_request(
            post_idea=args.generate,
            tone=args.tone,
            platform=args.platform,
            include_title=args.title,
            hashtag_count=settings.default_hashtag_count if args.hashtags is None else args.hashtags,
            enhance_style=args.enhance,
            image=image,
        )
        state = await studio.generate(request, auto_optimize_seo=args.auto_seo)
    elif args.seo is not None:
        state = await studio.analyze_seo(args.seo)
    else:
        state = await studio.fix_seo(args.fix_seo)

    _print(state.to_dict())
    return 1 if state.error else 0


def run_theme_command(command: str) -> None:
    from core.config import get_settings
    from core.preferences import ThemePreference

    settings = get_settings()
    pref = ThemePreference(settings.preferences_path, default=settings.default_theme)
    if command == "toggle":
        pref.toggle()
    elif command in ("light", "dark"):
        pref.set(command)
    _print({"theme": pref.theme})


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    if args.web:
        start_web_server(args.port)
        return 0

    if args.analyze is not None:
        from core.text_analyzer import analyze
        _print(analyze(args.analyze).to_dict())
        return 0

    if args.theme:
        run_theme_command(args.theme)
        return 0

    if args.history:
        studio = _build_studio()
        _print([item.to_json_dict() for item in studio.history.items])
        return 0

    from core.errors import CaptionGenieError
    try:
        return asyncio.run(run_studio(args))
    except CaptionGenieError as e:
        logger.error("%s", e)
        return 2


if __name__ == "__main__":
    sys.exit(main())
