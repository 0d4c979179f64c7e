"""
Command-line front end.

    truthguard analyze --text "..." [--image photo.jpg]
    truthguard serve
"""

import argparse
import asyncio
import sys
from typing import List, Optional

import httpx
from loguru import logger

from .client import ContentSubmitter, ImageFile
from .config import ClientSettings
from .errors import InputRejected
from .render import format_view, render_result


async def _analyze(text: str, image_path: Optional[str], settings: ClientSettings) -> int:
    async with httpx.AsyncClient() as client:
        submitter = ContentSubmitter(client, settings)
        submitter.set_text(text)
        if image_path:
            try:
                submitter.select_image(ImageFile.from_path(image_path))
            except InputRejected as e:
                print(f"{e.title}: {e.description}", file=sys.stderr)
                return 1
            except OSError as e:
                print(f"Unreadable Image: {e}", file=sys.stderr)
                return 1
        state = await submitter.submit()

    view = render_result(state.result)
    if view is None:
        note = state.notification
        print(f"{note.title}: {note.description}" if note else "Analysis Failed", file=sys.stderr)
        return 1
    print(format_view(view))
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="truthguard", description="Check text or images for fake content.")
    sub = parser.add_subparsers(dest="command", required=True)

    analyze = sub.add_parser("analyze", help="submit text and/or an image for analysis")
    analyze.add_argument("--text", default="", help="text to verify")
    analyze.add_argument("--image", default=None, help="path to an image to verify")
    analyze.add_argument("--endpoint", default=None, help="analysis endpoint URL")

    sub.add_parser("serve", help="run the analysis endpoint")

    args = parser.parse_args(argv)

    if args.command == "serve":
        from .main import run

        run()
        return 0

    settings = ClientSettings.from_env()
    if args.endpoint:
        settings = settings.model_copy(update={"endpoint_url": args.endpoint})
    logger.debug("Submitting to {}", settings.endpoint_url)
    return asyncio.run(_analyze(args.text, args.image, settings))


if __name__ == "__main__":
    sys.exit(main())
