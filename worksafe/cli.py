"""
Command-line front end

    worksafe-analyze site.jpg --pdf report.pdf
    worksafe-serve --port 8000
"""

import argparse
import asyncio
import sys
from pathlib import Path

from worksafe.client.analysis_client import AnalysisClient
from worksafe.client.ingestor import LocalPhoto
from worksafe.client.session import PhotoSession
from worksafe.core.config import get_settings
from worksafe.core.errors import AnalysisError, PhotoValidationError
from worksafe.core.logger import configure_logging
from worksafe.services.renderer import ResultView


def format_view(view: ResultView) -> str:
    lines = [view.title, view.headline]
    for item in view.items:
        lines.append("")
        lines.append(f"{item.index}. [{item.badge}] {item.title}")
        lines.append(f"   {item.recommendation}")
    if not view.is_empty:
        counts = ", ".join(f"{level}: {count}" for level, count in view.counts.items())
        lines.append("")
        lines.append(counts)
    return "\n".join(lines)


async def run_analysis(args: argparse.Namespace) -> int:
    client = AnalysisClient(base_url=args.relay_url)
    session = PhotoSession(client, locale=args.locale)

    try:
        photo = await session.upload(LocalPhoto(Path(args.photo)))
    except PhotoValidationError as e:
        print(e.message, file=sys.stderr)
        return 1

    await session.analyze()
    if session.error:
        print(session.error, file=sys.stderr)
        return 1

    print(format_view(session.view()))

    if args.pdf:
        try:
            pdf_bytes = await client.export_report(
                session.result,
                photo_name=photo.filename,
                photo_base64=photo.base64_payload,
            )
        except AnalysisError as e:
            print(e.message, file=sys.stderr)
            return 1
        Path(args.pdf).write_bytes(pdf_bytes)
        print(f"\nReport saved to {args.pdf}")

    session.reset()
    return 0


def analyze_main(argv=None) -> int:
    settings = get_settings()
    parser = argparse.ArgumentParser(
        description="Analyze a workplace photo for safety risks"
    )
    parser.add_argument("photo", help="JPEG, PNG or WebP photo")
    parser.add_argument("--relay-url", default=settings.relay_url)
    parser.add_argument(
        "--locale", default=settings.default_locale, choices=settings.supported_locales
    )
    parser.add_argument("--pdf", help="Write a PDF report to this path")
    args = parser.parse_args(argv)

    configure_logging()
    return asyncio.run(run_analysis(args))


def serve_main(argv=None) -> int:
    import uvicorn

    parser = argparse.ArgumentParser(description="Run the WorkSafe analysis API")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8000)
    parser.add_argument("--reload", action="store_true")
    args = parser.parse_args(argv)

    uvicorn.run("worksafe.main:app", host=args.host, port=args.port, reload=args.reload)
    return 0


if __name__ == "__main__":
    sys.exit(analyze_main())
