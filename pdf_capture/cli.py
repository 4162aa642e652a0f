"""
CLI Entry Point: PDF Capture

Usage:
    pdf-capture serve --port 8000
    pdf-capture download --mode mobile --url https://example.com --url-name campaign
    pdf-capture download --text-file plain.txt --text-name campaign_text
"""

import argparse
import asyncio
import sys
from pathlib import Path

from .client import DEFAULT_SERVICE_URL, GenerationError, download_all, plan_downloads


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pdf-capture",
        description="Snapshot web pages and text into content-sized PDFs",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the HTTP service")
    serve.add_argument("--host", default="0.0.0.0")
    serve.add_argument("--port", type=int, default=8000)
    serve.add_argument("--reload", action="store_true", help="Reload on code changes (development)")

    download = subparsers.add_parser("download", help="Request PDFs from a running service")
    download.add_argument("--mode", choices=["desktop", "mobile"], default="desktop")
    download.add_argument("--url", help="Web page to capture")
    download.add_argument("--url-name", help="Filename for the web version")
    text_group = download.add_mutually_exclusive_group()
    text_group.add_argument("--text", help="Plain text to render")
    text_group.add_argument("--text-file", type=Path, help="File containing the plain text")
    download.add_argument("--text-name", help="Filename for the text version")
    download.add_argument("--service-url", default=DEFAULT_SERVICE_URL)
    download.add_argument("--out-dir", type=Path, default=Path("."))

    return parser


def run_serve(args: argparse.Namespace) -> int:
    import uvicorn

    uvicorn.run("pdf_capture.app:app", host=args.host, port=args.port, reload=args.reload)
    return 0


def run_download(args: argparse.Namespace) -> int:
    text = args.text
    if args.text_file:
        text = args.text_file.read_text(encoding="utf-8")

    try:
        jobs = plan_downloads(args.mode, args.url, args.url_name, text, args.text_name)
    except ValueError as e:
        print(f"❌ {e}", file=sys.stderr)
        return 2

    results = asyncio.run(download_all(jobs, args.service_url, args.out_dir))

    failed = 0
    for result in results:
        if isinstance(result, GenerationError):
            failed += 1
            print(f"❌ {result}", file=sys.stderr)
        else:
            print(f"✓ Saved {result}")
    return 1 if failed else 0


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    if args.command == "serve":
        return run_serve(args)
    return run_download(args)


if __name__ == "__main__":
    sys.exit(main())
