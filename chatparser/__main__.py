"""CLI entry point: python -m chatparser --html FILE --url URL [options]"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from chatparser import settings

if TYPE_CHECKING:
    from chatparser.items import Transcript

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="chatparser",
        description=(
            "Convert a saved, publicly shared conversation page into a structured\n"
            "transcript (JSON or Markdown). No browser, no network."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--html", required=True, metavar="PATH",
                        help="Saved HTML of the share page, or '-' to read stdin")
    parser.add_argument("--url", required=True, metavar="URL",
                        help="Original share URL (echoed in the output and used for the id)")
    parser.add_argument("--out", default=None, metavar="DIR",
                        help="Write <slug>.json, <slug>.md and index.json here "
                             "instead of printing to stdout")
    parser.add_argument("--format", choices=["json", "markdown"], default="json",
                        help="Stdout format when --out is not given (default: json)")
    parser.add_argument("--profile", default=None, metavar="YAML",
                        help="YAML extraction profile overriding markers and title rules")
    parser.add_argument("--index-jsonl", default=None, metavar="PATH",
                        help="Also write one search-index record per message to PATH")
    parser.add_argument("--force", action="store_true", default=False,
                        help="Parse even if no parser recognises the URL")
    parser.add_argument("--quiet", action="store_true", default=False,
                        help="Do not print the summary table")
    parser.add_argument("--log-level", default="WARNING",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        metavar="{DEBUG,INFO,WARNING,ERROR}",
                        help="Logging level (default: WARNING)")
    return parser


def _read_html(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    return Path(source).read_text(encoding="utf-8", errors="replace")


def _print_summary(transcript: Transcript) -> None:
    try:
        from rich import box
        from rich.console import Console
        from rich.rule import Rule
        from rich.table import Table

        console = Console(stderr=True)
        console.print()
        console.print(Rule(f"[bold cyan]{transcript.title}[/bold cyan]"))
        console.print(f"  [bold]Id           :[/bold] {transcript.id}")
        console.print(f"  [bold]Source URL   :[/bold] [blue]{transcript.source_url}[/blue]")
        if transcript.participants:
            console.print(
                f"  [bold]Participants :[/bold] [green]{transcript.participants.user}[/green]"
                f" / [magenta]{transcript.participants.assistant}[/magenta]",
            )
        console.print(f"  [bold]Messages     :[/bold] [green]{transcript.message_count}[/green]")
        console.print(f"  [bold]Total words  :[/bold] {transcript.word_count:,}")
        console.print()

        if not transcript.messages:
            console.print("  [yellow]No messages found.[/yellow]")
            return

        tbl = Table(box=box.SIMPLE_HEAVY, show_lines=False)
        tbl.add_column("#",        style="dim",  justify="right", width=4, no_wrap=True)
        tbl.add_column("Role",     style="cyan", width=10,               no_wrap=True)
        tbl.add_column("Words",    justify="right", width=7,             no_wrap=True)
        tbl.add_column("Segments", style="dim",  width=14,               no_wrap=True)
        tbl.add_column("Preview",  max_width=60,                          no_wrap=True)

        for message in transcript.messages:
            words = sum(len(s.content.split()) for s in message.content)
            kinds = ", ".join(s.type for s in message.content)
            preview = " ".join(message.content[0].content.split())[:57]
            tbl.add_row(str(message.index), message.role, str(words), kinds, preview)
        console.print(tbl)
    except Exception as exc:
        logger.debug("Rich summary display failed: %s", exc)


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(level=args.log_level, format=settings.LOG_FORMAT)

    from chatparser.plugins import UnsupportedURLError, find_parser
    from chatparser.profiles import ProfileError, load_profile
    from chatparser.query import extract

    profile = None
    if args.profile:
        try:
            profile = load_profile(args.profile, args.url)
        except ProfileError as exc:
            print(f"ERROR: {exc}", file=sys.stderr)
            return 1

    plugin = None
    if profile is None:
        try:
            plugin = find_parser(args.url, strict=not args.force)
        except UnsupportedURLError as exc:
            print(f"ERROR: {exc}. Use --force to parse it anyway.", file=sys.stderr)
            return 1

    try:
        html = _read_html(args.html)
    except OSError as exc:
        print(f"ERROR: Could not read {args.html}: {exc}", file=sys.stderr)
        return 1

    if plugin is not None:
        transcript = plugin.parse(html, args.url)
    else:
        transcript = extract(html, args.url, profile=profile)

    if not args.quiet:
        _print_summary(transcript)

    if args.index_jsonl:
        from chatparser.pipelines import to_jsonl

        try:
            count = to_jsonl([transcript], args.index_jsonl)
        except OSError as exc:
            print(f"ERROR: Could not write {args.index_jsonl}: {exc}", file=sys.stderr)
            return 1
        logger.info("Wrote %d index record(s) to %s", count, args.index_jsonl)

    if args.out:
        from chatparser.pipelines import TranscriptWriter

        try:
            with TranscriptWriter(args.out) as writer:
                writer.write(transcript)
        except OSError as exc:
            print(f"ERROR: Could not write to {args.out}: {exc}", file=sys.stderr)
            return 1
        return 0

    if args.format == "markdown":
        from chatparser.extractors.markdown import format_markdown_transcript

        sys.stdout.write(format_markdown_transcript(transcript))
    else:
        sys.stdout.write(json.dumps(transcript.to_json_dict(), indent=2, ensure_ascii=False) + "\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
