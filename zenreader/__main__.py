"""CLI entry point: python -m zenreader FILE [options]"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from zenreader.extractors.pipeline import extract_article
from zenreader.items import ExtractedArticle
from zenreader.plugins import available_extractors, get_extractor
from zenreader.profiles import ConfigError, load_config
from zenreader.settings import ExtractionConfig

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_NO_CONTENT = 2


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="zenreader",
        description=(
            "Extract the readable article from a saved HTML page.\n"
            "Prints sanitized HTML, Markdown or a JSON record."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("source", metavar="FILE",
                        help="HTML file to read, or '-' for standard input")
    parser.add_argument("--url", default="", metavar="URL",
                        help="Original page URL (selects profile overrides, echoed in output)")
    parser.add_argument("--format", dest="output_format", default="json",
                        choices=["json", "markdown", "html"],
                        help="Output format (default: json)")
    parser.add_argument("--extractor", default="none", metavar="NAME",
                        help=(
                            "External extractor consulted after the candidate pass "
                            f"({', '.join([*available_extractors(), 'none'])}; default: none)"
                        ))
    parser.add_argument("--config", default=None, metavar="YAML",
                        help="YAML profile with 'default' and per-domain settings")
    parser.add_argument("--outline", action="store_true", default=False,
                        help="Print the heading outline as a table on stderr")
    parser.add_argument("--log-level", default="WARNING",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        metavar="{DEBUG,INFO,WARNING,ERROR}",
                        help="Logging level (default: WARNING)")
    return parser


def _read_source(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    return Path(source).read_text(encoding="utf-8", errors="replace")


def _render(article: ExtractedArticle, output_format: str) -> str:
    if output_format == "html":
        return article.content_html
    if output_format == "markdown":
        return article.to_markdown()
    return json.dumps(article.to_schema().model_dump(), indent=2, ensure_ascii=False)


def _print_outline(article: ExtractedArticle, max_entries: int) -> None:
    try:
        from rich import box
        from rich.console import Console
        from rich.table import Table

        console = Console(stderr=True)
        entries = article.outline(max_entries)
        if not entries:
            console.print("[yellow]No headings found.[/yellow]")
            return
        tbl = Table(
            title=f"[bold cyan]{article.title}[/bold cyan]",
            box=box.SIMPLE_HEAVY,
            show_lines=False,
        )
        tbl.add_column("#",       style="dim",   justify="right", width=4, no_wrap=True)
        tbl.add_column("Level",   justify="right", width=5,                no_wrap=True)
        tbl.add_column("Heading", style="cyan",  max_width=70)
        tbl.add_column("Anchor",  style="blue",  no_wrap=True)
        for i, entry in enumerate(entries, 1):
            indent = "  " * (entry.level - 1)
            tbl.add_row(str(i), f"h{entry.level}", f"{indent}{entry.label}", f"#{entry.anchor_id}")
        console.print(tbl)
    except Exception as exc:
        logger.debug("Rich outline display failed: %s", exc)


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        config = load_config(args.config, args.url) if args.config else ExtractionConfig()
        extractor = get_extractor(args.extractor)
    except (ConfigError, KeyError) as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return EXIT_ERROR

    try:
        html = _read_source(args.source)
    except OSError as exc:
        print(f"ERROR: Cannot read {args.source}: {exc}", file=sys.stderr)
        return EXIT_ERROR

    article = extract_article(html, args.url, extractor=extractor, config=config)
    if article is None:
        print("No readable content found.", file=sys.stderr)
        return EXIT_NO_CONTENT

    if args.outline:
        _print_outline(article, config.outline_max_entries)

    sys.stdout.write(_render(article, args.output_format))
    sys.stdout.write("\n")
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
