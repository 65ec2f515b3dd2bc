from __future__ import annotations

import argparse
import asyncio
import sys

from rich import print
from rich.table import Table

from painpoint_miner.config import Settings
from painpoint_miner.errors import PainpointMinerError
from painpoint_miner.io import read_content
from painpoint_miner.logging_setup import setup_logging
from painpoint_miner.schemas import SavedAnalysis
from painpoint_miner.service import build_service
from painpoint_miner.sources import hn_comments_as_paragraphs
from painpoint_miner.tokenizer import DEFAULT_MAX_CHUNK_SIZE, PARAGRAPH_SEPARATOR, chunk_content


def _print_preview(content: str, max_chunk_size: int) -> None:
    chunks = chunk_content(content, max_chunk_size=max_chunk_size)
    table = Table(title=f"{len(chunks)} chunk(s), max {max_chunk_size:,} chars")
    table.add_column("Chunk", justify="right")
    table.add_column("Chars", justify="right")
    table.add_column("Tokens (est.)", justify="right")
    table.add_column("Starts with", justify="left")
    for ch in chunks:
        table.add_row(str(ch.chunk_id), f"{len(ch.text):,}", f"{ch.token_estimate:,}", ch.text[:60].replace("\n", " "))
    print(table)


def _print_saved(saved: SavedAnalysis) -> None:
    a = saved.analysis
    print(f"[bold]{saved.title}[/bold]  (id: {saved.id})")
    print(f"[bold]Comments:[/bold] {a.total_comments:,}   [bold]Sentiment:[/bold] {a.sentiment_score:+.2f}")

    table = Table(title="Pain points")
    table.add_column("Topic", justify="left")
    table.add_column("Mentions", justify="right")
    table.add_column("Sentiment", justify="right")
    for p in a.pain_points:
        table.add_row(p.topic, str(p.count), f"{p.sentiment:+.2f}")
    print(table)

    print("[bold]Ideas:[/bold]")
    for idea in a.potential_ideas:
        print(f"- {idea}")


async def _run(args: argparse.Namespace) -> SavedAnalysis | None:
    settings = Settings.from_env(data_dir=args.data_dir)
    service = build_service(settings)
    try:
        extract = not args.no_filter
        if args.file:
            content = read_content(args.file)
        elif args.url:
            content = await service.fetch_website(args.url)
        else:
            resp = await service.search_hn_comments(args.hn_query, args.hn_range)
            content = PARAGRAPH_SEPARATOR.join(hn_comments_as_paragraphs(resp))
            extract = False  # already one comment per paragraph

        if args.preview:
            _print_preview(content, args.chunk_chars or settings.chunk_max_chars)
            return None

        return await service.create_analysis(content, args.title, extract=extract)
    finally:
        await service.aclose()


def main() -> None:
    p = argparse.ArgumentParser(description="Extract comments, analyze pain points and ideas, and save the result.")
    src = p.add_mutually_exclusive_group(required=True)
    src.add_argument("--file", help="Path to a .txt/.md, .csv or .json file with comments")
    src.add_argument("--url", help="Web page to fetch through the reader proxy")
    src.add_argument("--hn-query", help="Search Hacker News comments for this query")

    p.add_argument("--hn-range", default="24h", help="HN time range: 24h or all")
    p.add_argument("--title", default=None, help="Title for the saved analysis (generated when omitted)")
    p.add_argument("--no-filter", action="store_true", help="Skip comment extraction; analyze the content as is")
    p.add_argument("--preview", action="store_true", help="Only show how the content would be chunked")
    p.add_argument("--chunk-chars", type=int, default=None, help="Chunk size for --preview (default: CHUNK_MAX_CHARS)")
    p.add_argument("--data-dir", default=None, help="Directory holding analyses.jsonl (default: DATA_DIR or data)")
    p.add_argument("--log-level", default="INFO", help="Logging level")
    args = p.parse_args()

    setup_logging(args.log_level.upper())

    # Chunk preview of a local file needs no credentials.
    if args.preview and args.file:
        _print_preview(read_content(args.file), args.chunk_chars or DEFAULT_MAX_CHUNK_SIZE)
        return

    try:
        saved = asyncio.run(_run(args))
    except (PainpointMinerError, ValueError, FileNotFoundError) as e:
        print(f"[bold red]Failed:[/bold red] {e}")
        sys.exit(1)

    if saved is not None:
        _print_saved(saved)
        print("[bold green]Done.[/bold green]")


if __name__ == "__main__":
    main()
