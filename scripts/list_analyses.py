from __future__ import annotations

import argparse
import os
from pathlib import Path

from rich import print
from rich.table import Table

from painpoint_miner.store import AnalysisStore


def main() -> None:
    parser = argparse.ArgumentParser(description="List saved analyses (newest first).")
    parser.add_argument("--data-dir", default=os.getenv("DATA_DIR", "data"), help="Directory holding analyses.jsonl")
    parser.add_argument("--top", type=int, default=20, help="How many analyses to display")
    args = parser.parse_args()

    store = AnalysisStore(Path(args.data_dir) / "analyses.jsonl")
    records = store.list()
    print(f"[bold]Saved analyses:[/bold] {len(records):,}")

    if not records:
        print("[yellow]Nothing saved yet.[/yellow]")
        return

    table = Table(title=f"Latest {min(args.top, len(records))} analyses")
    table.add_column("Id", justify="left")
    table.add_column("Created", justify="left")
    table.add_column("Title", justify="left")
    table.add_column("Comments", justify="right")
    table.add_column("Sentiment", justify="right")
    table.add_column("Top pain point", justify="left")
    table.add_column("Ideas", justify="right")
    for r in records[: args.top]:
        a = r.analysis
        top = a.pain_points[0].topic if a.pain_points else ""
        table.add_row(
            r.id,
            r.created_at.strftime("%Y-%m-%d %H:%M"),
            r.title,
            f"{a.total_comments:,}",
            f"{a.sentiment_score:+.2f}",
            top,
            str(len(a.potential_ideas)),
        )
    print(table)


if __name__ == "__main__":
    main()
