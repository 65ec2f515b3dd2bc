from __future__ import annotations

import argparse
import asyncio
import sys

from rich import print
from rich.table import Table

from painpoint_miner.config import Settings
from painpoint_miner.errors import PainpointMinerError
from painpoint_miner.logging_setup import setup_logging
from painpoint_miner.schemas import IdeaAnalysis
from painpoint_miner.service import build_service


async def _run(idea: str, analysis_id: str | None, data_dir: str | None) -> IdeaAnalysis:
    service = build_service(Settings.from_env(data_dir=data_dir))
    try:
        return await service.analyze_idea(idea, analysis_id=analysis_id)
    finally:
        await service.aclose()


def main() -> None:
    p = argparse.ArgumentParser(description="Market analysis for one candidate idea.")
    p.add_argument("--idea", required=True, help="Idea text (usually one of an analysis' potentialIdeas)")
    p.add_argument("--analysis-id", default=None, help="Store the result on this saved analysis")
    p.add_argument("--data-dir", default=None, help="Directory holding analyses.jsonl")
    p.add_argument("--log-level", default="INFO", help="Logging level")
    args = p.parse_args()

    setup_logging(args.log_level.upper())

    try:
        result = asyncio.run(_run(args.idea, args.analysis_id, args.data_dir))
    except (PainpointMinerError, ValueError) as e:
        print(f"[bold red]Failed:[/bold red] {e}")
        sys.exit(1)

    mp = result.market_potential
    print(f"[bold]Market size:[/bold] {mp.size}")
    print(f"[bold]Growth:[/bold] {mp.growth}")

    table = Table(title="Similar apps")
    table.add_column("Name", justify="left")
    table.add_column("Description", justify="left")
    table.add_column("URL", justify="left")
    for app in result.similar_apps:
        table.add_row(app.name, app.description, app.url or "")
    print(table)

    for heading, items in (
        ("Opportunities", mp.opportunities),
        ("Key differentiators", result.key_differentiators),
        ("Challenges", result.challenges),
    ):
        print(f"[bold]{heading}:[/bold]")
        for item in items:
            print(f"- {item}")

    if args.analysis_id:
        print(f"[bold green]Saved[/bold green] on analysis {args.analysis_id}.")


if __name__ == "__main__":
    main()
