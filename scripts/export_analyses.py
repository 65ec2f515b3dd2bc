from __future__ import annotations

import argparse
import os
from pathlib import Path

from rich import print

from painpoint_miner.exporter import export_analyses
from painpoint_miner.store import AnalysisStore


def main() -> None:
    p = argparse.ArgumentParser(description="Export saved analyses (pain points, ideas, market analyses) to CSV.")
    p.add_argument("--data-dir", default=os.getenv("DATA_DIR", "data"), help="Directory holding analyses.jsonl")
    p.add_argument("--out", default="data/out", help="Output directory")
    args = p.parse_args()

    paths = export_analyses(AnalysisStore(Path(args.data_dir) / "analyses.jsonl"), args.out)

    print("[bold green]Export done.[/bold green]")
    for path in paths.values():
        print(f"- {path}")


if __name__ == "__main__":
    main()
