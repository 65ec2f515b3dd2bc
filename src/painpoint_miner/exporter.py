from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List

import pandas as pd

from painpoint_miner.store import AnalysisStore

ANALYSIS_COLUMNS = ["analysis_id", "title", "created_at", "total_comments", "sentiment_score",
                    "pain_point_count", "idea_count", "market_analyses"]
PAIN_POINT_COLUMNS = ["analysis_id", "title", "rank", "topic", "count", "sentiment", "examples"]
IDEA_COLUMNS = ["analysis_id", "title", "idea", "has_market_analysis", "market_size", "market_growth",
                "similar_apps", "key_differentiators", "challenges"]


def export_analyses(store: AnalysisStore, out_dir: str | Path) -> Dict[str, Path]:
    """
    Writes saved analyses as flat CSVs:
    - analyses.csv: one row per saved analysis
    - pain_points.csv: one row per pain point (rank = position after merge)
    - ideas.csv: one row per idea, with its market analysis if one was run
    List-valued cells are joined with " | ".
    """
    out_path = Path(out_dir)
    out_path.mkdir(parents=True, exist_ok=True)

    analysis_rows: List[Dict[str, Any]] = []
    pain_rows: List[Dict[str, Any]] = []
    idea_rows: List[Dict[str, Any]] = []

    for saved in store.list():
        a = saved.analysis
        analysis_rows.append({
            "analysis_id": saved.id,
            "title": saved.title,
            "created_at": saved.created_at.isoformat(),
            "total_comments": a.total_comments,
            "sentiment_score": round(a.sentiment_score, 4),
            "pain_point_count": len(a.pain_points),
            "idea_count": len(a.potential_ideas),
            "market_analyses": len(saved.market_analysis),
        })

        for rank, p in enumerate(a.pain_points, start=1):
            pain_rows.append({
                "analysis_id": saved.id,
                "title": saved.title,
                "rank": rank,
                "topic": p.topic,
                "count": p.count,
                "sentiment": round(p.sentiment, 4),
                "examples": " | ".join(p.examples),
            })

        for idea in a.potential_ideas:
            market = saved.market_analysis.get(idea)
            idea_rows.append({
                "analysis_id": saved.id,
                "title": saved.title,
                "idea": idea,
                "has_market_analysis": market is not None,
                "market_size": market.market_potential.size if market else "",
                "market_growth": market.market_potential.growth if market else "",
                "similar_apps": " | ".join(s.name for s in market.similar_apps) if market else "",
                "key_differentiators": " | ".join(market.key_differentiators) if market else "",
                "challenges": " | ".join(market.challenges) if market else "",
            })

    paths = {
        "analyses": out_path / "analyses.csv",
        "pain_points": out_path / "pain_points.csv",
        "ideas": out_path / "ideas.csv",
    }
    pd.DataFrame(analysis_rows, columns=ANALYSIS_COLUMNS).to_csv(paths["analyses"], index=False, encoding="utf-8")
    pd.DataFrame(pain_rows, columns=PAIN_POINT_COLUMNS).to_csv(paths["pain_points"], index=False, encoding="utf-8")
    pd.DataFrame(idea_rows, columns=IDEA_COLUMNS).to_csv(paths["ideas"], index=False, encoding="utf-8")
    return paths
