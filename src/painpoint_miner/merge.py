from __future__ import annotations

from typing import Dict, List, Optional, Sequence

from painpoint_miner.schemas import Analysis, PainPoint


def _clamp(x: float) -> float:
    return max(-1.0, min(1.0, x))


def merge_analyses(analyses: Sequence[Analysis]) -> Optional[Analysis]:
    """
    Fold chunk-level analyses into one.

    - pain points with case-insensitively equal topics are folded: counts add up,
      sentiment becomes the mention-weighted average, examples are unioned
      (the first spelling of the topic wins)
    - ideas are deduplicated by exact string, insertion order kept
    - sentiment_score is weighted by each input's total_comments
    - pain points are sorted by count, descending; ties keep first-seen order

    No inputs -> None. A single input is returned as is.
    Inputs are never mutated.
    """
    if not analyses:
        return None
    if len(analyses) == 1:
        return analyses[0]

    pain_points: List[PainPoint] = []
    by_topic: Dict[str, int] = {}
    ideas: Dict[str, None] = {}
    weighted_sentiment = 0.0
    total_comments = 0

    for analysis in analyses:
        for incoming in analysis.pain_points:
            key = incoming.topic.lower()
            idx = by_topic.get(key)
            if idx is None:
                by_topic[key] = len(pain_points)
                pain_points.append(incoming.model_copy(update={"examples": list(incoming.examples)}))
                continue

            existing = pain_points[idx]
            count = existing.count + incoming.count
            sentiment = (existing.sentiment * existing.count + incoming.sentiment * incoming.count) / count
            pain_points[idx] = existing.model_copy(update={
                "count": count,
                "sentiment": _clamp(sentiment),
                "examples": list(dict.fromkeys([*existing.examples, *incoming.examples])),
            })

        for idea in analysis.potential_ideas:
            ideas.setdefault(idea, None)

        total_comments += analysis.total_comments
        weighted_sentiment += analysis.sentiment_score * analysis.total_comments

    # Zero comments overall: nothing to weight, report neutral.
    sentiment_score = _clamp(weighted_sentiment / total_comments) if total_comments else 0.0

    # list.sort is stable, so equal counts keep first-seen order.
    pain_points.sort(key=lambda p: p.count, reverse=True)

    return Analysis(
        pain_points=pain_points,
        potential_ideas=list(ideas),
        sentiment_score=sentiment_score,
        total_comments=total_comments,
    )
