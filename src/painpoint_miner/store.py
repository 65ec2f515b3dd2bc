from __future__ import annotations

import json
import logging
import os
import threading
from pathlib import Path
from typing import Callable, List

from pydantic import ValidationError

from painpoint_miner.errors import AnalysisNotFoundError
from painpoint_miner.schemas import Analysis, IdeaAnalysis, SavedAnalysis

log = logging.getLogger(__name__)


class AnalysisStore:
    """
    Saved analyses in a JSONL file, one record per line.

    Appends on insert; updates and deletes rewrite the file (atomic replace).
    Corrupt or partially written lines are skipped on read.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._lock = threading.Lock()

    def _read_all(self) -> List[SavedAnalysis]:
        if not self.path.exists():
            return []
        out: List[SavedAnalysis] = []
        with self.path.open("r", encoding="utf-8") as f:
            for n, line in enumerate(f, start=1):
                line = line.strip()
                if not line:
                    continue
                try:
                    out.append(SavedAnalysis.model_validate_json(line))
                except ValidationError:
                    log.warning("Skipping unreadable record at %s:%d", self.path, n)
                    continue
        return out

    def _write_all(self, records: List[SavedAnalysis]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        with tmp.open("w", encoding="utf-8") as f:
            for r in records:
                f.write(_dump_line(r))
        os.replace(tmp, self.path)

    def insert(self, title: str, analysis: Analysis) -> SavedAnalysis:
        record = SavedAnalysis(title=title, analysis=analysis)
        with self._lock:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("a", encoding="utf-8") as f:
                f.write(_dump_line(record))
        log.info("Saved analysis %s (%r)", record.id, title)
        return record

    def list(self) -> List[SavedAnalysis]:
        """All saved analyses, newest first."""
        with self._lock:
            records = self._read_all()
        # File order breaks created_at ties; later lines are newer.
        return sorted(reversed(records), key=lambda r: r.created_at, reverse=True)

    def get(self, analysis_id: str) -> SavedAnalysis:
        with self._lock:
            for r in self._read_all():
                if r.id == analysis_id:
                    return r
        raise AnalysisNotFoundError(analysis_id)

    def _update(self, analysis_id: str, change: Callable[[SavedAnalysis], SavedAnalysis]) -> SavedAnalysis:
        with self._lock:
            records = self._read_all()
            for i, r in enumerate(records):
                if r.id == analysis_id:
                    records[i] = change(r)
                    self._write_all(records)
                    return records[i]
        raise AnalysisNotFoundError(analysis_id)

    def update_title(self, analysis_id: str, title: str) -> SavedAnalysis:
        return self._update(analysis_id, lambda r: r.model_copy(update={"title": title}))

    def set_market_analysis(self, analysis_id: str, idea: str, idea_analysis: IdeaAnalysis) -> SavedAnalysis:
        """Adds or replaces the market analysis stored under `idea`, keeping the others."""
        return self._update(
            analysis_id,
            lambda r: r.model_copy(update={"market_analysis": {**r.market_analysis, idea: idea_analysis}}),
        )

    def delete(self, analysis_id: str) -> None:
        with self._lock:
            records = self._read_all()
            kept = [r for r in records if r.id != analysis_id]
            if len(kept) == len(records):
                raise AnalysisNotFoundError(analysis_id)
            self._write_all(kept)
        log.info("Deleted analysis %s", analysis_id)


def _dump_line(record: SavedAnalysis) -> str:
    return json.dumps(record.model_dump(mode="json", by_alias=True), ensure_ascii=False) + "\n"
