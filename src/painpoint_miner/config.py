from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class Settings:
    openai_api_key: str
    model: str
    idea_model: str
    temperature: float
    idea_temperature: float

    # Comment extraction / titles (OpenAI-compatible endpoint, optional)
    deepseek_api_key: str | None
    deepseek_base_url: str
    deepseek_model: str

    # Chunk pipeline
    chunk_max_chars: int
    chunk_max_concurrency: int
    chunk_timeout_s: float

    http_timeout_s: float
    data_dir: str
    log_level: str

    @property
    def store_path(self) -> Path:
        return Path(self.data_dir) / "analyses.jsonl"

    @staticmethod
    def from_env(data_dir: str | None = None) -> "Settings":
        key = os.getenv("OPENAI_API_KEY", "").strip()
        if not key:
            raise ValueError("OPENAI_API_KEY is missing. Set it in .env")

        model = os.getenv("OPENAI_MODEL", "gpt-4.1-mini").strip()

        def _int(name: str, default: int) -> int:
            v = os.getenv(name, str(default)).strip()
            try:
                return int(v)
            except ValueError:
                return default

        def _float(name: str, default: float) -> float:
            v = os.getenv(name, str(default)).strip()
            try:
                return float(v)
            except ValueError:
                return default

        return Settings(
            openai_api_key=key,
            model=model,
            idea_model=os.getenv("OPENAI_IDEA_MODEL", model).strip() or model,
            temperature=_float("OPENAI_TEMPERATURE", 0.2),
            idea_temperature=_float("OPENAI_IDEA_TEMPERATURE", 0.7),

            deepseek_api_key=os.getenv("DEEPSEEK_API_KEY", "").strip() or None,
            deepseek_base_url=os.getenv("DEEPSEEK_BASE_URL", "https://api.deepseek.com").strip(),
            deepseek_model=os.getenv("DEEPSEEK_MODEL", "deepseek-chat").strip(),

            chunk_max_chars=_int("CHUNK_MAX_CHARS", 12000),
            chunk_max_concurrency=_int("CHUNK_MAX_CONCURRENCY", 4),
            chunk_timeout_s=_float("CHUNK_TIMEOUT_S", 120.0),

            http_timeout_s=_float("HTTP_TIMEOUT_S", 60.0),
            data_dir=data_dir or os.getenv("DATA_DIR", "data").strip(),
            log_level=os.getenv("LOG_LEVEL", "INFO").strip().upper(),
        )
