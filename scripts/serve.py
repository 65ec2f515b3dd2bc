from __future__ import annotations

import argparse
import os

import uvicorn

from painpoint_miner.api import create_app
from painpoint_miner.logging_setup import setup_logging


def main() -> None:
    p = argparse.ArgumentParser(description="Run the analysis HTTP API.")
    p.add_argument("--host", default="0.0.0.0")
    p.add_argument("--port", type=int, default=int(os.getenv("PORT", "8000")))
    p.add_argument("--log-level", default=os.getenv("LOG_LEVEL", "INFO"), help="Logging level")
    args = p.parse_args()

    setup_logging(args.log_level.upper())
    uvicorn.run(create_app(), host=args.host, port=args.port, log_config=None)


if __name__ == "__main__":
    main()
