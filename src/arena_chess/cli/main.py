from __future__ import annotations

import argparse
import os
from typing import List, Optional

import uvicorn


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Serve the arena chess engine over HTTP")
    parser.add_argument(
        "--host",
        type=str,
        default=os.environ.get("ARENA_CHESS_HOST", "0.0.0.0"),
        help="Bind address (env ARENA_CHESS_HOST, default: 0.0.0.0)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=int(os.environ.get("ARENA_CHESS_PORT", "8000")),
        help="Bind port (env ARENA_CHESS_PORT, default: 8000)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=os.environ.get("ARENA_CHESS_LOG_LEVEL", "info"),
        choices=["critical", "error", "warning", "info", "debug"],
        help="Log level (env ARENA_CHESS_LOG_LEVEL, default: info)",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    uvicorn.run(
        "arena_chess.protocol.http.app:create_app",
        factory=True,
        host=args.host,
        port=args.port,
        log_level=args.log_level,
    )


if __name__ == "__main__":
    main()
