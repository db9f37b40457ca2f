#!/usr/bin/env python3
"""Start the Deep Archive research API under uvicorn."""

import argparse
import os

import uvicorn
from dotenv import load_dotenv

load_dotenv()


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Deep Archive research API server")
    parser.add_argument("--host", default=os.getenv("HOST", "127.0.0.1"), help="Host to bind to")
    parser.add_argument("--port", type=int, default=int(os.getenv("PORT", "8000")), help="Port to bind to")
    parser.add_argument("--reload", action="store_true", help="Reload on source changes (development)")
    parser.add_argument(
        "--log-level",
        default=os.getenv("UVICORN_LOG_LEVEL", "info"),
        choices=["critical", "error", "warning", "info", "debug"],
    )
    return parser.parse_args(argv)


if __name__ == "__main__":
    args = parse_args()

    if not os.getenv("API_KEYS"):
        print("Warning: API_KEYS is not set; protected routes will answer 500.")

    uvicorn.run(
        "server.app:create_app",
        factory=True,
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=args.log_level,
    )
