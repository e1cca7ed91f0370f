#!/usr/bin/env python3
"""
QuantumEdge -- job board API server.

Usage:
  python main.py
  python main.py --port 5000
  python main.py --host 0.0.0.0 --reload

Environment variables (see core/config.py for the full list):
  ENVIRONMENT    "production" enables Secure; SameSite=None session cookies
                 and makes SECRET_KEY mandatory.
  SECRET_KEY     Token signing secret, at least 32 characters.
  DATABASE_URL   SQLAlchemy URL. Defaults to a SQLite file in the project root.
  PORT           Listen port when --port is not given (default 3000).
"""

import argparse

import uvicorn

from core.config import get_settings


def main() -> None:
    settings = get_settings()
    parser = argparse.ArgumentParser(
        description="Run the QuantumEdge API server.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--host", default="127.0.0.1", help="Interface to bind (default: 127.0.0.1)")
    parser.add_argument(
        "--port",
        type=int,
        default=settings.port,
        help="Port to listen on (default: $PORT or 3000)",
    )
    parser.add_argument("--reload", action="store_true", help="Restart on code changes (development only)")
    args = parser.parse_args()

    uvicorn.run("asgi:app", host=args.host, port=args.port, reload=args.reload)


if __name__ == "__main__":
    main()
