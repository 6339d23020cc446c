#!/usr/bin/env python
"""
Start the Accounts API under uvicorn.

Usage:
    python run_api.py
    python run_api.py --reload               # Development mode
    python run_api.py --log-level debug
"""

import argparse

import uvicorn

from shared.config import get_settings


def main():
    settings = get_settings()

    parser = argparse.ArgumentParser(description="Run the Accounts API server")
    parser.add_argument("--reload", action="store_true", help="Restart on code changes")
    parser.add_argument("--host", default=settings.host, help="Interface to bind")
    parser.add_argument("--port", type=int, default=settings.port, help="Port to listen on")
    parser.add_argument("--log-level", default=settings.log_level.lower(), help="Uvicorn log level")
    args = parser.parse_args()

    uvicorn.run(
        "api.app:app",
        host=args.host,
        port=args.port,
        reload=args.reload or settings.reload,
        log_level=args.log_level,
    )


if __name__ == "__main__":
    main()
