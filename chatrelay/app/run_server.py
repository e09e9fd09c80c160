#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Chat relay server launcher.

Usage:
    python -m chatrelay.app.run_server                  # host/port from settings
    python -m chatrelay.app.run_server --port 8000
    python -m chatrelay.app.run_server --host 127.0.0.1 --reload
"""

import argparse
import uvicorn
from pathlib import Path

from chatrelay.app.config.settings import settings


def main():
    parser = argparse.ArgumentParser(description='Start the chat relay server')
    parser.add_argument(
        '--host',
        type=str,
        default=settings.HOST,
        help=f'address to bind (default: {settings.HOST})'
    )
    parser.add_argument(
        '--port',
        type=int,
        default=settings.PORT,
        help=f'port to listen on (default: {settings.PORT}, or $PORT)'
    )
    parser.add_argument(
        '--reload',
        action='store_true',
        help='reload on code changes (development)'
    )

    args = parser.parse_args()

    current_dir = Path(__file__).parent

    print("=" * 60)
    print(f"{settings.APP_NAME}")
    print("=" * 60)
    print(f"host:   {args.host}")
    print(f"port:   {args.port}")
    print(f"reload: {'on' if args.reload else 'off'}")
    print(f"origins: {', '.join(settings.CORS_ORIGINS)}")
    print("=" * 60)

    uvicorn.run(
        "chatrelay.app.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        reload_dirs=[str(current_dir)] if args.reload else None,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
