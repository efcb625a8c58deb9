#!/usr/bin/env python
"""
Start the analytics API.

    python run_server.py --dev        # uvicorn with reload
    python run_server.py              # uvicorn, several workers
    python run_server.py --gunicorn   # gunicorn + uvicorn workers (gunicorn.conf.py)
"""

import argparse
import os
import subprocess

from marketplace_analytics.config import get_settings

APP = "marketplace_analytics.serving.api.main:app"


def parse_args() -> argparse.Namespace:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Marketplace Revenue Analytics API")
    parser.add_argument("--dev", action="store_true", help="Reload on code changes")
    parser.add_argument("--gunicorn", action="store_true", help="Serve through gunicorn")
    parser.add_argument("--host", default=settings.api_host)
    parser.add_argument("--port", type=int, default=settings.api_port)
    parser.add_argument("--workers", type=int, default=int(os.getenv("WORKERS", 4)))
    return parser.parse_args()


def main() -> None:
    args = parse_args()

    if args.gunicorn:
        env = dict(os.environ, BIND=f"{args.host}:{args.port}", WORKERS=str(args.workers))
        subprocess.run(["gunicorn", APP, "-c", "gunicorn.conf.py"], check=True, env=env)
        return

    import uvicorn

    if args.dev:
        uvicorn.run(APP, host=args.host, port=args.port, reload=True, reload_dirs=["marketplace_analytics"])
    else:
        uvicorn.run(
            APP,
            host=args.host,
            port=args.port,
            workers=args.workers,
            proxy_headers=True,
            server_header=False,
        )


if __name__ == "__main__":
    main()
