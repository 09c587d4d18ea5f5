"""
Debug entry-point for the TurboContent backend.

Usage
-----
  python debug.py                # hot-reload, DEBUG log
  python debug.py --no-reload    # single process
  python debug.py --port 8080
"""

from __future__ import annotations

import argparse
import logging
import os

# force DEBUG before anything imports `settings`
os.environ.setdefault("LOG_LEVEL", "DEBUG")
os.environ.setdefault("DEBUG", "true")

from turbocontent.infra.logging_config import ShortPathFormatter, configure_logging

formatter = ShortPathFormatter(
    "%(asctime)s %(levelname)-8s [%(name)s] %(message)s"
)
configure_logging(formatter, level=logging.DEBUG)

logger = logging.getLogger("debug")


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="TurboContent – debug server")
    parser.add_argument("--host", default="127.0.0.1", help="Bind address (default: 127.0.0.1)")
    parser.add_argument("--port", type=int, default=8000, help="Uvicorn listen port (default: 8000)")
    parser.add_argument("--no-reload", action="store_true", help="Disable hot-reload")
    return parser.parse_args()


def main() -> None:
    args = _parse_args()

    import uvicorn

    use_reload = not args.no_reload
    logger.info(
        "Starting TurboContent  host=%s  port=%s  reload=%s",
        args.host, args.port, use_reload,
    )

    uvicorn.run(
        "turbocontent.main:app",
        host=args.host,
        port=args.port,
        reload=use_reload,
        log_level="debug",
        log_config=None,  # keep our handlers
    )


if __name__ == "__main__":
    main()
