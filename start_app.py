# start_app.py
"""Launch the order processing API server."""

from __future__ import annotations

import argparse
import os
import sys

import uvicorn
from dotenv import load_dotenv

import config


def main(argv: list[str] | None = None) -> None:
    """Load settings, apply command line overrides, then start the API."""

    parser = argparse.ArgumentParser()
    parser.add_argument(
        "--host",
        default=os.getenv("HOST", "0.0.0.0"),  # nosec B104: bind for local development
    )
    parser.add_argument("--port", type=int, default=int(os.getenv("PORT", "8000")))
    parser.add_argument(
        "--sample-data",
        action="store_true",
        help="Seed demo orders into an empty database",
    )
    parser.add_argument(
        "--no-promoter",
        action="store_true",
        help="Start without the background pending-order promoter",
    )
    args = parser.parse_args(argv)

    load_dotenv()  # load environment variables from a .env file

    if args.sample_data:
        os.environ["LOAD_SAMPLE_DATA"] = "true"
    if args.no_promoter:
        os.environ["PROMOTER_ENABLED"] = "false"

    config.get_settings.cache_clear()
    settings = config.get_settings()  # ensure settings are initialized with any override

    try:
        uvicorn.run(
            "order_api.app.main:app",
            host=args.host,
            port=args.port,
            log_level=settings.log_level.lower(),
        )
    except ModuleNotFoundError as exc:
        missing = exc.name or str(exc)
        print(
            f"Missing dependency: {missing}. Install it with 'pip install {missing}'",
            file=sys.stderr,
        )
        raise SystemExit(1)


if __name__ == "__main__":
    main()
