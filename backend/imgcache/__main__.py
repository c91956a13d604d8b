"""
Entrypoint: python -m imgcache [--address :8081] [--cache-dir ./image_cache]
"""

import argparse
import logging
from typing import List, Optional

import uvicorn

from .app import create_app
from .config import ImageCacheSettings, parse_address


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="imgcache",
        description="Pull-through cache for remote images",
    )
    parser.add_argument(
        "-address", "--address",
        dest="address",
        default=None,
        help="address to listen on (default: :8081)",
    )
    parser.add_argument(
        "--cache-dir",
        dest="cache_dir",
        default=None,
        help="cache root directory (default: ./image_cache)",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)

    settings = ImageCacheSettings.from_env()
    overrides = {
        name: value
        for name, value in (("address", args.address), ("cache_dir", args.cache_dir))
        if value is not None
    }
    if overrides:
        settings = settings.model_copy(update=overrides)

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    host, port = parse_address(settings.address)
    uvicorn.run(create_app(settings), host=host, port=port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
