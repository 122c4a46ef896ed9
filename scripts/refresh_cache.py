#!/usr/bin/env python3
"""
Refresh Broadway Dataset Cache CLI

Downloads the Broadway datasets into the local cache so the dashboard starts
without a network call, and optionally clears stale or corrupt cache files
first.

Usage:
    python scripts/refresh_cache.py
    python scripts/refresh_cache.py --clear
    python scripts/refresh_cache.py --clear --dataset grosses --cache-dir /tmp/broadway

Output:
    Writes `<cache_dir>/<dataset>.pkl` for each dataset (default cache_dir: data/cache).
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from config.registry import DATASETS, get_cache_dir
from config.validation import validate_dataset
from utils.broadway_client import BroadwayDataError, clear_cache, ensure_dataset

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


def refresh(names: List[str], cache_dir: Path, clear: bool = False) -> int:
    """Fetch (or re-read) each dataset; return a process exit code."""
    for name in names:
        if clear:
            clear_cache(name, cache_dir=cache_dir)
        try:
            df = ensure_dataset(name, cache_dir=cache_dir)
        except BroadwayDataError as e:
            logger.error(f"{name}: {e}")
            return 1
        ok, errors = validate_dataset(df, name)
        if not ok:
            for err in errors:
                logger.error(err)
            return 1
        logger.info(f"{name}: {len(df):,} rows ready")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Download Broadway datasets into the local cache.",
    )
    parser.add_argument(
        "--dataset",
        choices=sorted(DATASETS),
        help="Only refresh this dataset (default: all)",
    )
    parser.add_argument(
        "--cache-dir",
        type=Path,
        help="Cache directory (default: cache_dir from config.yaml)",
    )
    parser.add_argument(
        "--clear",
        action="store_true",
        help="Delete existing cache files before downloading",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose/debug logging",
    )

    args = parser.parse_args(argv)

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    names = [args.dataset] if args.dataset else list(DATASETS)
    cache_dir = args.cache_dir or get_cache_dir()
    logger.info(f"Refreshing {', '.join(names)} in {cache_dir}")
    return refresh(names, cache_dir, clear=args.clear)


if __name__ == "__main__":
    sys.exit(main())
