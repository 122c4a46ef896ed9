from pathlib import Path
from functools import lru_cache
from typing import Optional
import logging
import os

import pandas as pd

from config.registry import get_cache_dir
from config.validation import validate_dataset_strict
from utils.broadway_client import cache_path, ensure_dataset

# Configure logging
logger = logging.getLogger(__name__)


def _get_file_mtime(path: Path) -> float:
    """Get file modification time for cache invalidation."""
    try:
        return os.path.getmtime(path)
    except OSError:
        return 0.0


@lru_cache(maxsize=8)
def _load_dataset_cached(name: str, cache_dir: str, mtime: float) -> pd.DataFrame:
    """
    Load a dataset through the on-disk cache and check its schema.

    Args:
        name: Registered dataset name
        cache_dir: Cache directory as a string (hashable cache key)
        mtime: Cache file modification time (used for cache key)

    Returns:
        Validated DataFrame
    """
    df = ensure_dataset(name, cache_dir=Path(cache_dir))
    return validate_dataset_strict(df, name)


def _load(name: str, cache_dir: Optional[Path]) -> pd.DataFrame:
    cache_dir = Path(cache_dir) if cache_dir is not None else get_cache_dir()
    path = cache_path(name, cache_dir)
    if not path.exists():
        # Fetch now so the in-process entry is keyed on the written file's mtime
        ensure_dataset(name, cache_dir=cache_dir)
    mtime = _get_file_mtime(path)
    return _load_dataset_cached(name, str(cache_dir), mtime).copy()


def load_grosses(cache_dir: Optional[Path] = None) -> pd.DataFrame:
    """Load raw weekly grosses (one row per show, theatre and week).

    Downloads on first use, then reads the local cache. The in-process copy is
    keyed on the cache file's modification time, so clearing the cache forces
    a reload.

    Raises:
        NetworkError: If the first download fails
        CorruptCacheError: If the cache file is unreadable
        SchemaMismatchError: If expected columns are missing
    """
    df = _load("grosses", cache_dir)
    logger.debug(f"Loaded {len(df):,} raw grosses rows")
    return df


def load_synopses(cache_dir: Optional[Path] = None) -> pd.DataFrame:
    """Load show synopses for read-only display."""
    return _load("synopses", cache_dir)


def reset_loader_cache() -> None:
    """Drop in-process copies; the next load re-reads the cache file."""
    _load_dataset_cached.cache_clear()
