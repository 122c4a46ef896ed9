"""
Broadway Grosses Dataset Client

This module downloads the public Broadway box-office datasets (TidyTuesday,
2020-04-28) and memoizes them to a local cache directory. No API key is
required.

Two datasets are registered in ``config.registry.DATASETS``:
- ``grosses``: one row per show, theatre and week
- ``synopses``: one free-text synopsis per show

On the first call for a dataset the CSV is fetched over HTTP, parsed with
pandas and pickled to ``<cache_dir>/<name>.pkl``. Later calls load the pickle
without touching the network. A corrupt cache is reported, never deleted
automatically; use ``clear_cache`` (or ``scripts/refresh_cache.py --clear``).

Usage:
    from utils.broadway_client import ensure_dataset

    grosses = ensure_dataset("grosses")
    synopses = ensure_dataset("synopses")
"""

import io
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd
import requests

from config.registry import DATASETS, get_cache_dir, get_dataset_url, load_settings

logger = logging.getLogger(__name__)

# =============================================================================
# CONSTANTS
# =============================================================================

# Default timeout for dataset downloads (seconds); the grosses CSV is ~6 MB
DEFAULT_TIMEOUT = 30

CACHE_SUFFIX = ".pkl"


# =============================================================================
# EXCEPTIONS
# =============================================================================


class BroadwayDataError(Exception):
    """Base exception for dataset fetching, caching and schema failures."""
    pass


class NetworkError(BroadwayDataError):
    """Raised when a remote dataset is unreachable or its body is malformed."""
    pass


class CorruptCacheError(BroadwayDataError):
    """Raised when a local cache file cannot be read back as a table."""

    def __init__(self, path: Path, reason: str):
        self.path = Path(path)
        super().__init__(f"Cache file {self.path} is unreadable ({reason}). "
                         f"Delete it to force a fresh download.")


class UnknownDatasetError(BroadwayDataError):
    """Raised when a dataset name is not registered."""
    pass


# =============================================================================
# CACHE FILES
# =============================================================================


def cache_path(name: str, cache_dir: Optional[Path] = None) -> Path:
    """Return the cache file path for a dataset."""
    cache_dir = Path(cache_dir) if cache_dir is not None else get_cache_dir()
    return cache_dir / f"{name}{CACHE_SUFFIX}"


def load_cached(path: Path) -> pd.DataFrame:
    """
    Load a cached table.

    Args:
        path: Cache file written by ``write_cache``

    Returns:
        The cached DataFrame

    Raises:
        CorruptCacheError: If the file cannot be unpickled or is not a DataFrame
    """
    try:
        df = pd.read_pickle(path)
    except Exception as e:
        logger.warning(f"Corrupt cache file {path}: {e}")
        raise CorruptCacheError(path, str(e)) from e

    if not isinstance(df, pd.DataFrame):
        logger.warning(f"Cache file {path} holds {type(df).__name__}, not a DataFrame")
        raise CorruptCacheError(path, f"unexpected object of type {type(df).__name__}")

    return df


def write_cache(df: pd.DataFrame, path: Path) -> Path:
    """Persist a table snapshot, creating the cache directory if needed."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    df.to_pickle(path)
    logger.info(f"Cached {len(df):,} rows to {path}")
    return path


# =============================================================================
# NETWORK
# =============================================================================


def _resolve_url(name: str) -> str:
    url = get_dataset_url(name)
    if not url:
        raise UnknownDatasetError(f"Unknown dataset: {name}. Known: {sorted(DATASETS)}")
    return url


def fetch_dataset(name: str, timeout: int = DEFAULT_TIMEOUT) -> pd.DataFrame:
    """
    Download a dataset and parse it into a DataFrame. No retry is attempted.

    Args:
        name: Registered dataset name
        timeout: Request timeout in seconds

    Returns:
        Parsed DataFrame

    Raises:
        UnknownDatasetError: If the name is not registered
        NetworkError: If the request fails or the body is not a usable CSV
    """
    url = _resolve_url(name)

    logger.debug(f"Fetching dataset {name} from {url}")

    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()

    except requests.exceptions.Timeout:
        logger.warning(f"Timeout fetching dataset {name}")
        raise NetworkError(f"Timeout fetching dataset {name} from {url}")

    except requests.exceptions.HTTPError as e:
        status_code = e.response.status_code if e.response is not None else None
        logger.warning(f"HTTP error fetching dataset {name}: {e}")
        raise NetworkError(f"HTTP error {status_code} fetching dataset {name}: {e}")

    except requests.exceptions.RequestException as e:
        logger.warning(f"Request error fetching dataset {name}: {e}")
        raise NetworkError(f"Request error fetching dataset {name}: {e}")

    try:
        df = pd.read_csv(io.StringIO(response.text))
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
        logger.warning(f"Malformed CSV body for dataset {name}: {e}")
        raise NetworkError(f"Malformed CSV body for dataset {name}: {e}")

    if df.empty:
        raise NetworkError(f"Dataset {name} downloaded from {url} has no rows")

    logger.info(f"Downloaded dataset {name}: {len(df):,} rows, {len(df.columns)} columns")
    return df


# =============================================================================
# PUBLIC API
# =============================================================================


def ensure_dataset(
    name: str,
    cache_dir: Optional[Path] = None,
    timeout: Optional[int] = None,
) -> pd.DataFrame:
    """
    Return a dataset, downloading it only when no cache file exists.

    Args:
        name: Registered dataset name ("grosses" or "synopses")
        cache_dir: Cache directory (default: settings ``cache_dir``)
        timeout: Request timeout in seconds (default: settings ``request_timeout``)

    Returns:
        The dataset as a DataFrame

    Raises:
        NetworkError: If the download fails (first call only)
        CorruptCacheError: If the cache file exists but cannot be read

    Example:
        >>> grosses = ensure_dataset("grosses")
        >>> grosses[["week_ending", "show", "weekly_gross"]].head()
    """
    _resolve_url(name)
    path = cache_path(name, cache_dir)

    if path.exists():
        logger.debug(f"Using cached dataset {name} from {path}")
        return load_cached(path)

    if timeout is None:
        timeout = load_settings().get("request_timeout", DEFAULT_TIMEOUT)

    df = fetch_dataset(name, timeout=timeout)
    write_cache(df, path)
    return df


def clear_cache(name: Optional[str] = None, cache_dir: Optional[Path] = None) -> List[Path]:
    """
    Delete cache files so the next ``ensure_dataset`` call downloads again.

    Args:
        name: Dataset to clear (default: every registered dataset)
        cache_dir: Cache directory (default: settings ``cache_dir``)

    Returns:
        Paths that were removed
    """
    names = [name] if name else list(DATASETS)
    removed: List[Path] = []
    for n in names:
        path = cache_path(n, cache_dir)
        if path.exists():
            path.unlink()
            removed.append(path)
    logger.info(f"Cleared {len(removed)} cache file(s)")
    return removed


def get_cache_info(cache_dir: Optional[Path] = None) -> Dict[str, Dict[str, Any]]:
    """
    Get information about the local cache state.

    Returns:
        Mapping of dataset name to path, existence, size in bytes and
        last-modified time (UTC, None when absent)
    """
    info: Dict[str, Dict[str, Any]] = {}
    for name in DATASETS:
        path = cache_path(name, cache_dir)
        exists = path.exists()
        stat = path.stat() if exists else None
        info[name] = {
            "path": str(path),
            "exists": exists,
            "size_bytes": stat.st_size if stat else 0,
            "modified": datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc) if stat else None,
        }
    return info
