from pathlib import Path
from functools import lru_cache
from typing import Any, Dict, Optional
import copy
import logging
import os

import yaml

CONFIG_DIR = Path(__file__).parent
PROJECT_ROOT = CONFIG_DIR.parent
DEFAULT_SETTINGS_PATH = PROJECT_ROOT / "config.yaml"

logger = logging.getLogger(__name__)

TIDYTUESDAY_BASE_URL = (
    "https://raw.githubusercontent.com/rfordatascience/tidytuesday/master/data/2020/2020-04-28"
)

# Remote datasets, keyed by the name used for the local cache file
DATASETS: Dict[str, Dict[str, str]] = {
    "grosses": {
        "url": f"{TIDYTUESDAY_BASE_URL}/grosses.csv",
        "description": "Weekly Broadway grosses per show and theatre (1985-2020)",
    },
    "synopses": {
        "url": f"{TIDYTUESDAY_BASE_URL}/synopses.csv",
        "description": "Free-text synopsis per show",
    },
}

DEFAULT_SETTINGS: Dict[str, Any] = {
    "cache_dir": "data/cache",
    "min_year": 2010,
    "year_bounds": [2010, 2020],
    "top_n": 20,
    "request_timeout": 30,
    "datasets": {name: {"url": meta["url"]} for name, meta in DATASETS.items()},
    "regression": {
        "response": "weekly_gross",
        "predictors": ["avg_ticket_price", "pct_capacity"],
        "indicator": "holiday",
        "n_samples": 2000,
        "random_state": 42,
        "priors": {
            "alpha_1": 1e-6,
            "alpha_2": 1e-6,
            "lambda_1": 1e-6,
            "lambda_2": 1e-6,
        },
    },
}


def _get_file_mtime(path: Path) -> float:
    """Get file modification time for cache invalidation."""
    try:
        return os.path.getmtime(path)
    except OSError:
        return 0.0


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


@lru_cache(maxsize=8)
def _load_yaml_cached(file_path: str, mtime: float) -> Dict[str, Any]:
    """
    Load a YAML file with caching based on modification time.

    Args:
        file_path: Path to YAML file
        mtime: File modification time (used for cache key)

    Returns:
        Parsed mapping (empty if the file is missing or blank)
    """
    path = Path(file_path)
    if not path.exists():
        return {}
    with open(path, "r", encoding="utf-8") as f:
        content = yaml.safe_load(f) or {}
    if not isinstance(content, dict):
        raise ValueError(f"{path.name}: expected a mapping at top level, got {type(content).__name__}")
    return content


def load_settings(path: Optional[Path] = None) -> Dict[str, Any]:
    """Load dashboard settings from ``config.yaml`` merged over the defaults.

    This function is cached based on file modification time. The
    ``BROADWAY_CACHE_DIR`` environment variable overrides ``cache_dir``.

    Args:
        path: Settings file to read (default: ``config.yaml`` at the project root)

    Returns:
        A fresh settings dictionary; callers may modify it freely.
    """
    path = Path(path) if path is not None else DEFAULT_SETTINGS_PATH
    overrides = _load_yaml_cached(str(path), _get_file_mtime(path))
    settings = _deep_merge(DEFAULT_SETTINGS, overrides)

    env_cache_dir = os.getenv("BROADWAY_CACHE_DIR")
    if env_cache_dir:
        settings["cache_dir"] = env_cache_dir

    logger.debug(f"Loaded settings from {path} ({len(overrides)} top-level overrides)")
    return settings


def get_cache_dir(settings: Optional[Dict[str, Any]] = None) -> Path:
    """Resolve the cache directory, relative paths being taken from the project root."""
    settings = settings if settings is not None else load_settings()
    cache_dir = Path(settings["cache_dir"])
    if not cache_dir.is_absolute():
        cache_dir = PROJECT_ROOT / cache_dir
    return cache_dir


def get_dataset_url(name: str, settings: Optional[Dict[str, Any]] = None) -> Optional[str]:
    """Return the configured URL for a dataset, or None if the name is unknown."""
    settings = settings if settings is not None else load_settings()
    entry = settings.get("datasets", {}).get(name)
    if entry and entry.get("url"):
        return entry["url"]
    meta = DATASETS.get(name)
    return meta["url"] if meta else None
