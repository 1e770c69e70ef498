# spotprice/config_loader.py
import os
import yaml
from pathlib import Path

RUNTIME_CONFIG_PATH = Path("config/runtime.yaml")


def _split_regions(value):
    if isinstance(value, str):
        return [r.strip() for r in value.split(",") if r.strip()]
    return list(value or [])


def _setting(env_name, cfg, key, default):
    value = os.getenv(env_name)
    if value is None or value == "":
        value = cfg.get(key)
    return default if value is None else value


def load_runtime_config(path=None):
    """
    Loads runtime configuration for the pricing fetcher.
    Priority:
      1) Environment variables
      2) config/runtime.yaml (if present)
    """
    cfg = {}
    path = Path(path) if path else RUNTIME_CONFIG_PATH

    if path.exists():
        with open(path) as f:
            cfg = yaml.safe_load(f) or {}

    regions = _split_regions(os.getenv("SPOT_REGIONS") or cfg.get("regions"))
    lookback_minutes = int(_setting("LOOKBACK_MINUTES", cfg, "lookback_minutes", 30))
    product_description = os.getenv("PRODUCT_DESCRIPTION") or cfg.get("product_description") or "Linux/UNIX"
    fetch_timeout = float(_setting("FETCH_TIMEOUT_SECONDS", cfg, "fetch_timeout_seconds", 60))
    max_workers = int(_setting("FETCH_MAX_WORKERS", cfg, "fetch_max_workers", 8))

    if lookback_minutes <= 0:
        raise ValueError(f"lookback_minutes must be positive, got {lookback_minutes}")
    if fetch_timeout <= 0:
        raise ValueError(f"fetch_timeout_seconds must be positive, got {fetch_timeout}")
    # One thread per query kind at minimum
    if max_workers < 2:
        raise ValueError(f"fetch_max_workers must be at least 2, got {max_workers}")

    return {
        "regions": regions,
        "lookback_minutes": lookback_minutes,
        "product_description": product_description,
        "fetch_timeout_seconds": fetch_timeout,
        "fetch_max_workers": max_workers,
        "raw": cfg,
    }
