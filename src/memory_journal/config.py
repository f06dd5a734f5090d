"""Configuration loading and saving.

Config file location: ~/.config/memory-journal/config.toml

Schema:
    [api]
    base_url = "https://api.example.com"

    [auth]
    token = "..."  # optional; without it the public endpoints are used

    [feed]
    page_size = 5

    [search]
    page_size = 10

    [comments]
    page_size = 10

    [autocomplete]
    limit = 10
    debounce = 1.0

Environment overrides:
    MEMORY_JOURNAL_BASE_URL
    MEMORY_JOURNAL_TOKEN
"""

import os
import tomllib
from dataclasses import dataclass
from pathlib import Path

import tomli_w

CONFIG_DIR = Path.home() / ".config" / "memory-journal"
CONFIG_FILE = CONFIG_DIR / "config.toml"


@dataclass
class AppConfig:
    base_url: str
    token: str | None = None
    feed_page_size: int = 5
    search_page_size: int = 10
    comments_page_size: int = 10
    autocomplete_limit: int = 10
    autocomplete_debounce: float = 1.0


def load_config(config_path: Path = CONFIG_FILE) -> AppConfig:
    """Load and validate config from TOML file."""
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "rb") as f:
        data = tomllib.load(f)

    api_data = data.get("api", {})
    auth_data = data.get("auth", {})
    feed_data = data.get("feed", {})
    search_data = data.get("search", {})
    comments_data = data.get("comments", {})
    autocomplete_data = data.get("autocomplete", {})

    base_url = os.environ.get("MEMORY_JOURNAL_BASE_URL") or api_data.get("base_url", "")
    if not base_url:
        raise ValueError("Config missing required api.base_url")

    token = os.environ.get("MEMORY_JOURNAL_TOKEN") or auth_data.get("token") or None

    config = AppConfig(
        base_url=base_url,
        token=token,
        feed_page_size=int(feed_data.get("page_size", 5)),
        search_page_size=int(search_data.get("page_size", 10)),
        comments_page_size=int(comments_data.get("page_size", 10)),
        autocomplete_limit=int(autocomplete_data.get("limit", 10)),
        autocomplete_debounce=float(autocomplete_data.get("debounce", 1.0)),
    )

    for name in ("feed_page_size", "search_page_size", "comments_page_size"):
        if getattr(config, name) <= 0:
            raise ValueError(f"Config value {name} must be positive")

    return config


def save_config(config: AppConfig, config_path: Path = CONFIG_FILE) -> None:
    """Write config to TOML file with restricted permissions."""
    config_path.parent.mkdir(parents=True, exist_ok=True)

    data = {
        "api": {"base_url": config.base_url},
        "feed": {"page_size": config.feed_page_size},
        "search": {"page_size": config.search_page_size},
        "comments": {"page_size": config.comments_page_size},
        "autocomplete": {
            "limit": config.autocomplete_limit,
            "debounce": config.autocomplete_debounce,
        },
    }

    if config.token:
        data["auth"] = {"token": config.token}

    with open(config_path, "wb") as f:
        tomli_w.dump(data, f)

    # Restrict permissions: the file may contain a bearer token
    os.chmod(config_path, 0o600)


def config_exists(config_path: Path = CONFIG_FILE) -> bool:
    """Check if config file exists."""
    return config_path.exists()
