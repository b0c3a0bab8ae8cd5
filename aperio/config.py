"""Load and validate configuration from YAML with env var substitution."""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any

import yaml

DEMO_KEY = "demo"

DEFAULT_DOMAIN_FILTER = [
    "bloomberg.com",
    "reuters.com",
    "wsj.com",
    "ft.com",
    "marketwatch.com",
    "cnbc.com",
]

DEFAULT_AUDIO_POOL = [
    "https://www.soundjay.com/misc/sounds/fail-buzzer-02.wav",
    "https://www.soundjay.com/misc/sounds/fail-buzzer-03.wav",
    "https://www.learningcontainer.com/wp-content/uploads/2020/02/Kalimba.mp3",
]

ALL_SOURCES = ["news", "market", "economic", "enhanced"]

_ENV_PATTERN = re.compile(r"\$\{([^}]+)\}")


def _load_dotenv(path: str | Path = ".env") -> None:
    """Load a .env file into os.environ (without overwriting existing vars)."""
    env_path = Path(path)
    if not env_path.is_file():
        return
    with open(env_path) as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            key, _, value = line.partition("=")
            key = key.strip()
            value = value.strip().strip("'\"")
            if key and key not in os.environ:
                os.environ[key] = value


def _resolve_env_vars(value: Any) -> Any:
    """Recursively resolve ${ENV_VAR} patterns in config values."""
    if isinstance(value, str):
        match = _ENV_PATTERN.search(value)
        if not match:
            return value
        if match.group(0) == value:
            return os.environ.get(match.group(1), "")
        return _ENV_PATTERN.sub(lambda m: os.environ.get(m.group(1), ""), value)
    if isinstance(value, dict):
        return {k: _resolve_env_vars(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_resolve_env_vars(item) for item in value]
    return value


def load_config(path: str | Path = "config.yaml") -> dict[str, Any]:
    """Load config from YAML file and resolve environment variables."""
    _load_dotenv()

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path) as f:
        raw = yaml.safe_load(f) or {}

    return _resolve_env_vars(raw)


def is_demo_key(api_key: str | None) -> bool:
    """An unset or literal "demo" key selects canned data over live calls."""
    return not api_key or api_key == DEMO_KEY


def get_llm_task_config(config: dict, task: str) -> dict:
    """Get provider name and model for a given LLM task.

    Tasks: search, context, dialogue, article.
    """
    tasks = config.get("llm", {}).get("tasks", {})
    task_cfg = tasks.get(task, {})
    provider_name = task_cfg.get("provider", "perplexity")
    model_override = task_cfg.get("model")

    providers = config.get("llm", {}).get("providers", {})
    provider_cfg = providers.get(provider_name, {})
    api_key = provider_cfg.get("api_key", "")
    provider_type = provider_cfg.get("type", "openai_compatible")
    if provider_type != "demo" and is_demo_key(api_key):
        provider_type = "demo"

    return {
        "task": task,
        "provider_name": provider_name,
        "provider_type": provider_type,
        "api_key": api_key,
        "base_url": provider_cfg.get("base_url", "https://api.perplexity.ai"),
        "model": model_override or provider_cfg.get("default_model", ""),
        "max_retries": provider_cfg.get("max_retries", 2),
        "timeout": provider_cfg.get("timeout", 60),
        "max_tokens": task_cfg.get("max_tokens", 1500),
        "temperature": task_cfg.get("temperature", 0.3),
    }


def get_service_config(config: dict, service: str) -> dict:
    """Settings for a data provider (market, economic, images, database)."""
    defaults = {
        "market": {"base_url": "https://www.alphavantage.co/query"},
        "economic": {"base_url": "https://api.stlouisfed.org/fred"},
        "images": {
            "base_url": "https://generativelanguage.googleapis.com/v1/models",
            "model": "gemini-2.0-flash-exp",
        },
        "database": {"url": "", "anon_key": ""},
    }
    cfg = dict(defaults.get(service, {}))
    cfg.update(config.get(service, {}) or {})
    cfg.setdefault("api_key", "")
    cfg.setdefault("timeout", 30)
    cfg.setdefault("max_retries", 0)
    return cfg


def get_news_domain_filter(config: dict) -> list[str]:
    return config.get("news", {}).get("domain_filter", DEFAULT_DOMAIN_FILTER)


def get_aggregate_sources(config: dict) -> list[str]:
    """Return the context sources to fan out to, in declared order."""
    return config.get("aggregate", {}).get("sources", ALL_SOURCES)


def get_source_timeout(config: dict) -> float | None:
    """Per-source deadline in seconds, or None for no deadline."""
    timeout = config.get("aggregate", {}).get("source_timeout")
    return float(timeout) if timeout else None


def get_audio_pool(config: dict) -> list[str]:
    return config.get("audio", {}).get("placeholder_urls", DEFAULT_AUDIO_POOL)


def get_log_file(config: dict) -> str | None:
    return config.get("logging", {}).get("file", "data/aperio.log")


def get_log_level(config: dict) -> str:
    return config.get("logging", {}).get("level", "INFO").upper()
