from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

DEFAULT_TIMEOUT: float = 10.0
DEFAULT_MAX_ARTICLES: int = 10
DEFAULT_CONCURRENCY: int = 10
DEFAULT_REQUEST_DEADLINE: float = 60.0
DEFAULT_CORS_ORIGINS: List[str] = ["http://localhost:3000"]
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 5000

# env var -> config key
_ENV_KEYS = {
    "NSC_TIMEOUT": "timeout",
    "NSC_MAX_ARTICLES": "max_articles",
    "NSC_CONCURRENCY": "concurrency",
    "NSC_REQUEST_DEADLINE": "request_deadline",
    "NSC_SELECTORS_FILE": "selectors_file",
    "NSC_CORS_ORIGINS": "cors_origins",
    "NSC_HOST": "host",
    "PORT": "port",
}


def load_config_file(path: Optional[str | Path]) -> Dict[str, Any]:
    """Load a YAML or JSON config file into a dict; missing file gives ``{}``."""
    if not path:
        return {}
    p = Path(path)
    if not p.exists():
        return {}

    with p.open("r", encoding="utf-8") as f:
        if p.suffix.lower() in (".yml", ".yaml"):
            data = yaml.safe_load(f) or {}
        else:
            data = json.load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file {p} must contain a mapping")
    return data


def load_env() -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for env_name, key in _ENV_KEYS.items():
        v = os.getenv(env_name)
        if v is None or not v.strip():
            continue
        if key == "cors_origins":
            out[key] = [x.strip() for x in v.split(",") if x.strip()]
        else:
            out[key] = v.strip()
    return out


def merge_config(*layers: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Merge config dicts left to right; later non-None values win."""
    out: Dict[str, Any] = {}
    for layer in layers:
        for k, v in (layer or {}).items():
            if v is not None:
                out[k] = v
    return out


@dataclass
class ScraperSettings:
    timeout: float = DEFAULT_TIMEOUT
    max_articles: int = DEFAULT_MAX_ARTICLES
    concurrency: int = DEFAULT_CONCURRENCY
    request_deadline: float = DEFAULT_REQUEST_DEADLINE
    selectors_file: Optional[str] = None
    cors_origins: List[str] = field(default_factory=lambda: list(DEFAULT_CORS_ORIGINS))
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT

    def __post_init__(self) -> None:
        if self.timeout <= 0:
            raise ValueError("timeout must be positive")
        if self.max_articles < 1:
            raise ValueError("max_articles must be at least 1")
        if self.request_deadline <= 0:
            raise ValueError("request_deadline must be positive")
        # fan-out never exceeds the per-request article cap
        self.concurrency = max(1, min(int(self.concurrency), int(self.max_articles)))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScraperSettings":
        origins = data.get("cors_origins")
        if isinstance(origins, str):
            origins = [x.strip() for x in origins.split(",") if x.strip()]
        return cls(
            timeout=float(data.get("timeout", DEFAULT_TIMEOUT)),
            max_articles=int(data.get("max_articles", DEFAULT_MAX_ARTICLES)),
            concurrency=int(data.get("concurrency", DEFAULT_CONCURRENCY)),
            request_deadline=float(data.get("request_deadline", DEFAULT_REQUEST_DEADLINE)),
            selectors_file=(str(data["selectors_file"]) if data.get("selectors_file") else None),
            cors_origins=list(origins) if origins else list(DEFAULT_CORS_ORIGINS),
            host=str(data.get("host") or DEFAULT_HOST),
            port=int(data.get("port", DEFAULT_PORT)),
        )


def load_settings(
    config_path: Optional[str | Path] = None, overrides: Optional[Dict[str, Any]] = None
) -> ScraperSettings:
    """Defaults < config file < environment < explicit overrides."""
    return ScraperSettings.from_dict(
        merge_config(load_config_file(config_path), load_env(), overrides)
    )
