#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""newsscraper HTTP API entry.

- Single entry: run by `python index.py` with no CLI args.
- Runtime parameters come from `config.yml` (created with defaults when missing),
  then environment variables.
- Logs go to the console and, when ``log_file`` is configured, to that file.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict

from newsscraper.core.config import load_config_file, load_settings
from newsscraper.infra.logging import get_unified_logger, init_logging

MINIMAL_CONFIG = (
    "timeout: 10\n"
    "max_articles: 10\n"
    "concurrency: 10\n"
    "request_deadline: 60\n"
    "cors_origins:\n"
    "  - http://localhost:3000\n"
    "host: 127.0.0.1\n"
    "port: 5000\n"
)

# ---------------- Configuration & Logging ----------------


def load_app_config(config_path: str) -> Dict[str, Any]:
    """Load config.yml, writing a minimal default file first when it is missing.

    An existing file is never modified.
    """
    p = Path(config_path)
    if not p.exists():
        p.write_text(MINIMAL_CONFIG, encoding="utf-8")
        get_unified_logger("app", "config").info("created default config at %s", p)
    data = load_config_file(p)
    if not isinstance(data, dict):
        raise RuntimeError("Invalid config content")
    return data


def prepare_logging(log_file: str = "") -> None:
    """Initialize console logging and attach a file handler when ``log_file`` is set."""
    os.environ["NSC_LOG_LEVEL"] = os.environ.get("NSC_LOG_LEVEL", "INFO")
    init_logging(force=True)
    if not log_file:
        return

    root = logging.getLogger("")
    if not any(isinstance(h, logging.FileHandler) for h in root.handlers):
        fh = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        fmt = logging.Formatter(
            "[%(asctime)s][%(levelname)s][%(name)s] %(message)s", "%Y-%m-%d %H:%M:%S"
        )
        fh.setFormatter(fmt)
        fh.setLevel(root.level)
        root.addHandler(fh)


def main() -> None:
    from newsscraper.api.app import create_app

    config_path = os.getenv("NSC_CONFIG", "config.yml")
    conf = load_app_config(config_path)
    prepare_logging(str(conf.get("log_file") or ""))
    settings = load_settings(config_path)
    get_unified_logger("app", "startup").info(
        "Server is running on port %s (test: http://%s:%s/api/test)",
        settings.port,
        settings.host,
        settings.port,
    )
    create_app(settings).run(host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
