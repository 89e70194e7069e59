from __future__ import annotations

import json
from typing import Any

from newsscraper.core.errors import NoArticlesFoundError, ScrapeError

EXIT_EMPTY = 1
EXIT_FAILED = 2


def to_json(payload: Any, pretty: bool = True) -> str:
    return json.dumps(payload, ensure_ascii=False, indent=2 if pretty else None)


def exit_code_for(error: ScrapeError) -> int:
    """No articles is a soft miss; everything else is a failed run."""
    return EXIT_EMPTY if isinstance(error, NoArticlesFoundError) else EXIT_FAILED
