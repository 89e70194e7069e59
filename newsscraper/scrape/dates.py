from __future__ import annotations

import re
from datetime import datetime

from dateutil import parser as date_parser

from newsscraper.core.utils import to_iso_z
from newsscraper.infra.logging import get_unified_logger

# YYYY-M-D / YYYY/M/D, or M-D-YYYY / M/D/YYYY
_EMBEDDED_DATE = re.compile(r"(\d{4}[-/]\d{1,2}[-/]\d{1,2})|(\d{1,2}[-/]\d{1,2}[-/]\d{4})")

logger = get_unified_logger("scrape", "date")


def _parse(text: str) -> str:
    # missing month/day fall to the 1st and missing time to midnight
    default = datetime(datetime.now().year, 1, 1)
    return to_iso_z(date_parser.parse(text, default=default))


def normalize_date(raw: str) -> str:
    """Loose date string -> ``YYYY-MM-DDTHH:MM:SS.mmmZ``, or ``""`` when nothing parses.

    Whole-string parse first, then the first embedded numeric date.
    Values without a zone are taken as UTC.
    """
    text = (raw or "").strip()
    if not text:
        return ""
    try:
        return _parse(text)
    except (ValueError, OverflowError):
        pass
    m = _EMBEDDED_DATE.search(text)
    if not m:
        logger.debug("no date in %r", text)
        return ""
    try:
        return _parse(m.group(0))
    except (ValueError, OverflowError):
        logger.debug("embedded date %r in %r did not parse", m.group(0), text)
        return ""
