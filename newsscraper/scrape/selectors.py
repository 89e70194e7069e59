from __future__ import annotations

import json
from pathlib import Path
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional

import yaml

from newsscraper.core.models import PROFILE_FIELDS, SelectorProfile
from newsscraper.infra.logging import get_unified_logger

DEFAULT_KEY = "default"

_ABS_CBN: Dict[str, List[str]] = {
    "article": [
        ".news-item",
        ".article-item",
        ".news-card",
        ".story-card",
        "article",
        ".news-list__item",
        ".news-list__article",
        ".news-list__card",
        ".news-list__story",
        ".news-list__content",
        ".news-list__wrapper",
        ".news-list__container",
        ".news-list__grid",
        ".news-list__row",
        ".news-list__col",
        ".news-list__box",
        ".news-list__panel",
        ".news-list__block",
        ".news-list__section",
    ],
    "title": [
        ".news-title",
        ".article-title",
        ".story-title",
        "h2",
        "h3",
        "h1",
        ".news-list__title",
        ".news-list__headline",
        ".news-list__heading",
        ".news-list__name",
        ".news-list__label",
        ".news-list__text",
        ".news-list__content h1",
        ".news-list__content h2",
        ".news-list__content h3",
        ".news-list__content h4",
        ".news-list__content h5",
        ".news-list__content h6",
    ],
    "author": [
        ".author",
        ".byline",
        ".writer",
        ".article-author",
        'span[itemprop="author"]',
        "span.author",
        "div.author",
        'meta[name="author"]',
        'meta[property="article:author"]',
        ".news-list__author",
        ".news-list__byline",
        ".news-list__writer",
        ".news-list__contributor",
        ".news-list__reporter",
        ".news-list__journalist",
    ],
    "date": [
        ".date",
        ".timestamp",
        ".article-date",
        ".publish-date",
        "time",
        'span[itemprop="datePublished"]',
        "span.date",
        'meta[name="pubdate"]',
        'meta[property="article:published_time"]',
        ".news-list__date",
        ".news-list__time",
        ".news-list__timestamp",
        ".news-list__published",
        ".news-list__posted",
        ".news-list__updated",
    ],
    "image": [
        "img.news-image",
        "img.article-image",
        "img.story-image",
        ".news-image img",
        ".article-image img",
        ".story-image img",
        ".news-list__image img",
        ".news-list__photo img",
        ".news-list__thumbnail img",
        ".news-list__media img",
        ".news-list__picture img",
        ".news-list__illustration img",
        ".news-list__graphic img",
        ".news-list__banner img",
        ".news-list__cover img",
    ],
}

_DEFAULT: Dict[str, List[str]] = {
    "article": [
        "article",
        ".article",
        ".post",
        ".news-item",
        ".story",
        ".news-story",
        ".news-article",
        ".content",
        ".main-content",
    ],
    "title": ["h1", "h2", ".title", ".headline", ".story-title", ".article-title", "h3"],
    "author": [
        ".author",
        ".byline",
        ".writer",
        ".author-name",
        ".article-author",
        ".contributor",
        'span[itemprop="author"]',
        "span.author",
        "div.author",
        'meta[name="author"]',
        'meta[property="article:author"]',
    ],
    "date": [
        ".date",
        ".published",
        ".timestamp",
        "time",
        ".article-date",
        ".publish-date",
        ".posted-on",
        'span[itemprop="datePublished"]',
        "span.date",
        'meta[name="pubdate"]',
        'meta[property="article:published_time"]',
    ],
    "image": [
        "img.featured-image",
        "img.article-image",
        "img.news-image",
        ".featured-image img",
        ".article-image img",
        ".news-image img",
        'img[src*="news"]',
        'img[src*="article"]',
    ],
}

BUILTIN_SELECTORS: Dict[str, Dict[str, List[str]]] = {
    "abs-cbn.com": _ABS_CBN,
    DEFAULT_KEY: _DEFAULT,
}


def load_selector_overrides(path: str | Path) -> Dict[str, Dict[str, List[str]]]:
    """Read ``host -> field -> [selectors]`` from a YAML or JSON file."""
    p = Path(path)
    if not p.exists():
        return {}
    if p.suffix.lower() in (".yml", ".yaml"):
        data = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    else:
        data = json.loads(p.read_text(encoding="utf-8"))

    if not isinstance(data, dict):
        raise ValueError(f"Selectors file {p} must contain a mapping")

    # normalize structure: ensure keys -> lists of strings
    out: Dict[str, Dict[str, List[str]]] = {}
    for host, rules in data.items():
        d: Dict[str, List[str]] = {}
        for k in PROFILE_FIELDS:
            v = rules.get(k) if isinstance(rules, dict) else None
            if isinstance(v, list):
                d[k] = [str(x) for x in v if isinstance(x, str) and x.strip()]
        if d:
            out[str(host).lower()] = d
    return out


def merge_selectors(
    base: Dict[str, Dict[str, List[str]]], overrides: Dict[str, Dict[str, List[str]]]
) -> Dict[str, Dict[str, List[str]]]:
    out = {k: {kk: list(vv) for kk, vv in v.items()} for k, v in base.items()}
    for host, rules in overrides.items():
        if host not in out:
            out[host] = {k: list(v) for k, v in rules.items()}
            continue
        for key in PROFILE_FIELDS:
            if key in rules:
                current = out[host].get(key, [])
                out[host][key] = list(current) + [x for x in rules[key] if x not in current]
    return out


class SelectorRegistry:
    """Immutable hostname -> SelectorProfile lookup with a mandatory default."""

    def __init__(self, table: Mapping[str, Mapping[str, List[str]]]) -> None:
        if DEFAULT_KEY not in table:
            raise ValueError("selector table needs a 'default' entry")
        default = dict(table[DEFAULT_KEY])
        missing = [k for k in PROFILE_FIELDS if not default.get(k)]
        if missing:
            raise ValueError(f"default selector profile is missing {missing}")
        profiles: Dict[str, SelectorProfile] = {}
        for host, rules in table.items():
            # hosts without a field borrow the default list for it
            filled = {k: (rules.get(k) or default[k]) for k in PROFILE_FIELDS}
            profiles[host.lower()] = SelectorProfile.from_dict(filled)
        self._profiles: Mapping[str, SelectorProfile] = MappingProxyType(profiles)

    @property
    def default(self) -> SelectorProfile:
        return self._profiles[DEFAULT_KEY]

    def hosts(self) -> List[str]:
        return sorted(h for h in self._profiles if h != DEFAULT_KEY)

    def profile_for(self, hostname: Optional[str]) -> SelectorProfile:
        """Exact-hostname profile, else the default one."""
        return self._profiles.get((hostname or "").lower(), self.default)


def build_registry(selectors_file: Optional[str | Path] = None) -> SelectorRegistry:
    table = BUILTIN_SELECTORS
    if selectors_file:
        overrides = load_selector_overrides(selectors_file)
        if overrides:
            table = merge_selectors(BUILTIN_SELECTORS, overrides)
            get_unified_logger("scrape", "selectors").info(
                "merged selector overrides for %s from %s", sorted(overrides), selectors_file
            )
    return SelectorRegistry(table)
