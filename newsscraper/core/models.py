from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, Tuple

PROFILE_FIELDS: Tuple[str, ...] = ("article", "title", "author", "date", "image")


@dataclass(frozen=True)
class SelectorProfile:
    """Ordered selector lists for one hostname."""

    article: Tuple[str, ...]
    title: Tuple[str, ...]
    author: Tuple[str, ...]
    date: Tuple[str, ...]
    image: Tuple[str, ...]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SelectorProfile":
        return cls(**{k: tuple(str(s) for s in data.get(k) or ()) for k in PROFILE_FIELDS})

    def to_dict(self) -> Dict[str, List[str]]:
        return {k: list(getattr(self, k)) for k in PROFILE_FIELDS}


@dataclass(frozen=True)
class ArticleRecord:
    title: str
    author: str
    published_at: str
    source: str
    url: str
    image_url: Optional[str] = None
    body: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "author": self.author,
            "date": self.published_at,
            "source": self.source,
            "url": self.url,
            "imageUrl": self.image_url,
            "content": self.body,
        }


@dataclass(frozen=True)
class ArticleSummary:
    """Best-effort record from the generic single-article pass."""

    title: str
    author: str
    date: str
    image_url: str
    body: str
    url: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "author": self.author,
            "date": self.date,
            "imageUrl": self.image_url,
            "body": self.body,
            "url": self.url,
        }


@dataclass
class ScrapeResult:
    source: str
    total: int = 0
    success: int = 0
    failed: int = 0
    articles: List[ArticleRecord] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source": self.source,
            "total": self.total,
            "success": self.success,
            "failed": self.failed,
            "news": [a.to_dict() for a in self.articles],
        }

    def stats(self) -> Dict[str, Any]:
        d = asdict(self)
        d.pop("articles")
        return d
