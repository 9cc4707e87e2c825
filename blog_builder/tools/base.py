from __future__ import annotations

from dataclasses import dataclass
from typing import Any
from typing import Optional


@dataclass
class ArticlePayload:
    title: str
    author: str
    body_html: str
    handle: str

    def to_article(self) -> dict[str, Any]:
        # published_at を null にして下書きとして作成する
        return {
            "title": self.title,
            "author": self.author,
            "body_html": self.body_html,
            "handle": self.handle,
            "published_at": None,
        }


@dataclass
class ArticlePublishResponse:
    success: bool
    article: Optional[dict[str, Any]]
    detail: Any = None
