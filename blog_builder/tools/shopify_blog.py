from __future__ import annotations

from typing import Any
from typing import Optional

import httpx

from blog_builder.config import Settings, settings as default_settings
from blog_builder.services.shopify_client import ShopifyClient, ShopifyConfigError
from blog_builder.tools.base import ArticlePayload, ArticlePublishResponse


class ShopifyBlogPublisher:
    def __init__(self, client: Optional[ShopifyClient] = None, settings: Optional[Settings] = None) -> None:
        self.settings = settings or default_settings
        self.client = client or ShopifyClient(self.settings)

    def publish(self, payload: ArticlePayload) -> ArticlePublishResponse:
        if not self.settings.blog_id:
            raise ShopifyConfigError("BLOG_ID の設定が必要です。")

        res = self.client.create_article(self.settings.blog_id, payload.to_article())
        body = self._decode_body(res)
        article = body.get("article") if isinstance(body, dict) else None

        if res.is_success and isinstance(article, dict):
            return ArticlePublishResponse(success=True, article=article, detail=body)
        return ArticlePublishResponse(success=False, article=None, detail=body)

    def _decode_body(self, res: httpx.Response) -> Any:
        # 失敗応答は JSON とは限らないので、その場合は本文をそのまま返す
        try:
            return res.json()
        except ValueError:
            return res.text
