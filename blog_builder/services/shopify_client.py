from __future__ import annotations

import logging
from typing import Any
from typing import Optional

import httpx

from blog_builder.config import Settings, settings as default_settings


logger = logging.getLogger(__name__)


PRODUCT_BY_HANDLE_QUERY = """
query productByHandle($handle: String!) {
  productByHandle(handle: $handle) {
    title
    descriptionHtml
    featuredImage { url }
    priceRangeV2 {
      minVariantPrice { amount currencyCode }
    }
    onlineStoreUrl
    handle
  }
}
"""


class ShopifyConfigError(Exception):
    pass


class ShopifyApiError(Exception):
    pass


class ShopifyClient:
    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.settings = settings or default_settings
        self._transport = transport

    def _admin_base_url(self) -> str:
        if not self.settings.shopify_domain or not self.settings.shopify_admin_token:
            raise ShopifyConfigError("SHOPIFY_DOMAIN/SHOPIFY_ADMIN_TOKEN の設定が必要です。")
        return f"https://{self.settings.shopify_domain}/admin/api/{self.settings.shopify_api_version}"

    def _headers(self) -> dict[str, str]:
        return {
            "X-Shopify-Access-Token": self.settings.shopify_admin_token or "",
            "Content-Type": "application/json",
        }

    def _client(self) -> httpx.Client:
        return httpx.Client(timeout=self.settings.shopify_timeout_seconds, transport=self._transport)

    def product_by_handle(self, handle: str) -> Optional[dict[str, Any]]:
        # 該当商品なしは None。部分的な GraphQL エラーはノードが返っていれば採用する
        url = f"{self._admin_base_url()}/graphql.json"
        body = {"query": PRODUCT_BY_HANDLE_QUERY, "variables": {"handle": handle}}

        with self._client() as client:
            res = client.post(url, headers=self._headers(), json=body)

        if res.status_code >= 400:
            raise ShopifyApiError(f"GraphQL 呼び出し失敗: {res.status_code} {res.text[:300]}")

        payload = res.json()
        if not isinstance(payload, dict):
            raise ShopifyApiError(f"GraphQL 応答が不正です: {res.text[:300]}")
        data = payload.get("data") or {}
        if not isinstance(data, dict):
            raise ShopifyApiError(f"GraphQL 応答の data が不正です: {res.text[:300]}")

        node = data.get("productByHandle")
        errors = payload.get("errors")
        if errors:
            if not node:
                raise ShopifyApiError(f"GraphQL エラー: {str(errors)[:300]}")
            logger.warning("partial GraphQL errors for %s: %s", handle, str(errors)[:300])
        return node

    def create_article(self, blog_id: str, article: dict[str, Any]) -> httpx.Response:
        # 失敗時も呼び出し側で応答本文を診断用に返すので、ここでは例外にしない
        url = f"{self._admin_base_url()}/blogs/{blog_id}/articles.json"
        with self._client() as client:
            return client.post(url, headers=self._headers(), json={"article": article})
