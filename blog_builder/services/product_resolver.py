from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Iterable
from typing import Optional
from urllib.parse import unquote

import httpx
from pydantic import ValidationError

from blog_builder.config import Settings, settings as default_settings
from blog_builder.schemas import ProductNode, ProductRecord
from blog_builder.services.shopify_client import ShopifyApiError, ShopifyClient


logger = logging.getLogger(__name__)

PRODUCTS_MARKER = '/products/'
_BAD_PERCENT = re.compile(r'%(?![0-9A-Fa-f]{2})')


def extract_handle(url: str) -> Optional[str]:
    # `/products/` 以降、最初の `?` までをデコードしたもの。不正なエンコードはその URL だけ捨てる
    ix = url.find(PRODUCTS_MARKER)
    if ix == -1:
        return None
    raw = url[ix + len(PRODUCTS_MARKER):].split('?', 1)[0]
    if not raw or _BAD_PERCENT.search(raw):
        return None
    try:
        handle = unquote(raw, errors='strict')
    except UnicodeDecodeError:
        return None
    return handle or None


def extract_handles(urls: Iterable[str]) -> list[str]:
    handles: list[str] = []
    for url in urls:
        handle = extract_handle(url)
        if handle is None:
            logger.info('skip url without product handle: %s', url)
            continue
        handles.append(handle)
    return handles


@dataclass
class ResolutionReport:
    products: list[ProductRecord] = field(default_factory=list)
    failed_handles: list[str] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return bool(self.products)


class ProductResolver:
    def __init__(self, client: Optional[ShopifyClient] = None, settings: Optional[Settings] = None) -> None:
        self.settings = settings or default_settings
        self.client = client or ShopifyClient(self.settings)

    def resolve(self, handle: str) -> Optional[ProductRecord]:
        try:
            node = self.client.product_by_handle(handle)
        except (httpx.HTTPError, ShopifyApiError, ValueError) as e:
            logger.warning('product lookup failed for %s: %s', handle, e)
            return None

        if not node:
            logger.warning('product not found: %s', handle)
            return None

        try:
            product = ProductNode.model_validate(node)
        except ValidationError as e:
            logger.warning('unexpected product shape for %s: %s', handle, e)
            return None
        return product.to_record(self.settings.storefront_domain, handle=handle)

    def resolve_all(self, handles: Iterable[str]) -> ResolutionReport:
        # 入力順のまま1件ずつ取得する。失敗は数えるだけで他に影響させない
        report = ResolutionReport()
        for handle in handles:
            record = self.resolve(handle)
            if record is None:
                report.failed_handles.append(handle)
            else:
                report.products.append(record)
        logger.info(
            'resolved %d products (%d failed)', len(report.products), len(report.failed_handles)
        )
        return report
