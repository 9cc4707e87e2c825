from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Callable
from typing import Optional

from blog_builder.config import DEFAULT_AUTHOR, Settings, settings as default_settings
from blog_builder.schemas import GenerateRequest, GenerateResponse
from blog_builder.services.article_renderer import ArticleRenderer
from blog_builder.services.product_resolver import ProductResolver, extract_handles
from blog_builder.services.shopify_client import ShopifyClient
from blog_builder.tools.base import ArticlePayload
from blog_builder.tools.shopify_blog import ShopifyBlogPublisher


logger = logging.getLogger(__name__)

JST = timezone(timedelta(hours=9))


class BlogBuilderError(Exception):
    status_code = 500

    def __init__(self, message: str, detail: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {'error': self.message}
        if self.detail is not None:
            payload['detail'] = self.detail
        return payload


class InvalidRequestError(BlogBuilderError):
    status_code = 400


class ProductsNotFoundError(BlogBuilderError):
    status_code = 404


class PublishFailedError(BlogBuilderError):
    status_code = 500


def date_slug_from_jst(now: datetime) -> str:
    # JST の暦日を YYMMDD にする。tz なしは UTC とみなす
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(JST).strftime('%y%m%d')


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BlogPipelineService:
    def __init__(
        self,
        settings: Optional[Settings] = None,
        client: Optional[ShopifyClient] = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.settings = settings or default_settings
        client = client or ShopifyClient(self.settings)
        self.resolver = ProductResolver(client, self.settings)
        self.renderer = ArticleRenderer()
        self.publisher = ShopifyBlogPublisher(client, self.settings)
        self.clock = clock

    def generate(self, body: Any) -> GenerateResponse:
        req = self._validate(body)

        handles = extract_handles(req.urls)
        if not handles:
            raise InvalidRequestError('有効な商品URLがありません')

        report = self.resolver.resolve_all(handles)
        if not report.succeeded:
            raise ProductsNotFoundError('商品情報が取得できませんでした')

        slug = self._resolve_slug(req.slug)
        body_html = self.renderer.render(req.title, req.lead or '', report.products)

        result = self.publisher.publish(
            ArticlePayload(
                title=req.title,
                author=DEFAULT_AUTHOR,
                body_html=body_html,
                handle=slug,
            )
        )
        if not result.success or result.article is None:
            logger.error('article creation rejected: %s', str(result.detail)[:500])
            raise PublishFailedError('ブログ投稿に失敗しました', detail=result.detail)

        logger.info(
            'draft article created: handle=%s products=%d skipped=%d',
            slug,
            len(report.products),
            len(report.failed_handles),
        )
        return GenerateResponse(
            ok=True,
            article=result.article,
            preview_url=self._preview_url(result.article, slug),
        )

    def _validate(self, body: Any) -> GenerateRequest:
        if not isinstance(body, dict):
            body = {}

        urls = body.get('urls')
        if not isinstance(urls, list) or not urls:
            raise InvalidRequestError('URL がありません')

        title = body.get('title')
        if not isinstance(title, str) or not title:
            raise InvalidRequestError('タイトルがありません')

        slug = body.get('slug')
        lead = body.get('lead')
        return GenerateRequest(
            urls=[u for u in urls if isinstance(u, str)],
            title=title,
            slug=slug if isinstance(slug, str) else None,
            lead=lead if isinstance(lead, str) else None,
        )

    def _resolve_slug(self, slug: Optional[str]) -> str:
        cleaned = (slug or '').strip()
        return cleaned or date_slug_from_jst(self.clock())

    def _preview_url(self, article: dict[str, Any], slug: str) -> str:
        return f"https://{self.settings.shopify_domain}/blogs/{article.get('blog_id')}/{slug}"
