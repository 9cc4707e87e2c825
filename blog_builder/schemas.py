from __future__ import annotations

from typing import Any
from typing import Optional

from pydantic import BaseModel, Field


class GenerateRequest(BaseModel):
    urls: list[str] = Field(default_factory=list, description='商品ページURL（入力順に掲載）')
    title: str = Field(..., description='ブログ記事タイトル')
    slug: Optional[str] = Field(default=None, description='未指定ならJSTの日付 (YYMMDD)')
    lead: Optional[str] = Field(default=None, description='タイトル下のリード文')


class ProductRecord(BaseModel):
    title: str
    image: Optional[str] = None
    description_html: str = ''
    price_amount: str = '0'
    currency_code: str = 'JPY'
    url: str


class FeaturedImage(BaseModel):
    url: Optional[str] = None


class MoneyV2(BaseModel):
    amount: Optional[str] = None
    currencyCode: Optional[str] = None


class PriceRangeV2(BaseModel):
    minVariantPrice: Optional[MoneyV2] = None


class ProductNode(BaseModel):
    # productByHandle の応答ノード。欠けたフィールドは既定値として扱う
    title: Optional[str] = None
    descriptionHtml: Optional[str] = None
    featuredImage: Optional[FeaturedImage] = None
    priceRangeV2: Optional[PriceRangeV2] = None
    onlineStoreUrl: Optional[str] = None
    handle: Optional[str] = None

    def to_record(self, storefront_domain: str, handle: str = '') -> Optional[ProductRecord]:
        if not self.title:
            return None
        price = self.priceRangeV2.minVariantPrice if self.priceRangeV2 else None
        url = self.onlineStoreUrl or f"https://{storefront_domain}/products/{self.handle or handle}"
        return ProductRecord(
            title=self.title,
            image=self.featuredImage.url if self.featuredImage else None,
            description_html=self.descriptionHtml or '',
            price_amount=(price.amount if price else None) or '0',
            currency_code=(price.currencyCode if price else None) or 'JPY',
            url=url,
        )


class GenerateResponse(BaseModel):
    ok: bool = True
    article: dict[str, Any]
    preview_url: str
