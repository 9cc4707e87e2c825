from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from pathlib import Path
from typing import Optional, Sequence

from jinja2 import Environment, FileSystemLoader, select_autoescape

from blog_builder.schemas import ProductRecord


TEMPLATE_DIR = Path(__file__).resolve().parent.parent / 'templates'

# ja-JP ロケールでの通貨記号
CURRENCY_SYMBOLS = {
    'JPY': '¥',
    'USD': '$',
    'EUR': '€',
    'GBP': '£',
    'KRW': '₩',
    'CNY': 'CN¥',
    'TWD': 'NT$',
    'HKD': 'HK$',
    'AUD': 'A$',
    'CAD': 'CA$',
}


def format_price(amount: str, currency: str) -> str:
    # 端数は四捨五入（0から遠い方）で整数にし、ja-JP の通貨表記にする
    try:
        value = Decimal(str(amount).strip())
    except InvalidOperation:
        value = Decimal(0)
    if not value.is_finite():
        value = Decimal(0)

    # 28桁を超える金額も整数化できる
    whole = int(value.to_integral_value(rounding=ROUND_HALF_UP))
    code = (currency or 'JPY').upper()
    symbol = CURRENCY_SYMBOLS.get(code, f'{code} ')
    sign = '-' if whole < 0 else ''
    return f'{sign}{symbol}{abs(whole):,}'


class ArticleRenderer:
    def __init__(self, template_dir: Optional[Path] = None) -> None:
        self.env = Environment(
            loader=FileSystemLoader(str(template_dir or TEMPLATE_DIR)),
            autoescape=select_autoescape(['html', 'xml']),
        )
        self.env.filters['price'] = format_price

    def render(self, title: str, lead: str, products: Sequence[ProductRecord]) -> str:
        template = self.env.get_template('article.html')
        return template.render(title=title, lead=lead or '', products=list(products))
