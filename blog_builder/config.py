from __future__ import annotations

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_AUTHOR = "Edward'sStuff"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file='.env', env_file_encoding='utf-8')

    app_name: str = 'Blog Builder'
    env: str = 'dev'
    log_level: str = 'INFO'

    shopify_domain: Optional[str] = None
    shopify_admin_token: Optional[str] = None
    shopify_api_version: str = '2024-10'
    shopify_timeout_seconds: float = 20.0
    blog_id: Optional[str] = None

    @property
    def storefront_domain(self) -> str:
        # 管理画面ドメインからストアフロント側のホスト名を作る
        return (self.shopify_domain or '').replace('.myshopify.com', '')


settings = Settings()
