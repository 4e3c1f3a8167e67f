"""
Application configuration using pydantic-settings.
Settings are loaded once at startup and passed explicitly to the components
that need them. Missing integration values are logged at startup rather than
rejected, so the webhook listener can still come up.
"""
from functools import lru_cache

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    # Application
    app_env: str = "development"
    app_host: str = "0.0.0.0"
    app_port: int = Field(
        default=3000,
        validation_alias=AliasChoices("app_port", "port"),
    )
    log_level: str = "INFO"

    # Shopify
    shopify_store_domain: str = ""
    shopify_access_token: str = ""
    shopify_api_secret: str = ""  # Webhook HMAC shared secret
    shopify_app_server: str = "http://localhost:3000"  # Public base URL of this service
    shopify_api_version: str = "2024-04"
    shopify_webhook_topic: str = "inventory_levels/update"
    shopify_timeout_seconds: float = 10.0

    # Inventory history
    inventory_log_capacity: int = Field(default=20, ge=1)

    # Xero
    xero_client_id: str = ""
    xero_client_secret: str = ""
    xero_redirect_uri: str = ""  # Defaults to {shopify_app_server}/xero/callback
    xero_timeout_seconds: float = 10.0

    # Encryption (Fernet key for server-side token custody)
    encryption_key: str = ""

    # Sentry
    sentry_dsn: str = ""

    @property
    def inventory_webhook_address(self) -> str:
        return f"{self.shopify_app_server.rstrip('/')}/webhook/inventory"

    @property
    def xero_callback_url(self) -> str:
        if self.xero_redirect_uri:
            return self.xero_redirect_uri
        return f"{self.shopify_app_server.rstrip('/')}/xero/callback"

    def missing_values(self) -> list[str]:
        """Names of integration settings that are empty."""
        required = {
            "SHOPIFY_STORE_DOMAIN": self.shopify_store_domain,
            "SHOPIFY_ACCESS_TOKEN": self.shopify_access_token,
            "SHOPIFY_API_SECRET": self.shopify_api_secret,
            "XERO_CLIENT_ID": self.xero_client_id,
            "XERO_CLIENT_SECRET": self.xero_client_secret,
        }
        return [name for name, value in required.items() if not value]


@lru_cache()
def get_settings() -> Settings:
    return Settings()
