from decimal import Decimal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CORS_ORIGINS = "http://localhost:3000,http://127.0.0.1:3000,http://localhost:5173,http://127.0.0.1:5173"


class Settings(BaseSettings):
    tax_rate_percent: Decimal = Field(default=Decimal("0"), alias="PDV_TAX_RATE_PERCENT")
    discount_percent: Decimal = Field(default=Decimal("0"), alias="PDV_DISCOUNT_PERCENT")
    currency_symbol: str = Field(default="R$", alias="PDV_CURRENCY_SYMBOL")
    log_level: str = Field(default="INFO", alias="PDV_LOG_LEVEL")

    orders_api_url: str | None = Field(default=None, alias="ORDERS_API_URL")
    orders_api_token: str | None = Field(default=None, alias="ORDERS_API_TOKEN")
    orders_api_timeout_seconds: float = Field(default=10.0, alias="ORDERS_API_TIMEOUT_SECONDS")

    cors_allowed_origins: str = Field(default=DEFAULT_CORS_ORIGINS, alias="CORS_ALLOWED_ORIGINS")

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        case_sensitive=False,
        populate_by_name=True,
    )

    @property
    def CORS_ALLOWED_ORIGINS_LIST(self) -> list[str]:
        return [item.strip() for item in self.cors_allowed_origins.split(",") if item.strip()]

    @field_validator("tax_rate_percent", "discount_percent")
    @classmethod
    def validate_percent(cls, value: Decimal) -> Decimal:
        if value < 0:
            raise ValueError("PDV_TAX_RATE_PERCENT/PDV_DISCOUNT_PERCENT must not be negative")
        return value

    @field_validator("orders_api_timeout_seconds")
    @classmethod
    def validate_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("ORDERS_API_TIMEOUT_SECONDS must be positive")
        return value

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        return (value or "INFO").strip().upper()


settings = Settings()


# Dependency
def get_settings() -> Settings:
    return settings
