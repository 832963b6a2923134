from decimal import Decimal
from functools import lru_cache
from typing import Optional
from urllib.parse import quote_plus

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="allow",
    )

    ENV: str = "local"
    log_level: str = "INFO"

    # Postgres
    postgres_user: str = "bookshop"
    postgres_password: str = "changeme"
    postgres_db: str = "bookshop"
    postgres_host: str = "localhost"
    postgres_port: str = "5432"
    DATABASE_URL: Optional[str] = None

    # JWT
    secret_key: str = "CHANGE_ME"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60

    # CORS
    cors_origins: str = "http://localhost:3000,http://localhost:5173"

    # Mail
    BREVO_API_KEY: Optional[str] = None
    MAIL_FROM: str = "orders@bookshop.local"
    STORE_NAME: str = "Bookshop"
    ADMIN_EMAILS: str = ""

    # Pricing rules
    SHIPPING_COST: Decimal = Decimal("5.99")
    VOLUME_DISCOUNT_MIN_ITEMS: int = 5
    VOLUME_DISCOUNT_PERCENT: Decimal = Decimal("5")
    LOYALTY_MIN_ORDERS: int = 10
    LOYALTY_DISCOUNT_PERCENT: Decimal = Decimal("10")
    CLAIM_CODE_LENGTH: int = 6

    @property
    def database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        encoded_password = quote_plus(self.postgres_password)
        return (
            f"postgresql+psycopg2://{self.postgres_user}:"
            f"{encoded_password}@{self.postgres_host}:"
            f"{self.postgres_port}/{self.postgres_db}"
        )

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    @property
    def admin_email_list(self) -> list[str]:
        return [e.strip() for e in self.ADMIN_EMAILS.split(",") if e.strip()]


@lru_cache()
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
