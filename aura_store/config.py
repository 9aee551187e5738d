from decimal import Decimal
from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    database_url: str = "sqlite:///./aura_store.db"
    ENV: str = "local"

    secret_key: str
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60
    # token endpoint of the identity provider that issues customer tokens
    AUTH_TOKEN_URL: str = "https://auth.devidaura.com/oauth/token"

    RAZORPAY_KEY_ID: str = ""
    RAZORPAY_KEY_SECRET: str = ""
    CURRENCY: str = "INR"

    BREVO_API_KEY: str = ""
    EMAIL_SENDER: str = "orders@devidaura.com"
    STORE_NAME: str = "Devid Aura"
    ADMIN_EMAILS: List[str] = []

    # Checkout rules, in rupees
    FREE_SHIPPING_THRESHOLD: Decimal = Decimal("999")
    STANDARD_DELIVERY_CHARGE: Decimal = Decimal("50")
    CANCELLATION_FEE_PERCENT: int = 5
    PAYMENT_EXPIRY_MINUTES: int = 30

    CORS_ORIGINS: List[str] = [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]
    LOG_LEVEL: str = "INFO"

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "allow"

settings = Settings()
