"""Application settings read from the environment."""

import os

from pydantic import BaseModel


class Settings(BaseModel):
    JWT_SECRET: str = os.getenv("JWT_SECRET", "change-me")
    JWT_ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS256")
    ACCESS_TOKEN_EXPIRES_SECONDS: int = int(os.getenv("ACCESS_TOKEN_EXPIRES_SECONDS", "3600"))

    # "fake" or "stripe"
    PAYMENT_GATEWAY: str = os.getenv("PAYMENT_GATEWAY", "fake")
    STRIPE_SECRET_KEY: str = os.getenv("STRIPE_SECRET_KEY", "")
    STRIPE_PUBLISHABLE_KEY: str = os.getenv("STRIPE_PUBLISHABLE_KEY", "")
    STRIPE_WEBHOOK_SECRET: str = os.getenv("STRIPE_WEBHOOK_SECRET", "")
    CURRENCY: str = os.getenv("CURRENCY", "usd")
    MAX_ITEM_QUANTITY: int = int(os.getenv("MAX_ITEM_QUANTITY", "10000"))

    DEFAULT_PAGE_SIZE: int = int(os.getenv("DEFAULT_PAGE_SIZE", "10"))
    MAX_PAGE_SIZE: int = int(os.getenv("MAX_PAGE_SIZE", "100"))

    LOG_DIR: str = os.getenv("LOG_DIR", "logs")


settings = Settings()
