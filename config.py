"""Configuration for the StayEase API"""

import os
import logging

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)


class Config:
    """Application configuration, read once from the environment"""

    # Database
    DATABASE_URL = os.getenv("DATABASE_URL", "mongodb://localhost:27017")
    DATABASE_NAME = os.getenv("DATABASE_NAME", "Prime-Pillar")

    # Tokens
    ACCESS_TOKEN_SECRET = os.getenv("ACCESS_TOKEN_SECRET")
    TOKEN_TTL_DAYS = int(os.getenv("TOKEN_TTL_DAYS", "30"))
    TOKEN_ALGORITHM = "HS256"

    # Payments
    STRIPE_SECRET_KEY = os.getenv("STRIPE_SECRET_KEY")
    PAYMENT_CURRENCY = os.getenv("PAYMENT_CURRENCY", "usd")

    # Server
    PORT = int(os.getenv("PORT", "5000"))
    CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

    @classmethod
    def validate(cls):
        """Fail fast on settings the API cannot run without"""
        if not cls.ACCESS_TOKEN_SECRET:
            raise RuntimeError("ACCESS_TOKEN_SECRET is not set")
        if not cls.STRIPE_SECRET_KEY:
            logger.warning("STRIPE_SECRET_KEY is not set; payment intents will fail")
