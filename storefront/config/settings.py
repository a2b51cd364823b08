from typing import List

from pydantic_settings import BaseSettings
import os


class Settings(BaseSettings):
    MONGO_URI: str = os.getenv("MONGO_URI", "mongodb://localhost:27017")
    MONGO_DATABASE: str = os.getenv("MONGO_DATABASE", "storefront")

    PLATFORM_NAME: str = os.getenv("PLATFORM_NAME", "Storefront")

    JWT_SECRET_KEY: str = os.getenv("JWT_SECRET_KEY", "change-me")
    JWT_LIFETIME_SECONDS: int = int(os.getenv("JWT_LIFETIME_SECONDS", "3600"))

    # Browser app base URL, used to build the checkout redirect targets
    CLIENT_URL: str = os.getenv("CLIENT_URL", "http://localhost:5173")
    CLIENT_ORIGIN: str = os.getenv("CLIENT_ORIGIN", "http://localhost:5173")

    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    REDIS_URL: str = os.getenv("REDIS_URL", "redis://localhost:6379")
    RATE_LIMITING_ENABLED: bool = os.getenv("RATE_LIMITING_ENABLED", "false").lower() in ("1", "true", "yes")

    # For ALLOWED_IPS, we need special handling
    @property
    def allowed_ips(self) -> List[str]:
        ips = os.getenv("ALLOWED_IPS", "")
        return [ip.strip() for ip in ips.split(",") if ip.strip()]

    @property
    def origins(self) -> List[str]:
        return [origin.strip() for origin in self.CLIENT_ORIGIN.split(",") if origin.strip()]

    stripe_keys: dict = {
        "secret_key": os.getenv("STRIPE_SECRET_KEY", ""),
        "publishable_key": os.getenv("STRIPE_PUBLISHABLE_KEY", ""),
        "currency": os.getenv("STRIPE_CURRENCY", "usd"),
    }

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"


# create a singleton instance
settings = Settings()
