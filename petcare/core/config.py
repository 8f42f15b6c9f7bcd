from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List

class Settings(BaseSettings):
    APP_NAME: str = "PetCare POS"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Database
    MONGODB_URL: str = "mongodb://localhost:27017"
    DATABASE_NAME: str = "petcare"

    # Security (staff and customer tokens are separate namespaces)
    SECRET_KEY: str
    CUSTOMER_SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24
    CUSTOMER_TOKEN_EXPIRE_DAYS: int = 30

    # CORS
    CORS_ORIGINS: List[str] = ["*"]

    # Business rules
    DELIVERY_CHARGE: float = 50.0
    LOYALTY_SPEND_PER_POINT: int = 100
    EXPIRY_WINDOW_DAYS: int = 30

    # Counter allocation
    ALLOCATOR_MAX_RETRIES: int = 3

    # Seed admin
    ADMIN_USERNAME: str = "admin"
    ADMIN_EMAIL: str | None = None
    ADMIN_PASSWORD: str | None = None

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore"
    )

settings = Settings()
