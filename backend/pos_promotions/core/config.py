from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    ENV: str = "development"
    DATABASE_URL: str = "sqlite:///./promotions.db"

    # CORS
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:8081"

    LOG_LEVEL: str = "INFO"

    # uvicorn
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # Часовой пояс магазина: время акций сравнивается по местным часам
    STORE_TIMEZONE: str = "UTC"

    # Значения по умолчанию для шаблонов акций
    PROMOTION_DEFAULT_DURATION_DAYS: int = 30
    WEEKEND_ACTIVE_TIME_START: str = "10:00:00"
    WEEKEND_ACTIVE_TIME_END: str = "22:00:00"

    # Demo seed
    SEED_STORE_ID: int = 1

    @property
    def cors_origins_list(self) -> List[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    class Config:
        env_file = ".env"


settings = Settings()
