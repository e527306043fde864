from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings with environment variable support"""

    # Application
    APP_NAME: str = "Retail Analytics Engine"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"

    # Forecasting
    FORECAST_HORIZON_DAYS: int = 30

    # Restock
    RESTOCK_THRESHOLD_DAYS: int = 14

    # Performance
    PERFORMANCE_PERIOD_DAYS: int = 30

    # Inventory summary
    LOW_STOCK_THRESHOLD: int = 5

    # Sales summary
    DEFAULT_PAYMENT_METHOD: str = "cash"

    # Monitoring
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    class Config:
        env_file = ".env"
        env_prefix = "RETAIL_ANALYTICS_"
        case_sensitive = True

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self._validate_analytics_settings()

    def _validate_analytics_settings(self):
        """Reject call defaults the engine cannot work with"""
        if self.FORECAST_HORIZON_DAYS < 0:
            raise ValueError("FORECAST_HORIZON_DAYS cannot be negative")

        if self.RESTOCK_THRESHOLD_DAYS < 0:
            raise ValueError("RESTOCK_THRESHOLD_DAYS cannot be negative")

        if self.PERFORMANCE_PERIOD_DAYS <= 0:
            raise ValueError("PERFORMANCE_PERIOD_DAYS must be positive")

        if self.LOW_STOCK_THRESHOLD < 0:
            raise ValueError("LOW_STOCK_THRESHOLD cannot be negative")

        if self.LOG_LEVEL.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown LOG_LEVEL: {self.LOG_LEVEL}")

        # getattr(logging, LOG_LEVEL) needs the upper-case level name
        self.LOG_LEVEL = self.LOG_LEVEL.upper()


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


settings = get_settings()
