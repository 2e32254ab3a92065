from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    PROJECT_NAME: str = "Care Invoicing"

    DATABASE_URL: str = "sqlite:///./care_invoicing.db"

    SECRET_KEY: str = "change-me"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 15
    REFRESH_TOKEN_EXPIRE_DAYS: int = 7

    UPLOADS_DIR: str = "uploads"
    EXPORTS_DIR: str = "exports"

    # Profile defaults for new users
    DEFAULT_HST_PERCENTAGE: float = 13
    DEFAULT_MILEAGE_RATE: float = 0.61

    INVOICE_DUE_DAYS: int = 30

    CORS_ORIGINS: list[str] = ["*"]
    LOG_LEVEL: str = "INFO"


settings = Settings()
