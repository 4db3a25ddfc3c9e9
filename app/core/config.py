from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator, model_validator

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    ENV: str = "local"
    APP_NAME: str = "Airport Pickups API"
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    LOG_LEVEL: str = "INFO"
    # Comma-separated origins for CORS. If empty, all origins are allowed.
    CORS_ORIGINS: str = ""

    # Either a full DATABASE_URL or the individual DB_* parameters.
    DATABASE_URL: str = ""
    DB_HOST: str = ""
    DB_PORT: int = 5432
    DB_NAME: str = ""
    DB_USER: str = ""
    DB_PASSWORD: str = ""

    @field_validator("DATABASE_URL", mode="after")
    @classmethod
    def normalize_database_url(cls, v: str) -> str:
        """Render and others give postgres://; SQLAlchemy expects postgresql+psycopg2://."""
        if v and v.startswith("postgres://"):
            return "postgresql+psycopg2://" + v[11:]
        return v

    @model_validator(mode="after")
    def build_database_url(self) -> "Settings":
        if not self.DATABASE_URL:
            if not (self.DB_HOST and self.DB_NAME and self.DB_USER):
                raise ValueError("DATABASE_URL or DB_HOST/DB_NAME/DB_USER must be set")
            self.DATABASE_URL = (
                f"postgresql+psycopg2://{self.DB_USER}:{self.DB_PASSWORD}"
                f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
            )
        return self

    SESSION_TTL_DAYS: int = 90
    DEFAULT_PHONE_REGION: str = "UG"

    # Object storage (S3-compatible, path-style)
    S3_STORAGE_ENDPOINT: str
    S3_STORAGE_REGION: str
    S3_STORAGE_ACCESS_KEY_ID: str
    S3_STORAGE_SECRET_ACCESS_KEY: str
    S3_STORAGE_BUCKET_NAME: str
    S3_STORAGE_BUCKET_ENDPOINT: str  # public base URL for uploaded objects

    # Outbound mail
    MAIL_HOST: str
    MAIL_PORT: int
    MAIL_USER: str
    MAIL_PASSWORD: str
    MAIL_FROM: str = "no-reply@airport-pickups.local"

    # DPO (3G Direct Pay) payment gateway
    COMPANY_TOKEN: str
    DPO_API_URL: str = "https://secure.3gdirectpay.com/API/v6/"
    DPO_SERVICE_TYPE: str = "45"
    DPO_PTL: int = 5  # payment time limit, hours
    DPO_TIMEOUT_SECONDS: float = 20.0
    DPO_MAX_RETRIES: int = 2
    DPO_MAX_CONCURRENCY: int = 10
    PUBLIC_API_URL: str = "http://localhost:8000"  # base for gateway redirect/back URLs

    @field_validator("S3_STORAGE_ENDPOINT", "S3_STORAGE_BUCKET_ENDPOINT", "PUBLIC_API_URL", mode="after")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("DPO_MAX_CONCURRENCY", "SESSION_TTL_DAYS", mode="after")
    @classmethod
    def positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("must be >= 1")
        return v


settings = Settings()
