from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    aws_region: str = Field(default="eu-west-1", alias="AWS_REGION")
    app_env: str = Field(default="dev", alias="APP_ENV")
    secret_key: str = Field(alias="SECRET_KEY")
    s3_bucket: str = Field(alias="S3_BUCKET")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    access_token_expire_minutes: int = Field(default=15, alias="ACCESS_TOKEN_EXPIRE_MINUTES")
    encoding_algorithm: str = Field(default="HS256", alias="ENCODING_ALGORITHM")

    # Accounting
    base_currency: str = Field(default="RUB", alias="BASE_CURRENCY")
    reminder_days_threshold: int = Field(default=3, alias="REMINDER_DAYS_THRESHOLD")
    upcoming_payments_days: int = Field(default=7, alias="UPCOMING_PAYMENTS_DAYS")

    # Guarantees / nice errors early
    @field_validator("secret_key", "s3_bucket")
    @classmethod
    def _non_empty(cls, v: str) -> str:
        if not v:
            raise ValueError("required setting is empty")
        return v

    @field_validator("base_currency")
    @classmethod
    def _upper(cls, v: str) -> str:
        return v.strip().upper()


# Global settings instance
settings = Settings()
