from pydantic import field_validator
from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    DATABASE_URL: str
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24
    RESET_TOKEN_EXPIRE_MINUTES: int = 15
    OTP_EXPIRE_MINUTES: int = 60

    # SendGrid (OTP email delivery)
    SENDGRID_API_KEY: Optional[str] = None
    MAIL_FROM_EMAIL: Optional[str] = None

    CORS_ORIGINS: str = "http://localhost:8080"  # comma-separated

    ENVIRONMENT: str = "production"
    DEBUG: bool = False

    class Config:
        env_file = ".env"
        case_sensitive = True

    @field_validator("SECRET_KEY")
    @classmethod
    def secret_key_must_be_set(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("SECRET_KEY must be set to a non-empty value")
        return value

    @property
    def cors_origin_list(self) -> list[str]:
        """Get allowed CORS origins from env"""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def email_configured(self) -> bool:
        return bool(self.SENDGRID_API_KEY and self.MAIL_FROM_EMAIL)


settings = Settings()
