# courtinvite/core/config.py

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Values come from the process environment; nothing is read from an
    # env file so containers and CI behave the same way.
    model_config = SettingsConfigDict(extra="ignore")

    # The environment mode: 'local' or 'prod'
    ENV: str = "local"

    # --- Database URLs ---
    DATABASE_URL_PROD: str = ""
    DATABASE_URL_LOCAL: str = "sqlite:///./courtinvite.db"

    # --- Auth ---
    # Secret shared with the hosted auth provider for host access tokens.
    JWT_SECRET: str = "change-me"
    JWT_AUDIENCE: str = "authenticated"
    # Guest tokens are issued here and signed with a key the auth provider
    # never sees, so neither kind of token verifies as the other.
    GUEST_TOKEN_SECRET: str = "change-me-guest"
    GUEST_TOKEN_AUDIENCE: str = "courtinvite-guest"
    GUEST_TOKEN_TTL_DAYS: int = 180
    INTERNAL_API_KEY: str = "change-me-internal"

    # --- Object storage (S3 or MinIO) ---
    AWS_ACCESS_KEY_ID: str = ""
    AWS_SECRET_ACCESS_KEY: str = ""
    AWS_S3_BUCKET_NAME: str = "courtinvite"
    AWS_S3_REGION: str = "us-east-1"
    AWS_S3_ENDPOINT_URL: str | None = None
    AWS_S3_PUBLIC_URL: str | None = None

    # --- Web ---
    PUBLIC_BASE_URL: str = "http://localhost:3000"
    CORS_ORIGINS: list[str] = ["http://localhost:3000"]

    # --- Rate limiting ---
    RATE_LIMIT_ENABLED: bool = True
    RSVP_RATE_LIMIT: str = "20/minute"

    # --- Scheduler ---
    SCHEDULER_ENABLED: bool = True
    CLEANUP_INTERVAL_MINUTES: int = 15

    # --- Derived ---
    @property
    def DATABASE_URL(self) -> str:
        return (
            self.DATABASE_URL_LOCAL if self.ENV == "local" else self.DATABASE_URL_PROD
        )

    @property
    def S3_PUBLIC_BASE_URL(self) -> str:
        """Base URL under which uploaded objects are publicly readable."""
        if self.AWS_S3_PUBLIC_URL:
            return self.AWS_S3_PUBLIC_URL.rstrip("/")
        if self.AWS_S3_ENDPOINT_URL:
            return f"{self.AWS_S3_ENDPOINT_URL.rstrip('/')}/{self.AWS_S3_BUCKET_NAME}"
        return (
            f"https://{self.AWS_S3_BUCKET_NAME}.s3.{self.AWS_S3_REGION}.amazonaws.com"
        )


settings = Settings()
