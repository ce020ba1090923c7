from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = Field(default="Vagas API", validation_alias=AliasChoices("APP_NAME"))
    app_version: str = Field(default="0.1.0", validation_alias=AliasChoices("APP_VERSION"))
    app_env: str = Field(default="local", validation_alias=AliasChoices("APP_ENV"))
    app_debug: bool = Field(default=True, validation_alias=AliasChoices("APP_DEBUG", "DEBUG"))
    api_host: str = Field(default="0.0.0.0", validation_alias=AliasChoices("API_HOST"))
    api_port: int = Field(default=8000, validation_alias=AliasChoices("API_PORT"))
    cors_allowed_origins: str = Field(
        default="",
        validation_alias=AliasChoices("CORS_ALLOWED_ORIGINS"),
    )

    database_url: str = Field(default="", validation_alias=AliasChoices("DATABASE_URL"))
    mysql_host: str = Field(default="localhost", validation_alias=AliasChoices("MYSQL_HOST"))
    mysql_port: int = Field(default=3306, validation_alias=AliasChoices("MYSQL_PORT"))
    mysql_user: str = Field(default="root", validation_alias=AliasChoices("MYSQL_USER"))
    mysql_password: str = Field(default="", validation_alias=AliasChoices("MYSQL_PASSWORD"))
    mysql_database: str = Field(default="vagas", validation_alias=AliasChoices("MYSQL_DATABASE"))
    db_pool_size: int = Field(default=10, validation_alias=AliasChoices("DB_POOL_SIZE"))
    db_max_overflow: int = Field(default=20, validation_alias=AliasChoices("DB_MAX_OVERFLOW"))
    db_pool_timeout_seconds: int = Field(
        default=30,
        validation_alias=AliasChoices("DB_POOL_TIMEOUT_SECONDS"),
    )
    db_pool_recycle_seconds: int = Field(
        default=1800,
        validation_alias=AliasChoices("DB_POOL_RECYCLE_SECONDS"),
    )

    jwt_secret_key: str = Field(
        default="change-me",
        validation_alias=AliasChoices("JWT_SECRET_KEY", "SECRET_KEY"),
    )
    jwt_algorithm: str = Field(default="HS256", validation_alias=AliasChoices("JWT_ALGORITHM"))
    jwt_audience: str = Field(default="", validation_alias=AliasChoices("JWT_AUDIENCE"))
    scheduler_token: str = Field(default="", validation_alias=AliasChoices("SCHEDULER_TOKEN"))

    booking_expiry_minutes: int = Field(
        default=15,
        validation_alias=AliasChoices("BOOKING_EXPIRY_MINUTES"),
    )
    sweep_interval_seconds: int = Field(
        default=60,
        validation_alias=AliasChoices("SWEEP_INTERVAL_SECONDS"),
    )
    sweep_batch_size: int = Field(default=100, validation_alias=AliasChoices("SWEEP_BATCH_SIZE"))

    notification_webhook_url: str = Field(
        default="",
        validation_alias=AliasChoices("NOTIFICATION_WEBHOOK_URL"),
    )
    notification_webhook_token: str = Field(
        default="",
        validation_alias=AliasChoices("NOTIFICATION_WEBHOOK_TOKEN"),
    )

    external_api_timeout_seconds: int = Field(
        default=10,
        validation_alias=AliasChoices("EXTERNAL_API_TIMEOUT_SECONDS", "HTTP_TIMEOUT_SECONDS"),
    )
    http_max_connections: int = Field(default=100, validation_alias=AliasChoices("HTTP_MAX_CONNECTIONS"))
    rate_limit_requests_per_minute: int = Field(
        default=120,
        validation_alias=AliasChoices("RATE_LIMIT_REQUESTS_PER_MINUTE"),
    )
    rate_limit_bookings_per_minute: int = Field(
        default=30,
        validation_alias=AliasChoices("RATE_LIMIT_BOOKINGS_PER_MINUTE"),
    )
    circuit_breaker_failure_threshold: int = Field(
        default=5,
        validation_alias=AliasChoices(
            "CIRCUIT_BREAKER_FAILURE_THRESHOLD",
            "CIRCUIT_BREAKER_THRESHOLD",
        ),
    )
    circuit_breaker_recovery_seconds: int = Field(
        default=30,
        validation_alias=AliasChoices(
            "CIRCUIT_BREAKER_RECOVERY_SECONDS",
            "CIRCUIT_BREAKER_TIMEOUT",
        ),
    )
    retry_max_attempts: int = Field(default=3, validation_alias=AliasChoices("RETRY_MAX_ATTEMPTS"))

    @property
    def cors_allowed_origins_list(self) -> list[str]:
        return [value.strip() for value in self.cors_allowed_origins.split(",") if value.strip()]


settings = Settings()
