"""
Application settings for Postman-Lite.

Values are read from the environment (prefix ``POSTMAN_LITE_``) or a local
``.env`` file.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Storage for saved requests and collections
    database_url: str = "sqlite:///./postman_lite.db"

    # Request execution
    default_timeout_ms: int = 30000
    max_timeout_ms: int = 300000
    user_agent: str = "Postman-Lite/1.0"
    follow_redirects: bool = True
    verify_tls: bool = True
    max_connections: int = 100

    # Overall deadline for a bulk execution; None leaves each item bounded
    # only by its own timeout
    bulk_deadline_ms: int | None = None

    # Application
    cors_origins: list[str] = ["*"]
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="POSTMAN_LITE_",
        env_file=".env",
        extra="ignore",
    )


settings = Settings()
