"""ProjectHub configuration — settings loaded from the environment."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Shared gateway key (empty = auth gate disabled, dev mode)
    projecthub_api_key: str = ""

    # Database
    database_url: str = "sqlite:///data/projecthub.db"

    # CORS (comma-separated origins)
    cors_origins: str = "http://localhost:3000"

    # Access policy: False reproduces the legacy behavior where any
    # authenticated user may view projects and mutate tasks.
    enforce_membership: bool = True

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
