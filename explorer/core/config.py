"""Application configuration via pydantic-settings.

Loads all settings from environment variables with sensible defaults.
A global `settings` singleton is available for import throughout the app.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Supabase
    SUPABASE_URL: str
    SUPABASE_KEY: str
    SUPABASE_POSTS_TABLE: str = "posts"

    # Facebook Graph API
    GRAPH_API_BASE_URL: str = "https://graph.facebook.com"
    GRAPH_API_VERSION: str = "v23.0"
    GRAPH_ACCESS_TOKEN: str = ""
    GRAPH_PAGE_ID: str = ""
    GRAPH_TIMEOUT_SECONDS: float = 15.0

    # Dashboard pagination
    COMMENTS_INITIAL_LIMIT: int = 2
    COMMENTS_PAGE_LIMIT: int = 5
    ATTACHMENTS_PAGE_SIZE: int = 6

    # Ollama
    OLLAMA_URL: str = "http://localhost:11434/api/generate"
    OLLAMA_MODEL: str = "gpt-oss:120b-cloud"
    OLLAMA_TIMEOUT_SECONDS: float = 120.0

    # CORS
    ALLOWED_ORIGINS: str = "*"

    # Scheduler (0 disables the periodic refresh of stored posts)
    REFRESH_INTERVAL_HOURS: int = 0

    # Logging
    LOG_LEVEL: str = "INFO"


settings = Settings()  # type: ignore[call-arg]
