
from pydantic import Field
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    """Application configuration loaded from environment variables / .env file."""

    app_name: str = "Newsdesk API"
    app_env: str = "development"
    app_port: int = 8000

    # Echo raw exception text in API error envelopes
    debug: bool = Field(default=False, alias="APP_DEBUG")

    # CORS: "*" or a comma-separated list of origins
    cors_allow_origin: str = Field(default="*", alias="CORS_ALLOW_ORIGIN")
    cors_max_age: int = 3600

    # Paths handled by the JSON error mapper and the CORS policy
    api_path_prefixes: list[str] = ["/api", "/official-api", "/public-api"]
    api_v1_prefix: str = "/api/v1"

    # Database (SQLite for local dev)
    database_url: str = Field(
        default="sqlite+aiosqlite:///./newsdesk_dev.db",
        alias="DATABASE_URL",
    )
    auto_create_schema: bool = Field(default=True, alias="AUTO_CREATE_SCHEMA")

    # Pagination
    default_page_size: int = 20
    max_page_size: int = 100

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "populate_by_name": True,
    }

    @property
    def allowed_origins(self) -> list[str]:
        return [o.strip() for o in self.cors_allow_origin.split(",") if o.strip()]

    def is_api_path(self, path: str) -> bool:
        return any(path.startswith(prefix) for prefix in self.api_path_prefixes)

settings = Settings()
