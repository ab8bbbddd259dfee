"""Application configuration from environment variables."""
from fastapi import Request
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """All config comes from env vars or .env.backend file."""

    # Shared admin secret for registry writes. Empty disables admin mode.
    ADMIN_TOKEN: str = ""

    FILES_DB_PATH: str = "./backend/files-db.json"
    FILE_STORAGE_PATH: str = "./backend/uploads"
    STATIC_ROOT: str = "./public"
    MAX_UPLOAD_BYTES: int = 50 * 1024 * 1024

    # Used to build the shareable links returned on create
    PUBLIC_BASE_URL: str = "http://localhost:5173"

    API_PREFIX: str = "/api"
    API_PORT: int = 3001
    CORS_ORIGINS: str = "http://localhost:5173"
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env.backend"
        env_file_encoding = "utf-8"


settings = Settings()


def get_settings(request: Request) -> Settings:
    """FastAPI dependency returning the settings the running app was built with."""
    return request.app.state.settings
