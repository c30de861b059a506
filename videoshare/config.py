from fastapi import Request
from pydantic_settings import BaseSettings
from functools import lru_cache

from videoshare.errors import ConfigurationError


class Settings(BaseSettings):
    # Database (required; the service refuses to start without it)
    database_url: str = ""
    db_max_pool_size: int = 10

    # Session JWT
    secret_key: str = "your-secret-key-change-in-production"
    algorithm: str = "HS256"
    session_max_age_days: int = 30
    session_cookie_name: str = "session-token"

    # Sign-in and auth errors both land on this page
    sign_in_page: str = "/login"

    # Frontend URL for CORS
    frontend_url: str = "http://localhost:3000"

    log_level: str = "INFO"

    class Config:
        env_file = ".env"

    @property
    def session_max_age_seconds(self) -> int:
        return self.session_max_age_days * 24 * 60 * 60

    def require_database_url(self) -> str:
        url = (self.database_url or "").strip()
        if not url:
            raise ConfigurationError(
                "Please define the DATABASE_URL environment variable inside .env"
            )
        return url


@lru_cache
def get_settings() -> Settings:
    return Settings()


def get_app_settings(request: Request) -> Settings:
    """Settings the running app was built with (set by create_app)."""
    return request.app.state.settings
