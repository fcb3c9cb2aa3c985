# app/core/config.py
# All application settings loaded from environment variables / .env file
# In production: values are injected into the container environment
# In development: loaded from .env file via pydantic-settings

from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Single source of truth for all TutorHub configuration.
    pydantic-settings automatically reads from environment variables.
    Variable names are case-insensitive.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # App
    app_env: str = "development"
    app_name: str = "TutorHub"
    app_version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    allowed_origins: str = "http://localhost:5173,http://localhost:3000"
    frontend_url: str = "http://localhost:5173"

    # Database
    database_url: str
    sql_echo: bool = False
    auto_migrate_on_startup: bool = False   # alembic upgrade head on startup
    auto_create_tables: bool = False        # create_all on startup (dev / sqlite only)

    # JWT
    jwt_secret_key: str
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60

    # Payments
    payment_currency: str = "USD"
    paypal_decline_rate: float = 0.2   # Simulated PayPal decline probability
    razorpay_key_id: str = ""
    razorpay_key_secret: str = ""

    # Question generation / CV matching collaborators
    question_generator: str = "static"   # static | vertex
    cv_matcher: str = "keyword"          # keyword | vertex
    quiz_question_count: int = 5

    # GCP / Vertex AI
    gcp_project_id: str = ""
    vertex_ai_location: str = "us-central1"
    gemini_model: str = "gemini-2.5-flash"
    google_service_account_key_path: str = ""

    # SendGrid
    sendgrid_api_key: str = ""
    email_from: str = "noreply@tutorhub.dev"
    email_from_name: str = "TutorHub"

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"

    @property
    def cors_origins(self) -> List[str]:
        """Parse comma-separated ALLOWED_ORIGINS into a list."""
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]


@lru_cache
def get_settings() -> Settings:
    """
    Returns a cached Settings instance.
    Use as a FastAPI dependency: settings = Depends(get_settings)
    Or import directly:         from app.core.config import settings
    """
    return Settings()


# Module-level singleton -- import this directly in most places
settings = get_settings()
