# allosports/config.py
import os
from pydantic import BaseModel
from dotenv import load_dotenv

load_dotenv()  # Load environment variables from .env file

DEV_ENVIRONMENTS = ("development", "dev", "test", "testing", "local")

# Only ever used when ENV is one of DEV_ENVIRONMENTS
DEV_FALLBACK_SECRET = "dev-secret-change-me"


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes")


def _env_list(name: str, default: list[str]) -> list[str]:
    raw = os.getenv(name)
    if not raw:
        return default
    return [item.strip() for item in raw.split(",") if item.strip()]


class Settings(BaseModel):
    # General app settings
    APP_NAME: str = "AlloSports Hub API"
    env: str = os.getenv("ENV", "development")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # Host & Port settings
    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = int(os.getenv("PORT", "8000"))

    # CORS origins for the reader/editor frontend (cookies are sent cross-origin)
    CORS_ORIGINS: list[str] = _env_list("CORS_ORIGINS", [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
        "http://localhost:5000",
        "http://127.0.0.1:5000",
    ])

    # Storage: "memory" (ephemeral, in-process) or "database" (Tortoise ORM)
    storage_backend: str = os.getenv("STORAGE_BACKEND", "database")
    database_url: str = os.getenv("DATABASE_URL", "sqlite://allosports.sqlite3")
    generate_schemas: bool = _env_flag("GENERATE_SCHEMAS", "true")

    # Token signing
    jwt_secret: str | None = os.getenv("SESSION_SECRET") or os.getenv("JWT_SECRET")
    access_token_expire_minutes: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(7 * 24 * 60)))

    # Bootstrap
    seed_demo_content: bool = _env_flag("SEED_DEMO_CONTENT", "false")
    admin_username: str = os.getenv("ADMIN_USERNAME", "admin")
    admin_email: str = os.getenv("ADMIN_EMAIL", "admin@example.com")
    admin_password: str | None = os.getenv("ADMIN_PASSWORD")

    @property
    def is_development(self) -> bool:
        return self.env.lower() in DEV_ENVIRONMENTS

    @property
    def is_production(self) -> bool:
        return self.env.lower() == "production"

    @property
    def cookie_secure(self) -> bool:
        """The auth cookie is only marked Secure in production (plain http locally)."""
        return self.is_production

    @property
    def expose_error_details(self) -> bool:
        """Whether 500 responses carry the raw exception message."""
        return not self.is_production

    def signing_key(self) -> str:
        """
        Return the token signing key.

        Falls back to a fixed development key only when running in a development
        environment; anywhere else a missing SESSION_SECRET is a startup error.
        """
        if self.jwt_secret:
            return self.jwt_secret
        if self.is_development:
            return DEV_FALLBACK_SECRET
        raise RuntimeError(
            f"SESSION_SECRET must be set when ENV={self.env!r}; refusing to sign tokens with a default key"
        )


settings = Settings()  # Instantiate configuration
