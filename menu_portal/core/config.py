"""Application configuration."""

from os import getenv

from pydantic import BaseModel


def _split_csv(value: str) -> list[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


class Settings(BaseModel):
    """Runtime settings for the application."""

    app_name: str = "Menu Portal API"
    app_version: str = "1.0.0"
    app_env: str = getenv("APP_ENV", "dev")
    debug: bool = getenv("DEBUG", "0") == "1"
    log_level: str = getenv("LOG_LEVEL", "INFO").upper()
    port: int = int(getenv("PORT", "3002"))
    database_url: str = getenv("DATABASE_URL", "sqlite:///./menu_portal.db")
    # Signing key of the identity provider; pairs with DATABASE_URL.
    identity_jwt_secret: str = getenv("IDENTITY_JWT_SECRET", "dev-only-identity-secret-change-me")
    # Legacy application JWT; verification of that path is disabled when unset.
    jwt_secret: str | None = getenv("JWT_SECRET") or None
    jwt_algorithm: str = getenv("JWT_ALGORITHM", "HS256")
    session_expire_minutes: int = int(getenv("SESSION_EXPIRE_MINUTES", "720"))
    allowed_origins: list[str] = _split_csv(getenv("ALLOWED_ORIGINS", ""))
    import_atomic: bool = getenv("IMPORT_ATOMIC", "0") == "1"
    admin_email: str = getenv("ADMIN_EMAIL", "")
    admin_password: str = getenv("ADMIN_PASSWORD", "")
    portal_api_url: str = getenv("PORTAL_API_URL", "http://localhost:3002/api")
    portal_api_token: str = getenv("PORTAL_API_TOKEN", "")

    @property
    def is_dev(self) -> bool:
        return self.app_env.lower() in {"dev", "development", "local"}


settings: Settings = Settings()
