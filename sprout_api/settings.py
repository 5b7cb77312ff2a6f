from __future__ import annotations

from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    database_url: str = Field(..., alias="DATABASE_URL")
    backend_session_secret: str = Field(..., alias="BACKEND_SESSION_SECRET")

    app_timezone: str = Field("America/Sao_Paulo", alias="APP_TIMEZONE")
    allowed_user_ids_raw: str = Field("", alias="ALLOWED_USER_IDS")

    identity_api_key: str | None = Field(None, alias="IDENTITY_API_KEY")
    identity_project_id: str | None = Field(None, alias="IDENTITY_PROJECT_ID")
    identity_auth_domain: str | None = Field(None, alias="IDENTITY_AUTH_DOMAIN")
    identity_app_id: str | None = Field(None, alias="IDENTITY_APP_ID")
    identity_base_url: str = Field(
        "https://identitytoolkit.googleapis.com/v1",
        alias="IDENTITY_BASE_URL",
    )

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @property
    def allowed_user_ids(self) -> List[str]:
        return [item.strip() for item in self.allowed_user_ids_raw.split(",") if item.strip()]

    @property
    def identity_configured(self) -> bool:
        return bool(self.identity_api_key and self.identity_project_id)

    def identity_request_uri(self) -> str:
        domain = (self.identity_auth_domain or "").strip()
        if not domain:
            return "http://localhost"
        if domain.startswith("http://") or domain.startswith("https://"):
            return domain
        return f"https://{domain}"


_settings: Settings | None = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    global _settings
    _settings = None
