
from pydantic import Field
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    """Application configuration loaded from environment variables / .env file."""

    app_name: str = "Foodies API"
    app_env: str = "development"
    app_port: int = 8000
    frontend_url: str = "http://localhost:3000"

    # Public base URL used to build invite / set-password links
    app_url: str = Field(default="http://localhost:3000", alias="NEXT_PUBLIC_APP_URL")

    # Database (Postgres in production, SQLite for local dev)
    database_url: str = Field(
        default="sqlite+aiosqlite:///./foodies_dev.db",
        alias="DATABASE_URL",
    )

    # Identity + storage backend
    identity_url: str = Field(default="http://localhost:54321", alias="SUPABASE_URL")
    identity_service_key: str | None = Field(
        default=None, alias="SUPABASE_SERVICE_ROLE_KEY",
    )
    identity_timeout: int = Field(default=15, alias="IDENTITY_TIMEOUT")
    storage_bucket: str = Field(default="public-assets", alias="STORAGE_BUCKET")
    max_image_upload_mb: int = Field(default=5, alias="MAX_IMAGE_UPLOAD_MB")

    # Provisioning
    invite_token_ttl_hours: int = Field(
        default=168, alias="INVITE_TOKEN_TTL_HOURS",
    )  # one week
    approval_strategy: str = Field(
        default="identity_invite", alias="APPROVAL_STRATEGY",
    )  # "identity_invite" | "invite_token"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "populate_by_name": True,
    }

    @property
    def max_image_upload_bytes(self) -> int:
        return self.max_image_upload_mb * 1024 * 1024

    @property
    def auth_callback_url(self) -> str:
        return f"{self.app_url.rstrip('/')}/auth/callback"

    @property
    def set_password_url(self) -> str:
        return f"{self.app_url.rstrip('/')}/auth/set-password"

settings = Settings()
