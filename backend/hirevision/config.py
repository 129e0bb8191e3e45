from pathlib import Path
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    data_dir: Path = Path.home() / ".hirevision"
    api_prefix: str = "/api"
    host: str = "127.0.0.1"
    port: int = 8000
    log_level: str = "INFO"
    cors_origins: list[str] = [
        "http://127.0.0.1:9002",
        "http://localhost:9002",
    ]

    session_ttl_seconds: int = 60 * 60 * 12
    # Resumes and post images share the same cap.
    max_upload_bytes: int = 10 * 1024 * 1024  # 10 MiB

    gemini_api_key: str | None = None
    gemini_model: str = "gemini-1.5-pro-latest"
    gemini_flash_model: str = "gemini-1.5-flash-latest"

    storage_backend: str = "local"  # "local" or "s3"
    s3_endpoint: str | None = None
    s3_bucket: str = "hirevision"
    s3_access_key: str | None = None
    s3_secret_key: str | None = None
    s3_region: str = "us-east-1"

    workos_api_key: str | None = None
    workos_client_id: str | None = None
    workos_redirect_uri: str = "http://localhost:9002/api/auth/sso/callback"
    frontend_url: str = "http://localhost:9002"

    elevenlabs_api_key: str | None = None
    elevenlabs_voice_id: str = "21m00Tcm4TlvDq8ikWAM"

    @property
    def db_path(self) -> Path:
        return self.data_dir / "hirevision.sqlite"

    @property
    def storage_dir(self) -> Path:
        return self.data_dir / "storage"

    model_config = {"env_prefix": "HIREVISION_"}


settings = Settings()
