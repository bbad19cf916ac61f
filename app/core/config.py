from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings

# .env at the project root: app/core/config.py -> app/core -> app -> root
_ROOT = Path(__file__).resolve().parent.parent.parent
_ENV_FILE = _ROOT / ".env"


class Settings(BaseSettings):
    # Log documents live here; uploaded files go to upload_dir (data_dir/uploads if empty)
    data_dir: Path = Path("./data")
    upload_dir: Path | None = None
    uploads_log_name: str = "uploads.json"
    events_log_name: str = "qr_codes.json"
    # Off by default: concurrent appends to the same log are last-writer-wins
    serialize_log_writes: bool = False
    # CORS: comma-separated origin list; the mobile app in dev needs "*"
    cors_origins: str = "*"
    # POST /api/upload per client IP
    rate_limit_per_minute: int = 120
    rate_limit_enabled: bool = True
    log_level: str = "INFO"
    log_format: str = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    # uvicorn.access duplicates the request_id/latency line; false keeps only ours
    access_log: bool = True
    host: str = "0.0.0.0"
    port: int = 3000

    model_config = {
        "env_file": _ENV_FILE if _ENV_FILE.is_file() else ".env",
        "extra": "ignore",
    }

    @field_validator("upload_dir", mode="before")
    @classmethod
    def empty_upload_dir(cls, v):
        """UPLOAD_DIR= (empty) in .env means "use the default"."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def upper_log_level(cls, v: str | None) -> str:
        return (v or "INFO").strip().upper()

    @property
    def content_dir(self) -> Path:
        return self.upload_dir if self.upload_dir is not None else self.data_dir / "uploads"


settings = Settings()


def cors_origins_list() -> list[str]:
    if not settings.cors_origins or settings.cors_origins.strip() == "*":
        return ["*"]
    return [o.strip() for o in settings.cors_origins.split(",") if o.strip()]
