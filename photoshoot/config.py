from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "Photo Shoot Backend"
    app_description: str = "Multi-camera photo booth with live screens and session collages"
    debug: bool = False

    host: str = "0.0.0.0"
    port: int = 8800
    log_level: str = "INFO"

    storage_root: str = "storage"

    # Captures from one group within this window share a session folder
    session_timeout_ms: int = 10_000
    # Folder names are stamped in UTC+5:30 unless overridden; None uses host local time
    session_utc_offset_minutes: Optional[int] = 330

    landscape_width: int = 1920
    landscape_height: int = 1160
    portrait_width: int = 1080
    portrait_height: int = 2000
    grid_padding: int = 10

    collage_quality: int = 90
    capture_quality: int = 90

    layout_strategy: Literal["grid", "scatter"] = "grid"
    scatter_seed: Optional[int] = None

    backfill_on_startup: bool = True
    backfill_delay_seconds: float = 5.0

    supabase_url: Optional[str] = None
    supabase_service_key: Optional[str] = None
    supabase_bucket: Optional[str] = None
    remote_key_prefix: str = "photos"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @property
    def remote_configured(self) -> bool:
        return bool(self.supabase_url and self.supabase_service_key and self.supabase_bucket)
