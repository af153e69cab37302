from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=None, extra="ignore")

    # Paths
    regions_dir: str = Field(default="app/data/regions", alias="REGIONS_DIR")

    # ──────────────────────────────────────────────────────────────
    # Alert feed — Meteoalarm "legacy atom" export (CAP markup)
    # ──────────────────────────────────────────────────────────────

    alerts_feed_url: str = Field(
        default="https://feeds.meteoalarm.org/feeds/meteoalarm-legacy-atom-spain",
        alias="ALERTS_FEED_URL",
    )
    # Uploaded feed files must carry this filename prefix
    alerts_feed_filename_prefix: str = Field(
        default="meteoalarm-legacy-atom-spain",
        alias="ALERTS_FEED_FILENAME_PREFIX",
    )
    alerts_feed_timeout_s: float = Field(default=15.0, alias="ALERTS_FEED_TIMEOUT_S")
    alerts_feed_user_agent: str = Field(default="regional-alerts/feed", alias="ALERTS_FEED_USER_AGENT")

    # ──────────────────────────────────────────────────────────────
    # Region overlays
    # ──────────────────────────────────────────────────────────────

    region_count: int = Field(default=40, alias="REGION_COUNT")  # R01..R40
    overlay_layer_name: str = Field(default="Alertas Regionales", alias="OVERLAY_LAYER_NAME")
    overlay_fill_opacity: float = Field(default=0.3, alias="OVERLAY_FILL_OPACITY")
    overlay_stroke_width: int = Field(default=2, alias="OVERLAY_STROKE_WIDTH")


settings = Settings()
