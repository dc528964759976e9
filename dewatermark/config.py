from __future__ import annotations

from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from dewatermark.models import ProxyConfig

# Load environment variables from a .env file if present (local dev only)
load_dotenv()

# Lifetime of every minted token. Not caller-configurable.
TOKEN_TTL_SECONDS = 300


class Settings(BaseSettings):
    """Client configuration loaded from environment variables or .env file."""

    model_config = SettingsConfigDict(env_prefix="DEWATERMARK_", env_file=".env", case_sensitive=False, extra="ignore")

    # Front-end scraped for the signing secret
    site_url: str = Field("https://dewatermark.ai", description="Origin of the web front-end.")
    upload_path: str = Field("/upload", description="Page whose HTML references the app bundle.")
    bundle_fragment: str = Field("/_next/static/chunks/pages/_app", description="Path prefix of the bundled script.")

    # Erasure API
    api_url: str = Field("https://api.dewatermark.ai", description="Origin of the API; also the marker preceding the secret.")
    erase_path: str = Field("/api/object_removal/v5/erase_watermark")
    user_agent: str = Field(
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36"
    )
    http_timeout: Optional[float] = Field(120.0, description="Per-request timeout in seconds; None disables it.")

    # Upload policy
    target_width: int = Field(3560, ge=1, description="Maximum width accepted upstream (pixels).")
    zoom_factor: str = Field("2")
    upload_field: str = Field("original_preview_image")
    upload_filename: str = Field("image.png", description="Filename sent regardless of the actual format.")

    # Token claims
    token_subject: str = Field("ignore")
    token_platform: str = Field("web")
    token_is_pro: bool = Field(False, description="Elevation claim; its effect upstream is unknown.")

    # Optional proxy
    proxy_host: Optional[str] = None
    proxy_port: Optional[int] = None
    proxy_username: Optional[str] = None
    proxy_password: Optional[str] = None
    proxy_scheme: str = "http"

    @property
    def upload_page_url(self) -> str:
        return f"{self.site_url}{self.upload_path}"

    @property
    def erase_url(self) -> str:
        return f"{self.api_url}{self.erase_path}"

    @property
    def proxy(self) -> ProxyConfig | None:
        if not self.proxy_host or self.proxy_port is None:
            return None
        return ProxyConfig(
            host=self.proxy_host,
            port=self.proxy_port,
            username=self.proxy_username,
            password=self.proxy_password,
            scheme=self.proxy_scheme,
        )


@lru_cache()
def get_settings() -> Settings:  # pragma: no cover
    """Return a cached Settings instance so it is only parsed once."""

    return Settings()
