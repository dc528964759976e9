from __future__ import annotations

from urllib.parse import quote

from pydantic import BaseModel, ConfigDict, Field


class ProxyConfig(BaseModel):
    """Outbound proxy used for every request of a client instance."""

    model_config = ConfigDict(frozen=True)

    host: str
    port: int = Field(..., ge=1, le=65535)
    username: str | None = None
    password: str | None = None
    scheme: str = "http"

    @property
    def url(self) -> str:
        auth = ""
        if self.username:
            auth = quote(self.username, safe="")
            if self.password:
                auth += ":" + quote(self.password, safe="")
            auth += "@"
        return f"{self.scheme}://{auth}{self.host}:{self.port}"
