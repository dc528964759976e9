from __future__ import annotations

from pydantic import BaseModel


class TokenClaims(BaseModel):
    """Claim set of the signed bearer token, in wire order."""

    sub: str
    platform: str
    is_pro: bool = False
    exp: int  # unix seconds
