from .claims import TokenClaims
from .image_info import ImageInfo
from .proxy import ProxyConfig

__all__ = [
    "ImageInfo",
    "ProxyConfig",
    "TokenClaims",
]
