from .client import DeWatermark, erase_watermark
from .errors import DeWatermarkError, DimensionError, ExtractionError, RemoteError, SigningError
from .models import ProxyConfig

__all__ = [
    "DeWatermark",
    "erase_watermark",
    "DeWatermarkError",
    "DimensionError",
    "ExtractionError",
    "RemoteError",
    "SigningError",
    "ProxyConfig",
]
