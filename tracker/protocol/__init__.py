# tracker/protocol/__init__.py

# Core classes
from .core import TrackerDecoder, decode_uplink, MessageType, PositionType, ActivityTag
from .loader import Catalogs, CatalogLoader, load_catalogs
from .errors import DecodeError, PayloadTooShortError

__all__ = [
    "TrackerDecoder", "decode_uplink",
    "MessageType", "PositionType", "ActivityTag",
    "Catalogs", "CatalogLoader", "load_catalogs",
    "DecodeError", "PayloadTooShortError"]
