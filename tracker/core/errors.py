# tracker/core/errors.py
from __future__ import annotations


class TrackerError(Exception):
    """
    Base class for all expected operational errors in the tracker decoder.
    """

    #: Stable machine-readable identifier (for CLI exit mapping, pipeline APIs, etc.)
    code: str = "unknown"

    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        details: dict | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.hint = hint
        self.details = details or {}

    def __str__(self) -> str:
        return self.message


# ---------------------------------------------------------------------------
# Configuration / setup errors (before any payload is seen)
# ---------------------------------------------------------------------------

class ConfigError(TrackerError):
    """
    Decoder configuration is invalid.

    Examples:
      - config file is not a YAML mapping
      - 'strict' is not a boolean
      - negative rounding digits
    """
    code = "config_error"


class CatalogError(TrackerError):
    """
    Lookup catalogs could not be loaded.

    Examples:
      - catalogs.yml missing
      - a catalog is not a list of strings
      - a catalog has the wrong number of entries
    """
    code = "catalog_error"


# ---------------------------------------------------------------------------
# Payload errors
# ---------------------------------------------------------------------------

class PayloadError(TrackerError):
    """
    Uplink payload could not be turned into a record.

    Examples:
      - payload shorter than the fields its message type needs
      - hex input that is not valid hex
    """
    code = "payload_error"
