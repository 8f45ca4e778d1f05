# tracker/protocol/errors.py
from __future__ import annotations

from tracker.core.errors import PayloadError


class DecodeError(PayloadError):
    """Base for field-extraction failures inside the uplink decoder."""
    code = "decode_error"


class PayloadTooShortError(DecodeError):
    code = "payload_too_short"

    def __init__(self, needed: int, length: int, *, field: str | None = None):
        what = f" for {field}" if field else ""
        super().__init__(
            f"Payload too short{what}: need {needed} bytes, got {length}",
            hint="Pass strict=False (or --zero-fill) to read missing bytes as zero.",
            details={"needed": needed, "length": length, "field": field},
        )
        self.needed = needed
        self.length = length
        self.field = field
