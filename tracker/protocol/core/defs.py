# tracker/protocol/core/defs.py
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from tracker.core.errors import PayloadError
from tracker.protocol.loader import Catalogs, default_catalogs
from .bits import ByteSource
from .decoder import Clock, decode_uplink, utc_now


class TrackerDecoder:
    """
    Runtime access to the uplink decoder.

    Owns the immutable catalogs, the clock used for the debug trailer and the
    out-of-bounds policy. Holds no per-call state, so one instance can be
    shared across threads.
    """

    def __init__(
        self,
        catalogs: Optional[Catalogs] = None,
        *,
        clock: Optional[Clock] = None,
        strict: bool = True,
        temperature_digits: int = 2,
        logger: Optional[logging.Logger] = None,
    ):
        self.catalogs: Catalogs = catalogs if catalogs is not None else default_catalogs()
        self.clock: Clock = clock or utc_now
        self.strict = strict
        self.temperature_digits = temperature_digits
        self._log = logger or logging.getLogger(__name__)

    def decode(self, payload: ByteSource, port: int) -> Dict[str, Any]:
        self._log.debug("DECODE_START len=%d port=%s strict=%s", len(payload), port, self.strict)
        return decode_uplink(
            payload,
            port,
            self.catalogs,
            clock=self.clock,
            strict=self.strict,
            temperature_digits=self.temperature_digits,
            logger=self._log,
        )

    def decode_hex(self, payload_hex: str, port: int) -> Dict[str, Any]:
        return self.decode(parse_hex(payload_hex), port)

    def __repr__(self) -> str:
        return f"TrackerDecoder(strict={self.strict}, temperature_digits={self.temperature_digits})"


def parse_hex(payload_hex: str) -> bytes:
    text = "".join(payload_hex.split()).replace(":", "")
    try:
        return bytes.fromhex(text)
    except ValueError as e:
        raise PayloadError(f"Invalid hex payload: {payload_hex!r}") from e
