# tracker/protocol/core/quantize.py
from __future__ import annotations

import math
from dataclasses import dataclass


def step_size(lo: float, hi: float, nbits: int, nresv: int) -> float:
    # Reciprocal form keeps results identical to the device reference decoder.
    return 1.0 / ((((1 << nbits) - 1) - nresv) / (hi - lo))


def decode_value(code: int, lo: float, hi: float, nbits: int, nresv: int) -> float:
    """
    Map an n-bit code back into [lo, hi].

    nresv code points are reserved at the low end; subtracting half of them
    centers the value in its quantization bucket.
    """
    return (code - nresv / 2) * step_size(lo, hi, nbits, nresv) + lo


def round_half_up(value: float, digits: int = 2) -> float:
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


@dataclass(frozen=True)
class QuantizationSpec:
    lo: float
    hi: float
    nbits: int
    nresv: int = 0

    def __post_init__(self) -> None:
        if not 1 <= self.nbits <= 32:
            raise ValueError(f"nbits must be in [1, 32] (got {self.nbits})")
        if ((1 << self.nbits) - 1) - self.nresv <= 0:
            raise ValueError(
                f"No usable code points: nbits={self.nbits} nresv={self.nresv}"
            )

    def step_size(self) -> float:
        return step_size(self.lo, self.hi, self.nbits, self.nresv)

    def decode(self, code: int) -> float:
        return decode_value(code, self.lo, self.hi, self.nbits, self.nresv)


TEMPERATURE = QuantizationSpec(lo=-44, hi=85, nbits=8)
AGE = QuantizationSpec(lo=0, hi=2040, nbits=8)
ACCURACY = QuantizationSpec(lo=0, hi=1000, nbits=8)
CARRIER_NOISE = QuantizationSpec(lo=0, hi=2040, nbits=8)
BATTERY_VOLTAGE = QuantizationSpec(lo=2.8, hi=4.2, nbits=8, nresv=2)
