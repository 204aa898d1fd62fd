from __future__ import annotations
import math

# Magnus coefficients (Alduchov & Eskridge), valid roughly -40..50 °C
C1 = 243.04
C2 = 17.625


def dewpoint(t: float, rh: float) -> float:
    """Return the dew point in °C for temperature *t* (°C) and relative humidity *rh* (0..100).

    RH at or below 1 % is treated as 1 % and anything above 100 % as 100 %,
    so very dry readings still give a finite result.
    """

    h = rh / 100
    if h <= 0.01:
        h = 0.01
    elif h > 1.0:
        h = 1.0

    lnh = math.log(h)
    txc2_tpc1 = t * C2 / (t + C1)
    return C1 * (lnh + txc2_tpc1) / (C2 - lnh - txc2_tpc1)
