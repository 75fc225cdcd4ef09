"""Decoding of first-order B-format (W, X, Y, Z) signals to 5.1 surround."""

from __future__ import annotations

import numpy as np

# Output channel order: L, R, C, LFE, Ls, Rs.
SURROUND_CHANNELS = ("L", "R", "C", "LFE", "Ls", "Rs")

_FRONT_W = 0.3623
_FRONT_Y = 0.3208
_FRONT_X = 0.4340
_REAR_W = 0.5548
_REAR_Y = 0.3359
_REAR_X = 0.2415


def decode_bformat_to_5_1(bformat) -> np.ndarray:
    """Decode a (4, n) B-format array into a (6, n) float32 5.1 array.

    The centre and LFE channels are silent; Z does not contribute.
    """
    data = np.asarray(bformat, dtype=np.float32)
    if data.ndim != 2 or data.shape[0] != 4:
        raise ValueError(
            f"B-format input must have shape (4, n), got {data.shape}"
        )
    w, x, y, _z = data
    out = np.zeros((6, data.shape[1]), dtype=np.float32)
    out[0] = _FRONT_W * w + _FRONT_Y * y + _FRONT_X * x
    out[1] = _FRONT_W * w - _FRONT_Y * y + _FRONT_X * x
    out[4] = _REAR_W * w + _REAR_Y * y - _REAR_X * x
    out[5] = _REAR_W * w - _REAR_Y * y - _REAR_X * x
    return out