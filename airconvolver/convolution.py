"""Streaming partitioned convolution of a single audio channel."""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

DEFAULT_HEAD_SIZE = 4096 * 4
NORMALISE_TARGET = 0.125
TRIM_THRESHOLD = 10 ** (-80 / 20)


@dataclass(frozen=True)
class ProcessSpec:
    """Playback settings a convolution is prepared with."""

    sample_rate: float
    maximum_block_size: int
    num_channels: int = 1

    def __post_init__(self) -> None:
        if self.sample_rate <= 0:
            raise ValueError("sample_rate must be positive")
        if self.maximum_block_size <= 0:
            raise ValueError("maximum_block_size must be positive")
        if self.num_channels <= 0:
            raise ValueError("num_channels must be positive")


def _fft_convolve(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    length = a.size + b.size - 1
    size = 1 << (length - 1).bit_length()
    spectrum = np.fft.rfft(a, size) * np.fft.rfft(b, size)
    return np.fft.irfft(spectrum, size)[:length]


def _trim(ir: np.ndarray) -> np.ndarray:
    loud = np.flatnonzero(np.abs(ir) > TRIM_THRESHOLD)
    if loud.size == 0:
        return ir[:0]
    return ir[loud[0] : loud[-1] + 1]


def _normalise(ir: np.ndarray) -> np.ndarray:
    energy = float(np.dot(ir, ir))
    if energy == 0.0:
        return ir
    return ir * (NORMALISE_TARGET / math.sqrt(energy))


def _resample(ir: np.ndarray, source_rate: float, target_rate: float) -> np.ndarray:
    if ir.size == 0 or source_rate == target_rate:
        return ir
    length = max(1, int(round(ir.size * target_rate / source_rate)))
    positions = np.arange(length) * (source_rate / target_rate)
    return np.interp(positions, np.arange(ir.size), ir)


class Convolution:
    """Convolves blocks of one channel with an impulse response, keeping the tail between blocks.

    The impulse response is split into partitions of ``head_size`` samples.
    """

    def __init__(self, head_size: int = DEFAULT_HEAD_SIZE) -> None:
        if head_size <= 0:
            raise ValueError("head_size must be positive")
        self.head_size = int(head_size)
        self._spec: ProcessSpec | None = None
        self._ir = np.zeros(0)
        self._ir_rate = 0.0
        self._active = np.zeros(0)
        self._partitions: list[tuple[int, np.ndarray]] = []
        self._tail = np.zeros(0)

    def load_impulse_response(
        self, impulse, sample_rate: float, trim: bool = True, normalise: bool = True
    ) -> None:
        """Install a new impulse response recorded at ``sample_rate``."""
        ir = np.asarray(impulse, dtype=np.float64)
        if ir.ndim != 1:
            raise ValueError("impulse response must be one-dimensional")
        if sample_rate <= 0:
            raise ValueError("sample_rate must be positive")
        if trim:
            ir = _trim(ir)
        if normalise:
            ir = _normalise(ir)
        self._ir = ir.copy()
        self._ir_rate = float(sample_rate)
        self._activate()

    def prepare(self, spec: ProcessSpec) -> None:
        """Set the playback settings and clear any running state."""
        self._spec = spec
        self._activate()

    def reset(self) -> None:
        """Discard the tail carried over from earlier blocks."""
        self._tail = np.zeros(self._tail.size)

    def process(self, block: np.ndarray) -> None:
        """Replace the samples of ``block`` with the convolved signal."""
        if self._spec is None:
            raise RuntimeError("convolution used before prepare()")
        if block.ndim != 1:
            raise ValueError("block must be one-dimensional")
        count = block.shape[0]
        if count > self._spec.maximum_block_size:
            raise ValueError(
                f"block of {count} samples exceeds the prepared maximum "
                f"of {self._spec.maximum_block_size}"
            )
        if self._active.size == 0 or count == 0:
            return
        signal = np.asarray(block, dtype=np.float64)
        out = np.zeros(count + self._active.size - 1)
        out[: self._tail.size] += self._tail
        for offset, part in self._partitions:
            segment = _fft_convolve(signal, part)
            out[offset : offset + segment.size] += segment
        block[:] = out[:count]
        self._tail = out[count:].copy()

    def current_ir_size(self) -> int:
        """Length in samples of the impulse response in use."""
        return int(self._active.size)

    def _activate(self) -> None:
        ir = self._ir
        if self._spec is not None:
            ir = _resample(ir, self._ir_rate, self._spec.sample_rate)
        self._active = ir
        self._partitions = [
            (offset, ir[offset : offset + self.head_size])
            for offset in range(0, ir.size, self.head_size)
        ]
        self._tail = np.zeros(max(ir.size - 1, 0))