"""A six-channel (5.1) convolution processor fed by B-format impulse responses."""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np

from .convolution import DEFAULT_HEAD_SIZE, Convolution, ProcessSpec
from .irloader import IRLoader

log = logging.getLogger(__name__)

NUM_CHANNELS = 6
EXPECTED_BLOCK_SIZE = 512
DEFAULT_THREAD_POOL_SIZE = 6


class ConvolverProcessor:
    """Convolves each channel of a 5.1 signal with its own decoded impulse response."""

    def __init__(self, thread_pool_size: int = DEFAULT_THREAD_POOL_SIZE) -> None:
        self.ir_loader = IRLoader(thread_pool_size)
        self.head_size = DEFAULT_HEAD_SIZE
        self.sample_rate = 0.0
        self.spec: ProcessSpec | None = None
        self.convolutions: list[Convolution] = []

    def prepare_to_play(self, sample_rate: float, samples_per_block: int) -> None:
        """Create fresh convolutions for playback at ``sample_rate``.

        The block size is always enforced to 512 samples.
        """
        if samples_per_block != EXPECTED_BLOCK_SIZE:
            log.warning(
                "block size changed to %s; enforcing block size of %d",
                samples_per_block,
                EXPECTED_BLOCK_SIZE,
            )
        self.spec = ProcessSpec(
            sample_rate=float(sample_rate),
            maximum_block_size=EXPECTED_BLOCK_SIZE,
            num_channels=NUM_CHANNELS,
        )
        self.sample_rate = float(sample_rate)
        self.convolutions = [Convolution(self.head_size) for _ in range(NUM_CHANNELS)]
        for conv in self.convolutions:
            conv.prepare(self.spec)

    def release_resources(self) -> None:
        """Clear the running state of every convolution."""
        for conv in self.convolutions:
            conv.reset()

    def load_ir_file(self, ir_file) -> None:
        """Queue a B-format IR file for decoding into the six convolutions."""
        path = Path(ir_file)
        if not path.is_file():
            raise FileNotFoundError(
                f"the selected IR file could not be found or loaded: {path}"
            )
        self.ir_loader.load_bformat_ir_file(path, self.sample_rate, NUM_CHANNELS)
        if self.ir_loader.is_buffer_ready():
            self.ir_loader.process_pending_buffers(self.convolutions, self.sample_rate)

    def process_block(self, buffer: np.ndarray) -> np.ndarray:
        """Convolve a (channels, frames) buffer in place and return it."""
        if self.ir_loader.is_buffer_ready():
            self.ir_loader.process_pending_buffers(self.convolutions, self.sample_rate)
        if not isinstance(buffer, np.ndarray):
            raise TypeError("buffer must be a numpy array")
        if buffer.ndim != 2:
            raise ValueError("buffer must have shape (channels, frames)")
        channels = min(buffer.shape[0], NUM_CHANNELS)
        step = self.spec.maximum_block_size if self.spec else max(buffer.shape[1], 1)
        for index, conv in enumerate(self.convolutions[:channels]):
            if conv.current_ir_size() == 0:
                continue
            channel = buffer[index]
            for start in range(0, channel.shape[0], step):
                conv.process(channel[start : start + step])
        return buffer

    def close(self) -> None:
        """Stop the background loader."""
        self.ir_loader.close()

    def __enter__(self) -> ConvolverProcessor:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()