"""Background loading of B-format impulse-response files."""

from __future__ import annotations

import logging
import queue
import struct
import threading
from collections import deque
from pathlib import Path

import numpy as np

from .bformat import decode_bformat_to_5_1

log = logging.getLogger(__name__)

_FORMAT_PCM = 1
_FORMAT_FLOAT = 3
_FORMAT_EXTENSIBLE = 0xFFFE
_STOP = object()


def _decode_samples(payload: bytes, tag: int, bits: int) -> np.ndarray:
    if tag == _FORMAT_FLOAT:
        if bits == 32:
            return np.frombuffer(payload, dtype="<f4").astype(np.float32)
        if bits == 64:
            return np.frombuffer(payload, dtype="<f8").astype(np.float32)
    elif tag == _FORMAT_PCM:
        if bits == 8:
            raw = np.frombuffer(payload, dtype=np.uint8).astype(np.float32)
            return (raw - 128.0) / 128.0
        if bits == 16:
            return np.frombuffer(payload, dtype="<i2").astype(np.float32) / 32768.0
        if bits == 24:
            triples = np.frombuffer(payload, dtype=np.uint8).reshape(-1, 3).astype(np.int32)
            values = triples[:, 0] | (triples[:, 1] << 8) | (triples[:, 2] << 16)
            values = np.where(values & 0x800000, values - 0x1000000, values)
            return values.astype(np.float32) / 8388608.0
        if bits == 32:
            return (np.frombuffer(payload, dtype="<i4").astype(np.float64) / 2**31).astype(
                np.float32
            )
    raise ValueError(f"unsupported WAV encoding: format {tag}, {bits} bits")


def read_wav(path) -> tuple[np.ndarray, int]:
    """Read a WAV file into a (channels, frames) float32 array and its sample rate."""
    data = Path(path).read_bytes()
    if len(data) < 12 or data[:4] != b"RIFF" or data[8:12] != b"WAVE":
        raise ValueError(f"{path}: not a RIFF/WAVE file")
    fmt = payload = None
    pos = 12
    while pos + 8 <= len(data):
        chunk_id = data[pos : pos + 4]
        size = int.from_bytes(data[pos + 4 : pos + 8], "little")
        body = data[pos + 8 : pos + 8 + size]
        if chunk_id == b"fmt ":
            fmt = body
        elif chunk_id == b"data":
            payload = body
        pos += 8 + size + (size & 1)
    if fmt is None or len(fmt) < 16 or payload is None:
        raise ValueError(f"{path}: missing fmt or data chunk")
    tag, channels, rate, _byte_rate, block_align, bits = struct.unpack_from("<HHIIHH", fmt)
    if tag == _FORMAT_EXTENSIBLE and len(fmt) >= 26:
        (tag,) = struct.unpack_from("<H", fmt, 24)
    if channels == 0 or block_align == 0 or block_align != channels * ((bits + 7) // 8):
        raise ValueError(f"{path}: inconsistent WAV header")
    frames = len(payload) // block_align
    samples = _decode_samples(payload[: frames * block_align], tag, bits)
    return samples.reshape(frames, channels).T.copy(), int(rate)


class IRLoader:
    """Decodes B-format IR files on worker threads and queues per-channel buffers."""

    def __init__(self, thread_pool_size: int) -> None:
        if thread_pool_size < 1:
            raise ValueError("thread_pool_size must be at least 1")
        self._tasks: queue.Queue = queue.Queue()
        self._buffers: deque[list[np.ndarray]] = deque()
        self._buffer_lock = threading.Lock()
        self._ready = threading.Event()
        self._closed = False
        self._workers = [
            threading.Thread(target=self._work, name=f"irloader-{i}", daemon=True)
            for i in range(thread_pool_size)
        ]
        for worker in self._workers:
            worker.start()

    def load_bformat_ir_file(self, ir_file, sample_rate: float, num_channels: int) -> None:
        """Queue an IR file to be read and decoded to six mono buffers.

        Files that cannot be read or that are not four-channel are skipped.
        """
        if self._closed:
            raise RuntimeError("IRLoader is closed")
        self._tasks.put(Path(ir_file))

    def process_pending_buffers(self, convolutions, sample_rate: float) -> int:
        """Load every decoded buffer set into ``convolutions``; return how many sets were used."""
        if not self._ready.is_set():
            return 0
        applied = 0
        with self._buffer_lock:
            while self._buffers:
                buffers = self._buffers.popleft()
                for conv, buffer in zip(convolutions, buffers):
                    conv.load_impulse_response(buffer, sample_rate, trim=True, normalise=True)
                applied += 1
            self._ready.clear()
        return applied

    def is_buffer_ready(self) -> bool:
        return self._ready.is_set()

    def wait_idle(self) -> None:
        """Block until every queued file has been handled."""
        self._tasks.join()

    def close(self) -> None:
        """Finish the queued files and stop the worker threads."""
        if self._closed:
            return
        self._closed = True
        for _ in self._workers:
            self._tasks.put(_STOP)
        for worker in self._workers:
            worker.join()

    def __enter__(self) -> IRLoader:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _work(self) -> None:
        while True:
            item = self._tasks.get()
            try:
                if item is _STOP:
                    return
                self._decode(item)
            except Exception:
                log.exception("failed to load impulse response %s", item)
            finally:
                self._tasks.task_done()

    def _decode(self, path: Path) -> None:
        try:
            samples, _rate = read_wav(path)
        except (OSError, ValueError) as error:
            log.warning("cannot read impulse response %s: %s", path, error)
            return
        if samples.shape[0] != 4:
            log.warning("%s has %d channels, expected B-format", path, samples.shape[0])
            return
        surround = decode_bformat_to_5_1(samples)
        channels = [channel.copy() for channel in surround]
        with self._buffer_lock:
            self._buffers.append(channels)
        self._ready.set()