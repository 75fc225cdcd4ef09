"""Command line: list the catalogue or convolve a WAV file with a B-format IR."""

from __future__ import annotations

import argparse
import struct
import sys
from pathlib import Path

import numpy as np

from .catalogue import CATALOGUE, ir_by_id
from .irloader import read_wav
from .processor import EXPECTED_BLOCK_SIZE, NUM_CHANNELS, ConvolverProcessor


def _write_wav(path, samples: np.ndarray, rate: int) -> None:
    channels, _frames = samples.shape
    payload = np.ascontiguousarray(samples.T, dtype="<f4").tobytes()
    block_align = channels * 4
    fmt = struct.pack("<HHIIHH", 3, channels, int(rate), int(rate) * block_align, block_align, 32)
    body = (
        b"WAVE"
        + b"fmt "
        + struct.pack("<I", len(fmt))
        + fmt
        + b"data"
        + struct.pack("<I", len(payload))
        + payload
    )
    if len(payload) & 1:
        body += b"\x00"
    Path(path).write_bytes(b"RIFF" + struct.pack("<I", len(body)) + body)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="airconvolver",
        description="5.1 surround convolution with B-format impulse responses.",
    )
    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("list", help="list the impulse-response catalogue")
    convolve = commands.add_parser("convolve", help="convolve a mono or 5.1 WAV file")
    convolve.add_argument("input", type=Path, help="mono or six-channel WAV file")
    convolve.add_argument("output", type=Path, help="six-channel float WAV to write")
    source = convolve.add_mutually_exclusive_group(required=True)
    source.add_argument("--ir", type=Path, help="path of a B-format IR file")
    source.add_argument("--ir-id", type=int, help="catalogue id of the IR")
    convolve.add_argument(
        "--ir-dir", type=Path, default=Path("."), help="directory holding catalogue IR files"
    )
    return parser


def _convolve(args: argparse.Namespace) -> None:
    ir_path = args.ir if args.ir is not None else args.ir_dir / ir_by_id(args.ir_id).filename
    samples, rate = read_wav(args.input)
    if samples.shape[0] == 1:
        samples = np.repeat(samples, NUM_CHANNELS, axis=0)
    elif samples.shape[0] != NUM_CHANNELS:
        raise ValueError(
            f"{args.input}: expected 1 or {NUM_CHANNELS} channels, got {samples.shape[0]}"
        )
    buffer = samples.astype(np.float32, copy=True)
    with ConvolverProcessor() as processor:
        processor.prepare_to_play(rate, EXPECTED_BLOCK_SIZE)
        processor.load_ir_file(ir_path)
        processor.ir_loader.wait_idle()
        processor.ir_loader.process_pending_buffers(
            processor.convolutions, processor.sample_rate
        )
        if not any(conv.current_ir_size() for conv in processor.convolutions):
            raise ValueError(f"{ir_path}: no usable B-format impulse response")
        for start in range(0, buffer.shape[1], EXPECTED_BLOCK_SIZE):
            processor.process_block(buffer[:, start : start + EXPECTED_BLOCK_SIZE])
    _write_wav(args.output, buffer, rate)


def main(argv=None) -> int:
    """Run the command line; return the exit status."""
    args = _build_parser().parse_args(argv)
    if args.command == "list":
        for entry in CATALOGUE:
            print(f"{entry.ir_id:3d}  {entry.name}")
        return 0
    try:
        _convolve(args)
    except KeyError as error:
        print(f"airconvolver: {error.args[0]}", file=sys.stderr)
        return 1
    except (OSError, ValueError, RuntimeError) as error:
        print(f"airconvolver: {error}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())