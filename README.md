# airconvolver

Convolution reverb for 5.1 surround sound, built around first-order
Ambisonic (B-format) impulse responses.

A four-channel B-format impulse response (W, X, Y, Z) is decoded to six
5.1 channels (L, R, C, LFE, Ls, Rs). Each decoded channel becomes the
impulse response of its own convolution engine, and each channel of the
incoming audio is convolved with the matching one.

## Installation

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## Command line

The package installs one command, `airconvolver`, with two subcommands.

List the impulse-response catalogue (id and name of each room):

```
airconvolver list
```

Convolve a WAV file with a B-format impulse response:

```
airconvolver convolve input.wav output.wav --ir hall.wav
airconvolver convolve input.wav output.wav --ir-id 1 --ir-dir irs/
```

- `input` is a mono or six-channel WAV file. A mono input is copied to all
  six channels.
- `output` is written as a six-channel 32-bit float WAV at the input's
  sample rate.
- Exactly one of `--ir` (path of a B-format IR file) or `--ir-id`
  (catalogue id, 1 to 37) is required. With `--ir-id` the catalogue file
  name is looked up in `--ir-dir` (default: the current directory).

The command exits with status 1 and a message on standard error when the
input or IR cannot be read, the input has the wrong number of channels,
the IR is not four-channel, or the catalogue id is unknown.

## Library use

### Reading WAV files

`airconvolver.irloader.read_wav(path)` returns a `(channels, frames)`
float32 array and the sample rate. It reads PCM (8, 16, 24 and 32 bit) and
IEEE float (32 and 64 bit) data, including the extensible format header,
and raises `ValueError` for files it cannot interpret.

### Decoding B-format

`airconvolver.bformat.decode_bformat_to_5_1` takes a `(4, n)` B-format
array (channels W, X, Y, Z) and returns a `(6, n)` float32 array in the
order L, R, C, LFE, Ls, Rs. The centre and LFE channels are silent and Z is
not used; the four remaining speakers are fed from W, X and Y with fixed
decoder gains. Any other input shape raises `ValueError`.

### Loading impulse responses

`airconvolver.irloader.IRLoader` reads and decodes IR files on a pool of
worker threads. Only files with exactly four channels are accepted as
B-format; files that cannot be read or have another channel count are
logged and skipped. Decoded sets of six mono buffers are queued until
`process_pending_buffers` loads them into a list of convolution engines
(trimmed and normalised) and returns how many sets it applied.
`wait_idle` blocks until every queued file has been handled, and `close`
stops the workers. The loader is a context manager:

```python
from airconvolver.irloader import IRLoader

with IRLoader(6) as loader:
    loader.load_bformat_ir_file("hall.wav", 48000.0, 6)
    loader.wait_idle()
    if loader.is_buffer_ready():
        loader.process_pending_buffers(convolutions, 48000.0)
```

### Convolution

`airconvolver.convolution.Convolution` convolves one channel with a loaded
impulse response, split into partitions of `head_size` samples (16384 by
default), carrying the tail from block to block. It is set up with a
`ProcessSpec(sample_rate, maximum_block_size, num_channels=1)`, given an
impulse response with `load_impulse_response` (optionally trimmed of
near-silent samples at either end and normalised), and run block by block
with `process`, which replaces the samples of a one-dimensional array in
place. An impulse response is resampled to the prepared sample rate.
`process` raises `RuntimeError` before `prepare` and `ValueError` for a
block longer than the prepared maximum. `current_ir_size` reports the
length of the response in use; with none loaded, blocks are left as they
are. `reset` clears the carried tail.

### The processor

`airconvolver.processor.ConvolverProcessor` ties these together in the
shape of an audio plug-in:

```python
from airconvolver.processor import ConvolverProcessor

with ConvolverProcessor(6) as processor:
    processor.prepare_to_play(48000.0, 512)
    processor.load_ir_file("hall.wav")
    output = processor.process_block(block)
```

`prepare_to_play` creates six convolution engines and always uses a block
size of 512 samples, logging a warning when asked for another.
`load_ir_file` raises `FileNotFoundError` for a missing file and otherwise
starts loading in the background; the new responses are picked up by the
next `process_block` call once they are ready. `process_block` convolves a
`(channels, frames)` numpy array in place, in 512-sample steps, and returns
it; channels without a loaded response are left unchanged.
`release_resources` resets every engine.

### The impulse response catalogue

`airconvolver.catalogue.CATALOGUE` lists the 37 rooms, from York Minster to
York Guildhall, as `ImpulseResponse(ir_id, name, filename)` entries.
`ir_names` gives their display names in order and `ir_by_id` looks one up
by its number (1 to 37), raising `KeyError` for any other.

The same module holds layout helpers for drawing an impulse response:
`waveform_points` maps samples to points in a plot rectangle,
`time_ticks` places whole-second marks and labels along its time axis, and
`selection_box_bounds` gives the position of the room selector for a
window of a given size.

## What it does not do

- The catalogue holds only names and file names; the impulse-response WAV
  files themselves are not included. Supply them yourself, for example in
  the directory given to `--ir-dir`.
- There is no graphical editor, audio plug-in host or real-time audio
  input and output. Audio is processed from and to WAV files or numpy
  arrays.