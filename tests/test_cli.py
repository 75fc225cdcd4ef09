import wave

import numpy as np
import pytest

from airconvolver.catalogue import ir_by_id
from airconvolver.cli import main
from airconvolver.convolution import NORMALISE_TARGET
from airconvolver.irloader import read_wav


def _write_wav(path, channels, rate=48000):
    data = np.asarray(channels, dtype=np.int16)
    with wave.open(str(path), "wb") as handle:
        handle.setnchannels(data.shape[0])
        handle.setsampwidth(2)
        handle.setframerate(rate)
        handle.writeframes(data.T.astype("<i2").tobytes())
    return path


def _impulse_bformat():
    bformat = np.zeros((4, 8), dtype=np.int16)
    bformat[0, 0] = 16384
    return bformat


@pytest.fixture
def ir_file(tmp_path):
    return _write_wav(tmp_path / "ir.wav", _impulse_bformat())


@pytest.fixture
def surround_input(tmp_path):
    rng = np.random.default_rng(4)
    data = rng.integers(-20000, 20000, (6, 1200))
    return _write_wav(tmp_path / "input.wav", data)


def test_list_prints_catalogue(capsys):
    assert main(["list"]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert len(lines) == 37
    assert "York Minster" in lines[0]
    assert lines[-1].split(None, 1) == ["37", "York Guildhall"]


def test_convolve_surround(tmp_path, ir_file, surround_input):
    output = tmp_path / "out.wav"
    assert main(["convolve", str(surround_input), str(output), "--ir", str(ir_file)]) == 0
    original, rate = read_wav(surround_input)
    result, out_rate = read_wav(output)
    assert out_rate == rate
    assert result.shape == original.shape
    for channel in (0, 1, 4, 5):
        np.testing.assert_allclose(
            result[channel], original[channel] * NORMALISE_TARGET, atol=1e-5
        )
    np.testing.assert_allclose(result[2], original[2], atol=1e-7)


def test_convolve_mono_is_spread_to_six(tmp_path, ir_file):
    mono = _write_wav(tmp_path / "mono.wav", np.full((1, 100), 8000))
    output = tmp_path / "out.wav"
    assert main(["convolve", str(mono), str(output), "--ir", str(ir_file)]) == 0
    original, _ = read_wav(mono)
    result, _ = read_wav(output)
    assert result.shape == (6, 100)
    np.testing.assert_allclose(result[3], original[0], atol=1e-7)
    np.testing.assert_allclose(result[0], original[0] * NORMALISE_TARGET, atol=1e-5)


def test_convolve_by_catalogue_id(tmp_path, surround_input):
    ir_dir = tmp_path / "irs"
    ir_dir.mkdir()
    _write_wav(ir_dir / ir_by_id(3).filename, _impulse_bformat())
    output = tmp_path / "out.wav"
    argv = ["convolve", str(surround_input), str(output), "--ir-id", "3", "--ir-dir", str(ir_dir)]
    assert main(argv) == 0
    result, _ = read_wav(output)
    assert result.shape[0] == 6


def test_unknown_catalogue_id_fails(tmp_path, surround_input, capsys):
    output = tmp_path / "out.wav"
    assert main(["convolve", str(surround_input), str(output), "--ir-id", "99"]) == 1
    assert "99" in capsys.readouterr().err
    assert not output.exists()


def test_missing_ir_fails(tmp_path, surround_input):
    output = tmp_path / "out.wav"
    assert main(["convolve", str(surround_input), str(output), "--ir", str(tmp_path / "no.wav")]) == 1
    assert not output.exists()


def test_non_bformat_ir_fails(tmp_path, surround_input):
    stereo = _write_wav(tmp_path / "stereo.wav", np.full((2, 8), 1000))
    output = tmp_path / "out.wav"
    assert main(["convolve", str(surround_input), str(output), "--ir", str(stereo)]) == 1
    assert not output.exists()


def test_wrong_input_channel_count_fails(tmp_path, ir_file):
    three = _write_wav(tmp_path / "three.wav", np.zeros((3, 10)))
    output = tmp_path / "out.wav"
    assert main(["convolve", str(three), str(output), "--ir", str(ir_file)]) == 1
    assert not output.exists()


def test_ir_source_required(tmp_path, surround_input):
    with pytest.raises(SystemExit) as info:
        main(["convolve", str(surround_input), str(tmp_path / "out.wav")])
    assert info.value.code == 2