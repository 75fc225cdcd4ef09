import numpy as np
import pytest

from airconvolver.convolution import (
    NORMALISE_TARGET,
    Convolution,
    ProcessSpec,
)


def _run_blocks(conv, signal, block_size):
    out = signal.astype(np.float64).copy()
    for start in range(0, out.size, block_size):
        conv.process(out[start : start + block_size])
    return out


def test_spec_rejects_bad_values():
    with pytest.raises(ValueError):
        ProcessSpec(sample_rate=0, maximum_block_size=512)
    with pytest.raises(ValueError):
        ProcessSpec(sample_rate=48000, maximum_block_size=0)


def test_head_size_must_be_positive():
    with pytest.raises(ValueError):
        Convolution(0)


def test_process_before_prepare_raises():
    conv = Convolution(64)
    conv.load_impulse_response([1.0], 48000, trim=False, normalise=False)
    with pytest.raises(RuntimeError):
        conv.process(np.zeros(8))


def test_block_larger_than_spec_raises():
    conv = Convolution(64)
    conv.prepare(ProcessSpec(48000, 16))
    conv.load_impulse_response([1.0], 48000, trim=False, normalise=False)
    with pytest.raises(ValueError):
        conv.process(np.zeros(17))


def test_without_impulse_passes_through():
    conv = Convolution(64)
    conv.prepare(ProcessSpec(48000, 16))
    block = np.arange(16, dtype=np.float64)
    conv.process(block)
    np.testing.assert_array_equal(block, np.arange(16))
    assert conv.current_ir_size() == 0


def test_identity_impulse():
    conv = Convolution(64)
    conv.prepare(ProcessSpec(48000, 32))
    conv.load_impulse_response([1.0], 48000, trim=False, normalise=False)
    signal = np.random.default_rng(0).standard_normal(96)
    out = _run_blocks(conv, signal, 32)
    np.testing.assert_allclose(out, signal, atol=1e-9)


def test_delay_crosses_block_boundary():
    conv = Convolution(64)
    conv.prepare(ProcessSpec(48000, 4))
    conv.load_impulse_response([0.0, 0.0, 1.0], 48000, trim=False, normalise=False)
    signal = np.zeros(12)
    signal[3] = 1.0
    out = _run_blocks(conv, signal, 4)
    expected = np.zeros(12)
    expected[5] = 1.0
    np.testing.assert_allclose(out, expected, atol=1e-9)


@pytest.mark.parametrize("head_size", [1, 8, 1024])
def test_streaming_matches_full_convolution(head_size):
    rng = np.random.default_rng(5)
    ir = rng.standard_normal(50)
    signal = rng.standard_normal(200)
    conv = Convolution(head_size)
    conv.prepare(ProcessSpec(48000, 16))
    conv.load_impulse_response(ir, 48000, trim=False, normalise=False)
    out = _run_blocks(conv, signal, 16)
    np.testing.assert_allclose(out, np.convolve(signal, ir)[:200], atol=1e-9)


def test_trim_removes_silent_edges():
    conv = Convolution(64)
    conv.load_impulse_response([0.0, 0.0, 0.5, 0.0, 0.25, 0.0], 48000, trim=True, normalise=False)
    assert conv.current_ir_size() == 3


def test_all_silent_impulse_trims_to_nothing():
    conv = Convolution(64)
    conv.load_impulse_response(np.zeros(10), 48000, trim=True, normalise=True)
    assert conv.current_ir_size() == 0


def test_normalised_impulse_has_target_energy():
    ir = np.random.default_rng(9).standard_normal(20)
    conv = Convolution(64)
    conv.prepare(ProcessSpec(48000, 32))
    conv.load_impulse_response(ir, 48000, trim=False, normalise=True)
    block = np.zeros(32)
    block[0] = 1.0
    conv.process(block)
    assert np.sqrt(np.sum(block**2)) == pytest.approx(NORMALISE_TARGET)
    np.testing.assert_allclose(block[:20] / ir, block[0] / ir[0])


def test_reset_clears_tail():
    conv = Convolution(64)
    conv.prepare(ProcessSpec(48000, 4))
    conv.load_impulse_response([0.0, 0.0, 0.0, 0.0, 0.0, 1.0], 48000, trim=False, normalise=False)
    block = np.array([1.0, 0.0, 0.0, 0.0])
    conv.process(block)
    conv.reset()
    follow = np.zeros(4)
    conv.process(follow)
    assert not follow.any()


def test_resampled_to_prepared_rate():
    ir = np.ones(100)
    conv = Convolution(64)
    conv.load_impulse_response(ir, 24000, trim=False, normalise=False)
    assert conv.current_ir_size() == ir.size
    conv.prepare(ProcessSpec(48000, 64))
    assert conv.current_ir_size() == 2 * ir.size


def test_rejects_multichannel_impulse():
    conv = Convolution(64)
    with pytest.raises(ValueError):
        conv.load_impulse_response(np.zeros((2, 4)), 48000)