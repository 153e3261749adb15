import numpy as np
import pytest

from sensor_dsp.dsp.fft import DopplerFFT, RangeCFFT, RangeFFT, doppler_fft, range_cfft, range_fft
from sensor_dsp.dsp.windows import hann
from sensor_dsp.errors import ArgumentError, ContractError


def _tone_frame(chirps: int = 16, samples: int = 64, beat_bin: int = 10) -> np.ndarray:
    n = np.arange(samples)
    return np.tile(np.cos(2 * np.pi * beat_bin * n / samples), (chirps, 1))


@pytest.mark.parametrize("mean_removal", [False, True])
def test_single_tone_lands_in_expected_range_bin(mean_removal: bool) -> None:
    frame = _tone_frame(beat_bin=10)
    window = hann(64) if mean_removal else None
    out = range_fft(frame, mean_removal=mean_removal, window=window)
    assert out.shape == (16, 32)
    peaks = np.argmax(np.abs(out), axis=1)
    assert np.all(np.abs(peaks - 10) <= 1)


def test_range_fft_matches_rfft_with_zero_dc_imag() -> None:
    rng = np.random.default_rng(0)
    frame = rng.normal(size=(4, 32))
    expected = np.fft.rfft(frame, axis=1)[:, :16]
    out = range_fft(frame.copy())
    np.testing.assert_allclose(out, expected, atol=1e-10)
    assert np.all(out[:, 0].imag == 0.0)


def test_range_fft_mean_removal_clears_dc() -> None:
    frame = _tone_frame() + 5.0
    out = range_fft(frame, mean_removal=True)
    assert np.all(np.abs(out[:, 0]) < 1e-9)
    assert np.allclose(frame.mean(axis=1), 0.0)


def test_range_fft_leaves_frame_untouched_without_preprocessing() -> None:
    frame = _tone_frame()
    before = frame.copy()
    range_fft(frame)
    np.testing.assert_array_equal(frame, before)


def test_range_fft_writes_into_caller_buffer() -> None:
    frame = _tone_frame()
    out = np.zeros((16, 32), dtype=np.complex128)
    result = range_fft(frame, out=out)
    assert result is out
    assert np.abs(out).max() > 0


def test_unsupported_length_reports_error_without_side_effects() -> None:
    stage = RangeFFT()
    stage(_tone_frame(samples=64))
    frame = np.ones((4, 100))
    out = np.full((4, 50), 7.0 + 0j)
    with pytest.raises(ArgumentError):
        stage(frame, out=out, mean_removal=True, window=np.ones(100))
    np.testing.assert_array_equal(frame, 1.0)
    np.testing.assert_array_equal(out, 7.0 + 0j)
    assert stage.plan.length == 64


def test_plan_reconfigures_on_length_change() -> None:
    stage = RangeFFT()
    stage(_tone_frame(samples=64))
    assert stage.plan.length == 64
    out = stage(_tone_frame(samples=128, beat_bin=20))
    assert stage.plan.length == 128
    assert out.shape == (16, 64)


def test_range_fft_rejects_bad_buffers() -> None:
    with pytest.raises(ContractError):
        range_fft(np.zeros((4, 32)), out=np.zeros((4, 15), dtype=complex))
    with pytest.raises(ContractError):
        range_fft(np.zeros((4, 32)), window=np.ones(31))
    with pytest.raises(ContractError):
        range_fft(np.zeros(32))


def test_range_cfft_is_in_place() -> None:
    rng = np.random.default_rng(2)
    frame = rng.normal(size=(4, 32)) + 1j * rng.normal(size=(4, 32))
    expected = np.fft.fft(frame, axis=1)
    out = range_cfft(frame)
    assert out is frame
    np.testing.assert_allclose(frame, expected, atol=1e-10)


def test_range_cfft_unsupported_length() -> None:
    with pytest.raises(ArgumentError):
        RangeCFFT()(np.zeros((2, 8), dtype=complex))


def test_doppler_fft_transposes_then_transforms() -> None:
    rng = np.random.default_rng(3)
    range_bins = rng.normal(size=(16, 32)) + 1j * rng.normal(size=(16, 32))
    before = range_bins.copy()
    out = doppler_fft(range_bins)
    assert out.shape == (32, 16)
    np.testing.assert_allclose(out, np.fft.fft(before.T, axis=1), atol=1e-10)
    np.testing.assert_array_equal(range_bins, before)


def test_doppler_tone_lands_in_expected_bin() -> None:
    chirps = np.arange(16)
    range_bins = np.tile(np.exp(2j * np.pi * 3 * chirps / 16)[:, None], (1, 8))
    out = DopplerFFT()(range_bins, window=hann(16))
    assert np.all(np.argmax(np.abs(out), axis=1) == 3)


def test_doppler_mean_removal_suppresses_static_returns() -> None:
    range_bins = np.full((16, 4), 2.0 + 1.0j)
    out = doppler_fft(range_bins, mean_removal=True)
    assert np.abs(out).max() < 1e-12


def test_doppler_destination_must_not_alias_source() -> None:
    range_bins = np.zeros((16, 16), dtype=complex)
    with pytest.raises(ContractError):
        doppler_fft(range_bins, out=range_bins.T)


def test_doppler_unsupported_length() -> None:
    with pytest.raises(ArgumentError):
        doppler_fft(np.zeros((12, 4), dtype=complex))


def test_doppler_unsupported_length_leaves_buffers_and_plan_untouched() -> None:
    stage = DopplerFFT()
    stage(np.zeros((16, 4), dtype=complex))
    range_bins = np.ones((12, 4), dtype=complex)
    out = np.full((4, 12), 7.0 + 0j)
    with pytest.raises(ArgumentError):
        stage(range_bins, out=out, mean_removal=True, window=np.ones(12))
    np.testing.assert_array_equal(range_bins, 1.0)
    np.testing.assert_array_equal(out, 7.0 + 0j)
    assert stage.plan.length == 16
