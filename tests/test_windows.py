import numpy as np
import pytest

from sensor_dsp.dsp.windows import blackmanharris, cached_window, get_window, hamming, hann
from sensor_dsp.errors import ContractError


@pytest.mark.parametrize("name", ["hamming", "hann", "blackman", "blackmanharris"])
@pytest.mark.parametrize("length", [2, 3, 16, 33, 128])
def test_windows_symmetric_and_bounded(name: str, length: int) -> None:
    win = get_window(name, length)
    assert win.shape == (length,)
    np.testing.assert_allclose(win, win[::-1], atol=1e-12)
    assert np.all(win >= 0.0)
    assert np.all(win <= 1.0)


def test_hamming_matches_formula() -> None:
    n = np.arange(8)
    expected = 0.54 - 0.46 * np.cos(2 * np.pi * n / 7)
    np.testing.assert_allclose(hamming(8), expected, atol=1e-12)


def test_blackmanharris_matches_formula() -> None:
    n = np.arange(16)
    x = 2 * np.pi * n / 15
    expected = 0.35875 - 0.48829 * np.cos(x) + 0.14128 * np.cos(2 * x) - 0.01168 * np.cos(3 * x)
    np.testing.assert_allclose(blackmanharris(16), expected, atol=1e-7)


def test_odd_length_hann_peaks_at_centre() -> None:
    win = hann(5)
    assert np.isclose(win[2], 1.0)
    assert np.isclose(win[0], 0.0)


def test_window_length_below_two_rejected() -> None:
    with pytest.raises(ContractError):
        hann(1)


def test_unknown_window_name() -> None:
    with pytest.raises(ValueError):
        get_window("kaiser", 16)


def test_cached_window_is_reused_and_read_only() -> None:
    first = cached_window("hann", 64)
    second = cached_window("hann", 64)
    assert first is second
    assert not first.flags.writeable
    assert cached_window("hann", 32).shape == (32,)
