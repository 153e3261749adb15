import numpy as np
import pytest

from sensor_dsp.dsp.mti import MTIFilter
from sensor_dsp.errors import ContractError


def test_init_zero_fills_caller_history() -> None:
    history = np.full(4, 7.0)
    mti = MTIFilter(0.3, 4, history)
    assert mti.history is history
    np.testing.assert_array_equal(history, 0.0)


def test_alpha_one_tracks_latest_input() -> None:
    mti = MTIFilter(1.0, 3)
    first = np.array([1.0, -2.0, 0.5])
    out = mti(first)
    np.testing.assert_array_equal(out, first)
    np.testing.assert_array_equal(mti.history, first)
    second = np.array([2.0, 2.0, 2.0])
    out = mti(second)
    np.testing.assert_allclose(out, second - first)
    np.testing.assert_allclose(mti.history, second)


def test_alpha_zero_freezes_history() -> None:
    mti = MTIFilter(0.0, 2)
    data = np.array([1.0, 2.0])
    for _ in range(3):
        np.testing.assert_array_equal(mti(data), data)
    np.testing.assert_array_equal(mti.history, 0.0)


def test_constant_input_converges_to_zero() -> None:
    mti = MTIFilter(0.5, 4)
    data = np.full(4, 10.0)
    magnitudes = [np.abs(mti(data)).max() for _ in range(30)]
    assert all(b <= a for a, b in zip(magnitudes, magnitudes[1:]))
    assert magnitudes[-1] < 1e-6


def test_history_follows_exponential_average() -> None:
    rng = np.random.default_rng(1)
    alpha = 0.25
    mti = MTIFilter(alpha, 5)
    expected = np.zeros(5)
    for _ in range(10):
        x = rng.normal(size=5)
        out = mti(x)
        np.testing.assert_allclose(out, x - expected)
        expected = (1 - alpha) * expected + alpha * x
        np.testing.assert_allclose(mti.history, expected)


def test_in_place_output_allowed() -> None:
    mti = MTIFilter(0.5, 3)
    data = np.array([2.0, 4.0, 6.0])
    mti(data, out=data)
    np.testing.assert_array_equal(mti.history, [1.0, 2.0, 3.0])


def test_complex_history() -> None:
    mti = MTIFilter(1.0, 2, np.zeros(2, dtype=complex))
    data = np.array([1 + 1j, 2 - 1j])
    np.testing.assert_array_equal(mti(data), data)


def test_contract_violations() -> None:
    with pytest.raises(ContractError):
        MTIFilter(1.5, 4)
    mti = MTIFilter(0.5, 4)
    with pytest.raises(ContractError):
        mti(np.zeros(4), out=mti.history)
    with pytest.raises(ContractError):
        mti(np.zeros(3))
    mti(np.ones(4))
    with pytest.raises(ContractError):
        mti(mti.history)
    np.testing.assert_array_equal(mti.history, 0.5)


def test_complex_data_into_real_history_is_rejected_untouched() -> None:
    mti = MTIFilter(0.5, 2)
    data = np.array([1 + 1j, 2 - 1j])
    with pytest.raises(ContractError):
        mti(data, out=data)
    np.testing.assert_array_equal(data, [1 + 1j, 2 - 1j])
    np.testing.assert_array_equal(mti.history, 0.0)


def test_real_output_for_complex_result_is_rejected() -> None:
    mti = MTIFilter(0.5, 2, np.zeros(2, dtype=complex))
    out = np.zeros(2)
    with pytest.raises(ContractError):
        mti(np.ones(2), out=out)
    np.testing.assert_array_equal(mti.history, 0.0)


def test_reinit_clears_history() -> None:
    mti = MTIFilter(0.5, 2)
    mti(np.ones(2))
    mti.init(0.1, 2, mti.history)
    np.testing.assert_array_equal(mti.history, 0.0)
    assert mti.alpha == 0.1
