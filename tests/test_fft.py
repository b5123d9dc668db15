import math

import pytest

from fmtoolkit.fft import (
    FFT,
    WindowType,
    complex_fft,
    gen_window,
    is_power_of_two,
    number_of_bits_needed,
    power_spectrum,
    real_fft,
    reverse_bits,
    window_func,
)

SAMPLES = [0.3, -1.2, 0.7, 2.5, -0.4, 0.9, 1.1, -0.6, 0.2, 0.0, -1.5, 0.8, 0.4, -0.3, 1.7, -2.0]


def cosine(n, k):
    return [math.cos(2 * math.pi * k * i / n) for i in range(n)]


@pytest.mark.parametrize("value", [2, 4, 8, 1024, 65536])
def test_powers_of_two_are_recognised(value):
    assert is_power_of_two(value) is True


@pytest.mark.parametrize("value", [-4, 0, 1, 3, 6, 12, 1000])
def test_non_powers_of_two_are_rejected(value):
    assert is_power_of_two(value) is False


def test_number_of_bits_needed():
    for bits in range(1, 12):
        assert number_of_bits_needed(1 << bits) == bits


@pytest.mark.parametrize("value", [0, 1])
def test_number_of_bits_needed_rejects_small_sizes(value):
    with pytest.raises(ValueError):
        number_of_bits_needed(value)


def test_reverse_bits_is_an_involution():
    for bits in range(1, 7):
        for i in range(1 << bits):
            assert reverse_bits(reverse_bits(i, bits), bits) == i
        assert reverse_bits(1, bits) == 1 << (bits - 1)


def test_complex_fft_round_trip():
    imag = list(reversed(SAMPLES))
    re, im = complex_fft(SAMPLES, imag)
    back_re, back_im = complex_fft(re, im, inverse=True)
    assert back_re == pytest.approx(SAMPLES, abs=1e-9)
    assert back_im == pytest.approx(imag, abs=1e-9)


def test_complex_fft_of_impulse_is_flat():
    re, im = complex_fft([1.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0])
    assert re == pytest.approx([1.0] * 8)
    assert im == pytest.approx([0.0] * 8, abs=1e-12)


def test_complex_fft_of_constant_has_only_dc():
    re, im = complex_fft([2.0] * 8)
    assert re[0] == pytest.approx(16.0)
    assert re[1:] == pytest.approx([0.0] * 7, abs=1e-9)
    assert im == pytest.approx([0.0] * 8, abs=1e-9)


def test_complex_fft_rejects_bad_lengths():
    with pytest.raises(ValueError):
        complex_fft([1.0, 2.0, 3.0])
    with pytest.raises(ValueError):
        complex_fft([1.0, 2.0], [0.0])


def test_real_fft_matches_complex_fft():
    n = len(SAMPLES)
    re, im = real_fft(SAMPLES)
    cre, cim = complex_fft(SAMPLES)
    assert len(re) == n // 2
    assert re[1:] == pytest.approx(cre[1:n // 2], abs=1e-9)
    assert im[1:] == pytest.approx(cim[1:n // 2], abs=1e-9)
    assert re[0] == pytest.approx(sum(SAMPLES))
    assert im[0] == pytest.approx(cre[n // 2], abs=1e-9)


def test_real_fft_rejects_bad_lengths():
    with pytest.raises(ValueError):
        real_fft([1.0, 2.0])
    with pytest.raises(ValueError):
        real_fft([1.0] * 12)


def test_power_spectrum_is_squared_magnitude_of_real_fft():
    re, im = real_fft(SAMPLES)
    spectrum = power_spectrum(SAMPLES)
    assert spectrum == pytest.approx([r * r + i * i for r, i in zip(re, im)])


def test_power_spectrum_peaks_at_cosine_bin():
    n, k = 32, 5
    spectrum = power_spectrum(cosine(n, k))
    assert max(range(len(spectrum)), key=spectrum.__getitem__) == k
    assert spectrum[k] == pytest.approx((n / 2) ** 2)


def test_hanning_window_is_symmetric_with_zero_ends():
    w = gen_window(WindowType.HANNING, 8)
    assert w[0] == pytest.approx(0.0, abs=1e-12)
    assert w[-1] == pytest.approx(0.0, abs=1e-12)
    assert w == pytest.approx(list(reversed(w)))


def test_hamming_window_edges():
    w = gen_window(WindowType.HAMMING, 16)
    assert w[0] == pytest.approx(0.54 - 0.46)
    assert w == pytest.approx(list(reversed(w)))


def test_bartlett_window_halves_sum_to_one():
    w = gen_window(WindowType.BARTLETT, 8)
    assert w[0] == 0.0
    assert w[4] == pytest.approx(1.0)
    for a, b in zip(w[:4], w[4:]):
        assert a + b == pytest.approx(1.0)


def test_bartlett_window_odd_length_leaves_last_zero():
    w = gen_window(WindowType.BARTLETT, 5)
    assert w[4] == 0.0
    assert w[2] == pytest.approx(1.0)


def test_unknown_window_type():
    assert gen_window(7, 4) == [0.0, 0.0, 0.0, 0.0]
    assert window_func(7, SAMPLES) == SAMPLES


@pytest.mark.parametrize("kind", list(WindowType))
def test_window_func_multiplies_by_window(kind):
    w = gen_window(kind, len(SAMPLES))
    assert window_func(kind, SAMPLES) == pytest.approx([s * c for s, c in zip(SAMPLES, w)])


def test_fft_rejects_bad_sizes():
    with pytest.raises(ValueError):
        FFT(6)
    with pytest.raises(ValueError):
        FFT(2)


def test_fft_power_spectrum_of_cosine():
    n, k = 16, 3
    f = FFT(n)
    mags, phases = f.power_spectrum(cosine(n, k), [1.0] * n)
    assert len(mags) == len(phases) == n // 2
    assert max(range(len(mags)), key=mags.__getitem__) == k
    assert mags[k] == pytest.approx(n / 2)
    assert [m for i, m in enumerate(mags) if i != k] == pytest.approx([0.0] * 7, abs=1e-9)


def test_fft_calc_fft_uses_start_offset():
    f = FFT(8)
    padded = [9.0, 9.0] + SAMPLES[:8]
    f.calc_fft(padded, [1.0] * 8, 2)
    re, im = real_fft(SAMPLES[:8])
    assert f.real[:4] == pytest.approx(re)
    assert f.imag[:4] == pytest.approx(im)


def test_fft_calc_fft_needs_enough_data():
    f = FFT(8)
    with pytest.raises(ValueError):
        f.calc_fft([1.0] * 4, [1.0] * 8)


def test_inverse_power_spectrum_of_one_sided_cosine():
    n, k = 16, 3
    x = cosine(n, k)
    f = FFT(n)
    mags, phases = f.power_spectrum(x, [1.0] * n)
    out = f.inverse_power_spectrum([0.0] * n, [1.0] * n, mags, phases)
    assert out == pytest.approx([v / 2 for v in x], abs=1e-9)


def test_calc_ifft_accumulates_into_output():
    n = 8
    f = FFT(n)
    mags, phases = f.power_spectrum(cosine(n, 1), [1.0] * n)
    f.pol_to_cart(mags, phases)
    once = f.calc_ifft([0.0] * n, [1.0] * n)
    out = [0.0] * n
    f.calc_ifft(out, [1.0] * n)
    f.calc_ifft(out, [1.0] * n)
    assert out == pytest.approx([2 * v for v in once])


def test_pol_to_cart_zeroes_negative_frequencies():
    f = FFT(8)
    f.pol_to_cart([1.0, 2.0, 3.0, 4.0], [0.0, 0.5, 1.0, 1.5])
    assert f.in_real[4:] == [0.0] * 4
    assert f.in_img[4:] == [0.0] * 4
    assert [math.hypot(r, i) for r, i in zip(f.in_real[:4], f.in_img[:4])] == pytest.approx(
        [1.0, 2.0, 3.0, 4.0]
    )


def test_inverse_fft_complex_transforms_loaded_spectrum():
    n = 8
    f = FFT(n)
    mags, phases = f.power_spectrum(SAMPLES[:n], [1.0] * n)
    f.pol_to_cart(mags, phases)
    expected = f.calc_ifft([0.0] * n, [1.0] * n)
    out = f.inverse_fft_complex([0.0] * n, [1.0] * n, [5.0] * 4, [7.0] * 4)
    assert out == pytest.approx(expected)


def test_conv_to_db():
    f = FFT(8)
    db = f.conv_to_db([0.0, 1e-7, 9.0, 99.0, 5.0, 5.0])
    assert len(db) == 4
    assert db[0] == 0.0
    assert db[1] == 0.0
    assert db[3] == pytest.approx(2 * db[2])
    assert db[2] > 0.0