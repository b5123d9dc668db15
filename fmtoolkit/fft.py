"""Radix-2 complex and real FFTs, analysis windows and a reusable spectrum buffer.

The forward transform uses the ``exp(+i...)`` kernel and the inverse uses
``exp(-i...)`` scaled by ``1/n``, so the two are exact inverses of each other.
"""

from __future__ import annotations

import math
from enum import IntEnum
from functools import lru_cache

DB_FLOOR = 0.000001


class WindowType(IntEnum):
    """Analysis window shapes understood by ``gen_window`` and ``window_func``."""

    BARTLETT = 1
    HAMMING = 2
    HANNING = 3


def is_power_of_two(x) -> bool:
    """True for 2, 4, 8, ...; values below 2 are not counted."""
    if x < 2:
        return False
    return not (x & (x - 1))


def number_of_bits_needed(power_of_two) -> int:
    """Number of index bits for a transform of the given size."""
    if power_of_two < 2:
        raise ValueError(f"FFT called with size {power_of_two}")
    bits = 0
    while not power_of_two & (1 << bits):
        bits += 1
    return bits


def reverse_bits(index, num_bits) -> int:
    """Reverse the lowest ``num_bits`` bits of ``index``."""
    rev = 0
    for _ in range(num_bits):
        rev = (rev << 1) | (index & 1)
        index >>= 1
    return rev


@lru_cache(maxsize=None)
def _bit_table(num_bits: int) -> tuple[int, ...]:
    return tuple(reverse_bits(i, num_bits) for i in range(1 << num_bits))


def complex_fft(real_in, imag_in=None, inverse=False) -> tuple[list[float], list[float]]:
    """Transform a complex sequence whose length is a power of two.

    Returns the real and imaginary parts. The inverse transform is normalised
    by the length.
    """
    real_in = list(real_in)
    n = len(real_in)
    if not is_power_of_two(n):
        raise ValueError(f"{n} is not a power of two")
    imag_in = [0.0] * n if imag_in is None else list(imag_in)
    if len(imag_in) != n:
        raise ValueError("real and imaginary parts must have the same length")

    table = _bit_table(number_of_bits_needed(n))
    real_out = [0.0] * n
    imag_out = [0.0] * n
    for i, (re, im) in enumerate(zip(real_in, imag_in)):
        j = table[i]
        real_out[j] = float(re)
        imag_out[j] = float(im)

    angle_numerator = -2.0 * math.pi if inverse else 2.0 * math.pi
    block_end = 1
    block_size = 2
    while block_size <= n:
        delta = angle_numerator / block_size
        sm2 = math.sin(-2 * delta)
        sm1 = math.sin(-delta)
        cm2 = math.cos(-2 * delta)
        cm1 = math.cos(-delta)
        w = 2 * cm1
        for start in range(0, n, block_size):
            ar2, ar1 = cm2, cm1
            ai2, ai1 = sm2, sm1
            for j in range(start, start + block_end):
                ar0 = w * ar1 - ar2
                ar2, ar1 = ar1, ar0
                ai0 = w * ai1 - ai2
                ai2, ai1 = ai1, ai0
                k = j + block_end
                tr = ar0 * real_out[k] - ai0 * imag_out[k]
                ti = ar0 * imag_out[k] + ai0 * real_out[k]
                real_out[k] = real_out[j] - tr
                imag_out[k] = imag_out[j] - ti
                real_out[j] += tr
                imag_out[j] += ti
        block_end = block_size
        block_size <<= 1

    if inverse:
        real_out = [v / n for v in real_out]
        imag_out = [v / n for v in imag_out]
    return real_out, imag_out


def real_fft(real_in) -> tuple[list[float], list[float]]:
    """Transform a real sequence of length n into n/2 complex bins.

    Bin 0 holds the DC term in the real part and the Nyquist term in the
    imaginary part.
    """
    samples = [float(v) for v in real_in]
    n = len(samples)
    half = n // 2
    if n % 2 or not is_power_of_two(half):
        raise ValueError(f"real FFT needs a power-of-two length of at least 4, got {n}")

    real_out, imag_out = complex_fft(samples[0::2], samples[1::2])

    theta = math.pi / half
    wtemp = math.sin(0.5 * theta)
    wpr = -2.0 * wtemp * wtemp
    wpi = math.sin(theta)
    wr = 1.0 + wpr
    wi = wpi

    for i in range(1, half // 2):
        i3 = half - i
        h1r = 0.5 * (real_out[i] + real_out[i3])
        h1i = 0.5 * (imag_out[i] - imag_out[i3])
        h2r = 0.5 * (imag_out[i] + imag_out[i3])
        h2i = -0.5 * (real_out[i] - real_out[i3])

        real_out[i] = h1r + wr * h2r - wi * h2i
        imag_out[i] = h1i + wr * h2i + wi * h2r
        real_out[i3] = h1r - wr * h2r + wi * h2i
        imag_out[i3] = -h1i + wr * h2i + wi * h2r

        wtemp = wr
        wr = wtemp * wpr - wi * wpi + wr
        wi = wi * wpr + wtemp * wpi + wi

    h1r = real_out[0]
    real_out[0] = h1r + imag_out[0]
    imag_out[0] = h1r - imag_out[0]
    return real_out, imag_out


def power_spectrum(samples) -> list[float]:
    """Squared magnitude of each bin of ``real_fft``; bin 0 adds DC and Nyquist."""
    re, im = real_fft(samples)
    return [r * r + i * i for r, i in zip(re, im)]


def _window_values(which, num_samples: int) -> list[float | None]:
    """Window coefficients; ``None`` marks positions the window leaves alone."""
    values: list[float | None] = [None] * num_samples
    if which == WindowType.BARTLETT:
        mid = num_samples // 2
        for i in range(mid):
            values[i] = i / float(mid)
            values[i + mid] = 1.0 - i / float(mid)
    elif which == WindowType.HAMMING:
        values = [
            0.54 - 0.46 * math.cos(2 * math.pi * i / (num_samples - 1))
            for i in range(num_samples)
        ]
    elif which == WindowType.HANNING:
        values = [
            0.50 - 0.50 * math.cos(2 * math.pi * i / (num_samples - 1))
            for i in range(num_samples)
        ]
    return values


def window_func(which, samples) -> list[float]:
    """Return the samples multiplied by the chosen window; unknown types change nothing."""
    samples = [float(v) for v in samples]
    coefficients = _window_values(which, len(samples))
    return [s if c is None else s * c for s, c in zip(samples, coefficients)]


def gen_window(which, num_samples) -> list[float]:
    """Window coefficients of the given length; unknown types give zeros."""
    return [0.0 if c is None else c for c in _window_values(which, num_samples)]


class FFT:
    """Fixed-size transform with working buffers for analysis and resynthesis."""

    def __init__(self, size: int = 1024) -> None:
        if size < 4 or not is_power_of_two(size):
            raise ValueError(f"FFT size must be a power of two of at least 4, got {size}")
        self.n = size
        self.half = size // 2
        self.in_real = [0.0] * size
        self.in_img = [0.0] * size
        self.out_real = [0.0] * size
        self.out_img = [0.0] * size

    @property
    def real(self) -> list[float]:
        return self.out_real

    @property
    def imag(self) -> list[float]:
        return self.out_img

    def calc_fft(self, data, window, start=0) -> None:
        """Window ``n`` samples of data from ``start`` and transform them."""
        segment = list(data[start:start + self.n])
        coefficients = list(window[:self.n])
        if len(segment) < self.n or len(coefficients) < self.n:
            raise ValueError(f"need {self.n} samples and window values")
        self.in_real = [s * w for s, w in zip(segment, coefficients)]
        re, im = real_fft(self.in_real)
        self.out_real[:self.half] = re
        self.out_img[:self.half] = im

    def cart_to_pol(self) -> tuple[list[float], list[float]]:
        """Magnitude and phase of the first half of the last transform."""
        bins = list(zip(self.out_real[:self.half], self.out_img[:self.half]))
        magnitude = [math.sqrt(r * r + i * i) for r, i in bins]
        phase = [math.atan2(i, r) for r, i in bins]
        return magnitude, phase

    def power_spectrum(self, data, window, start=0) -> tuple[list[float], list[float]]:
        """Transform a windowed frame and return its magnitudes and phases."""
        self.calc_fft(data, window, start)
        return self.cart_to_pol()

    def pol_to_cart(self, magnitude, phase) -> None:
        """Load a one-sided spectrum from polar form; negative frequencies are zeroed."""
        pairs = list(zip(magnitude, phase))[:self.half]
        if len(pairs) < self.half:
            raise ValueError(f"need {self.half} magnitudes and phases")
        self.in_real = [m * math.cos(p) for m, p in pairs] + [0.0] * self.half
        self.in_img = [m * math.sin(p) for m, p in pairs] + [0.0] * self.half

    def calc_ifft(self, final_out, window, start=0):
        """Inverse-transform the loaded spectrum and add it, windowed, into final_out."""
        self.out_real, self.out_img = complex_fft(self.in_real, self.in_img, inverse=True)
        coefficients = list(window[:self.n])
        if len(coefficients) < self.n or len(final_out) < start + self.n:
            raise ValueError(f"need {self.n} window values and output slots")
        for pos, value, w in zip(range(start, start + self.n), self.out_real, coefficients):
            final_out[pos] += value * w
        return final_out

    def inverse_fft_complex(self, final_out, window, real, imaginary, start=0):
        """Store the given bins in the output buffers, then run ``calc_ifft``.

        The inverse transform works on the spectrum loaded by ``pol_to_cart``.
        """
        for i, (re, im) in enumerate(list(zip(real, imaginary))[:self.half]):
            self.out_real[i] = float(re)
            self.out_img[i] = float(im)
        return self.calc_ifft(final_out, window, start)

    def inverse_power_spectrum(self, final_out, window, magnitude, phase, start=0):
        """Resynthesise a frame from magnitudes and phases into final_out."""
        self.pol_to_cart(magnitude, phase)
        return self.calc_ifft(final_out, window, start)

    def conv_to_db(self, values) -> list[float]:
        """Decibel scale of the first half of values; tiny values map to zero."""
        return [
            0.0 if v < DB_FLOOR else 20.0 * math.log10(v + 1)
            for v in list(values)[:self.half]
        ]