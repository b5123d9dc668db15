"""Streaming spectrum analysis, overlap-add resynthesis and octave-band averaging."""

from __future__ import annotations

import math
from enum import IntEnum

from .fft import FFT, WindowType, gen_window

FIRST_OCTAVE_FREQUENCY = 55.0
PEAK_DECAY_RATE = 0.9


class FFTMode(IntEnum):
    """Whether the analyzer converts each frame to magnitudes and phases."""

    NO_POLAR_CONVERSION = 0
    WITH_POLAR_CONVERSION = 1


class IFFTMode(IntEnum):
    """How the inverse transform interprets the two input sequences."""

    SPECTRUM = 0
    COMPLEX = 1


def _padded_window(window_size: int, fft_size: int) -> list[float]:
    return gen_window(WindowType.HANNING, window_size) + [0.0] * (fft_size - window_size)


def _check_sizes(fft_size: int, hop_size: int, window_size: int) -> int:
    window_size = window_size or fft_size
    if window_size < 2 or window_size > fft_size:
        raise ValueError(
            f"window size must lie between 2 and the FFT size {fft_size}, got {window_size}"
        )
    if hop_size < 1 or hop_size > window_size:
        raise ValueError(
            f"hop size must lie between 1 and the window size {window_size}, got {hop_size}"
        )
    return window_size


class SpectrumAnalyzer:
    """Feeds samples one at a time and transforms a Hann-windowed frame every hop."""

    def __init__(
        self,
        fft_size: int = 1024,
        hop_size: int = 512,
        window_size: int = 0,
        sample_rate: float = 44100.0,
    ) -> None:
        self._fft = FFT(fft_size)
        self.fft_size = fft_size
        self.window_size = _check_sizes(fft_size, hop_size, window_size)
        self.hop_size = hop_size
        self.sample_rate = float(sample_rate)
        self.num_bins = fft_size // 2
        self._buffer = [0.0] * fft_size
        self.magnitudes = [0.0] * self.num_bins
        self.phases = [0.0] * self.num_bins
        self._magnitudes_db = [0.0] * self.num_bins
        self._pos = self.window_size - hop_size
        self.window = _padded_window(self.window_size, fft_size)
        self.new_fft = False
        self._recalc = True

    @property
    def real(self) -> list[float]:
        return self._fft.real

    @property
    def imag(self) -> list[float]:
        return self._fft.imag

    def process(self, value, mode=FFTMode.WITH_POLAR_CONVERSION) -> bool:
        """Add a sample; return True when a new frame has just been transformed."""
        self._buffer[self._pos] = float(value)
        self._pos += 1
        self.new_fft = self._pos == self.window_size
        if self.new_fft:
            if mode == FFTMode.WITH_POLAR_CONVERSION:
                self.magnitudes, self.phases = self._fft.power_spectrum(
                    self._buffer, self.window
                )
            else:
                self._fft.calc_fft(self._buffer, self.window)
            keep = self.window_size - self.hop_size
            self._buffer[:keep] = self._buffer[self.hop_size:self.window_size]
            self._pos = keep
            self._recalc = True
        return self.new_fft

    def magnitudes_db(self) -> list[float]:
        """Magnitudes on a decibel scale, recomputed only after a new frame."""
        if self._recalc:
            self._magnitudes_db = self._fft.conv_to_db(self.magnitudes)
            self._recalc = False
        return self._magnitudes_db

    def spectral_flatness(self) -> float:
        """Geometric over arithmetic mean of the magnitudes; zero bins add nothing."""
        log_sum = sum(math.log(m) for m in self.magnitudes if m != 0)
        geometric = math.exp(log_sum / self.num_bins)
        arithmetic = sum(self.magnitudes) / self.num_bins
        return geometric / arithmetic if arithmetic != 0 else 0.0

    def spectral_centroid(self) -> float:
        """Magnitude-weighted mean frequency of the last frame, in Hz."""
        weighted = sum(abs(m) * i for i, m in enumerate(self.magnitudes))
        total = sum(abs(m) for m in self.magnitudes)
        if total == 0:
            return 0.0
        return weighted / total * (self.sample_rate / self.fft_size)


class InverseSpectrum:
    """Turns a stream of spectra back into samples by windowed overlap-add."""

    def __init__(self, fft_size: int = 1024, hop_size: int = 512, window_size: int = 0) -> None:
        self._fft = FFT(fft_size)
        self.fft_size = fft_size
        self.window_size = _check_sizes(fft_size, hop_size, window_size)
        self.hop_size = hop_size
        self.num_bins = fft_size // 2
        self._buffer = [0.0] * fft_size
        self._ifft_out = [0.0] * fft_size
        self._pos = 0
        self.window = _padded_window(self.window_size, fft_size)
        self.next_value = 0.0

    def process(self, data1, data2, mode=IFFTMode.SPECTRUM) -> float:
        """Return the next output sample, synthesising a frame at each hop start.

        In SPECTRUM mode data1 and data2 are magnitudes and phases; in COMPLEX
        mode they are real and imaginary parts.
        """
        if self._pos == 0:
            self._ifft_out = [0.0] * self.fft_size
            if mode == IFFTMode.SPECTRUM:
                self._fft.inverse_power_spectrum(self._ifft_out, self.window, data1, data2)
            else:
                self._fft.inverse_fft_complex(self._ifft_out, self.window, data1, data2)
            shifted = self._buffer[self.hop_size:] + [0.0] * self.hop_size
            self._buffer = [b + o for b, o in zip(shifted, self._ifft_out)]
        self.next_value = self._buffer[self._pos]
        self._pos += 1
        if self._pos == self.hop_size:
            self._pos = 0
        return self.next_value


class OctaveAnalyzer:
    """Averages FFT bins into roughly logarithmic bands and tracks their peaks."""

    def __init__(self, sampling_rate, n_bands_in_the_fft, n_averages_per_octave) -> None:
        if n_bands_in_the_fft < 1:
            raise ValueError(f"need at least one spectrum band, got {n_bands_in_the_fft}")
        if sampling_rate <= 0:
            raise ValueError(f"sampling rate must be positive, got {sampling_rate}")
        self.sampling_rate = float(sampling_rate)
        self.n_spectrum = n_bands_in_the_fft
        self.spectrum_frequency_span = (self.sampling_rate / 2.0) / self.n_spectrum
        if n_averages_per_octave == 0:
            n_averages_per_octave = 1
        self.n_averages_per_octave = n_averages_per_octave
        self.average_frequency_increment = 2.0 ** (1.0 / n_averages_per_octave)
        self.first_octave_frequency = FIRST_OCTAVE_FREQUENCY

        self.spe2avg: list[int] = []
        avg_index = 0
        average_freq = self.first_octave_frequency
        spectrum_freq = self.spectrum_frequency_span
        for _ in range(self.n_spectrum):
            while spectrum_freq > average_freq:
                avg_index += 1
                average_freq *= self.average_frequency_increment
            self.spe2avg.append(avg_index)
            spectrum_freq += self.spectrum_frequency_span

        self.n_averages = avg_index
        self.averages = [0.0] * self.n_averages
        self.peaks = [0.0] * self.n_averages
        self.peak_hold_times = [0] * self.n_averages
        self.peak_hold_time = 0
        self.peak_decay_rate = PEAK_DECAY_RATE
        self.linear_eq_intercept = 1.0
        self.linear_eq_slope = 0.0

    def calculate(self, fft_data) -> list[float]:
        """Update the band averages and peaks from one spectrum; return the averages."""
        data = list(fft_data)
        if len(data) < self.n_spectrum:
            raise ValueError(f"need {self.n_spectrum} spectrum values, got {len(data)}")
        last_avg = 0
        total = 0.0
        count = 0
        for index, (value, avg_index) in enumerate(zip(data, self.spe2avg)):
            count += 1
            total += value * (self.linear_eq_intercept + index * self.linear_eq_slope)
            if avg_index != last_avg:
                for j in range(last_avg, avg_index):
                    self.averages[j] = total / count
                count = 0
                total = 0.0
            last_avg = avg_index
        if count > 0 and last_avg < self.n_averages:
            self.averages[last_avg] = total / count

        for i, average in enumerate(self.averages):
            if average >= self.peaks[i]:
                self.peaks[i] = average
                self.peak_hold_times[i] = self.peak_hold_time
            elif self.peak_hold_times[i] > 0:
                self.peak_hold_times[i] -= 1
            else:
                self.peaks[i] *= self.peak_decay_rate
        return self.averages