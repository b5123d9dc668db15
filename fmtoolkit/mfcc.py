"""Mel-frequency cepstral coefficients from a power spectrum."""

from __future__ import annotations

import math

MEL_FLOOR = 0.000001


def hz_to_mel(hz) -> float:
    """Mel value of a frequency: 2595 * log10(hz / 700 + 1)."""
    return 2595.0 * math.log10(hz / 700.0 + 1.0)


def mel_to_hz(mel) -> float:
    """Frequency of a mel value: 700 * (10 ** (mel / 2595) - 1)."""
    return 700.0 * (10.0 ** (mel / 2595.0) - 1.0)


class MFCCAnalyser:
    """Triangular mel filter bank followed by a log and a DCT.

    The bank has ``num_filters`` filters over ``num_bins`` spectrum bins; the
    first filter is left empty. ``max_freq`` is clipped to the Nyquist
    frequency.
    """

    def __init__(
        self,
        num_bins: int,
        num_filters: int,
        num_coeffs: int,
        min_freq: float,
        max_freq: float,
        sample_rate: int = 44100,
    ) -> None:
        if num_bins < 1:
            raise ValueError(f"need at least one spectrum bin, got {num_bins}")
        if num_filters < 1:
            raise ValueError(f"need at least one mel filter, got {num_filters}")
        if num_coeffs < 1:
            raise ValueError(f"need at least one coefficient, got {num_coeffs}")
        if sample_rate <= 0:
            raise ValueError(f"sample rate must be positive, got {sample_rate}")
        self.num_bins = num_bins
        self.num_filters = num_filters
        self.num_coeffs = num_coeffs
        self.min_freq = float(min_freq)
        self.max_freq = float(max_freq)
        self.sample_rate = int(sample_rate)
        self.mel_bands = [0.0] * num_filters
        self.coeffs = [0.0] * num_coeffs
        self.mel_filters = self._mel_filter_bank()
        self.dct_matrix = self._dct_coeffs()

    def _mel_filter_bank(self) -> list[list[float]]:
        nyquist = self.sample_rate / 2
        if self.max_freq > nyquist:
            self.max_freq = nyquist
        max_mel = hz_to_mel(self.max_freq)
        min_mel = hz_to_mel(self.min_freq)
        d_mel = (max_mel - min_mel) / (self.num_filters + 2 - 1)
        positions = [mel_to_hz(min_mel + i * d_mel) for i in range(self.num_filters + 2)]

        filters = [[0.0] * self.num_bins for _ in range(self.num_filters)]
        bin_width = self.sample_rate / self.num_bins
        for f in range(1, self.num_filters):
            prev_f, this_f, next_f = positions[f - 1], positions[f], positions[f + 1]
            height = 2.0 / (next_f - prev_f)
            row = filters[f]
            for b in range(self.num_bins):
                freq = bin_width * b
                if freq > next_f or freq < prev_f:
                    continue
                if freq < this_f:
                    row[b] = (freq - prev_f) * (height / (this_f - prev_f))
                else:
                    row[b] = height + (freq - this_f) * (-height / (next_f - this_f))
        return filters

    def _dct_coeffs(self) -> list[list[float]]:
        k = math.pi / self.num_filters
        w1 = 1.0 / math.sqrt(self.num_filters)
        w2 = math.sqrt(2.0 / self.num_filters)
        return [
            [
                (w1 if i == 0 else w2) * math.cos(k * (i + 1) * (j + 0.5))
                for j in range(self.num_filters)
            ]
            for i in range(self.num_coeffs)
        ]

    def _mel_filter_and_log_square(self, spectrum: list[float]) -> None:
        bands = []
        for row in self.mel_filters:
            energy = sum(w * p for w, p in zip(row, spectrum))
            bands.append(math.log(energy * energy) if energy > MEL_FLOOR else 0.0)
        self.mel_bands = bands

    def _dct(self) -> list[float]:
        return [
            sum(c * m for c, m in zip(row, self.mel_bands)) / self.num_coeffs
            for row in self.dct_matrix
        ]

    def mfcc(self, power_spectrum) -> list[float]:
        """Return the cepstral coefficients of a power spectrum of num_bins values."""
        spectrum = [float(v) for v in power_spectrum]
        if len(spectrum) < self.num_bins:
            raise ValueError(f"need {self.num_bins} spectrum values, got {len(spectrum)}")
        self._mel_filter_and_log_square(spectrum[:self.num_bins])
        self.coeffs = self._dct()
        return self.coeffs