"""A single FM operator: sine oscillator, envelope, level, ratio and pan."""

from __future__ import annotations

import math
from enum import IntEnum

from .envelope import DAHDSR, EnvelopePhase


class RatioModMode(IntEnum):
    """Direction in which an LFO moves an operator's frequency ratio."""

    UP = 0
    BOTH = 1
    DOWN = 2


def lerp(low, high, value) -> float:
    return low + (high - low) * value


class _SineOscillator:
    """Phase-accumulating sine source."""

    def __init__(self, sample_rate: float = 44100.0) -> None:
        self.sample_rate = float(sample_rate)
        self.phase = 0.0

    def get_sample(self, frequency: float) -> float:
        out = math.sin(2.0 * math.pi * self.phase)
        self.phase = (self.phase + frequency / self.sample_rate) % 1.0
        return out


class Operator:
    """Generates one enveloped, panned sine voice component."""

    def __init__(self, index: int = 0, voice: int = 0, sample_rate: float = 44100.0) -> None:
        self.index = index
        self.voice = voice
        self.envelope = DAHDSR(index, sample_rate)
        self._osc = _SineOscillator(sample_rate)
        self.last_output_sample = 0.0
        self.last_output_l = 0.0
        self.last_output_r = 0.0
        self.gain_l = 0.5
        self.gain_r = 0.5
        self.pan_value = 0.5
        self.raw_sample = 0.0
        self.mod_offset = 0.0
        self.pan = 0.0
        self.level = 1.0
        self.base_ratio = 1.0
        self.working_ratio = 1.0
        self.max_ratio_offset = 0.0
        self.mod_index = 0.0
        self.amplitude_mod = 0.0
        self.fundamental = 0.0
        self.is_audible = False

    def set_params(self, pan, level, ratio, mod_index) -> None:
        """Set pan (-1..1), output level, frequency ratio and modulation index."""
        self.pan = float(pan)
        self.level = float(level)
        self.base_ratio = float(ratio)
        self.working_ratio = self.base_ratio
        self.mod_index = float(mod_index)

    def clean_freq_offset(self) -> None:
        self.mod_offset = 0.0

    def modulate_ratio(self, value, mode) -> None:
        """Shift the working ratio by an LFO value in 0..1; unknown modes do nothing."""
        base = self.base_ratio
        if mode == RatioModMode.UP:
            self.max_ratio_offset = base
            self.working_ratio = base + self.max_ratio_offset * value
        elif mode == RatioModMode.BOTH:
            if value > 0.5:
                value = (value - 0.5) * 2.0
                self.max_ratio_offset = base
                self.working_ratio = base + self.max_ratio_offset * value
            if value < 0.5:
                value *= 2.0
                self.max_ratio_offset = base / 2.0
                self.working_ratio = base - self.max_ratio_offset * (1.0 - value)
        elif mode == RatioModMode.DOWN:
            self.max_ratio_offset = base / 2.0
            self.working_ratio = base - self.max_ratio_offset * (1.0 - value)

    def is_active(self) -> bool:
        return self.envelope.phase is not EnvelopePhase.NOTE_OFF

    def update_sample_rate(self, rate) -> None:
        self.envelope.set_sample_rate(rate)
        self._osc.sample_rate = float(rate)

    def update_pan(self) -> None:
        self.pan_value = (self.pan + 1.0) / 2.0
        self.gain_r = self.pan_value
        self.gain_l = 1.0 - self.pan_value
        self.last_output_l = self.last_output_sample * self.gain_l
        self.last_output_r = self.last_output_sample * self.gain_r

    def set_am(self, value) -> None:
        self.amplitude_mod = float(value)

    def sample(self, fundamental) -> float:
        """Produce the next output sample for a note at the given fundamental."""
        self.fundamental = fundamental
        frequency = fundamental * self.working_ratio + self.mod_offset * self.mod_index
        self.raw_sample = self._osc.get_sample(frequency) * self.level
        self.last_output_sample = self.envelope.process(self.raw_sample) * (1.0 - self.amplitude_mod)
        self.update_pan()
        return self.last_output_sample