"""Delay/attack/hold/decay/sustain/release envelope with exponential segments."""

from __future__ import annotations

import math
from enum import IntEnum

MIN_LEVEL = 0.00001
SUSTAIN_SAMPLES = 1_000_000
NOTE_OFF_SAMPLES = 100_000_000


class EnvelopePhase(IntEnum):
    """Stages of a DAHDSR envelope, in the order they are passed through."""

    DELAY = 0
    ATTACK = 1
    HOLD = 2
    DECAY = 3
    SUSTAIN = 4
    RELEASE = 5
    NOTE_OFF = 6

    def next(self) -> "EnvelopePhase":
        """Return the phase that follows this one; NOTE_OFF is terminal."""
        if self is EnvelopePhase.NOTE_OFF:
            return EnvelopePhase.NOTE_OFF
        return EnvelopePhase(self.value + 1)


class DAHDSR:
    """A six-stage envelope whose segments move by a constant factor per sample."""

    def __init__(self, index: int = 0, sample_rate: float = 44100.0) -> None:
        self.index = index
        self.sample_rate = float(sample_rate)
        self.min_level = MIN_LEVEL
        self.output = 0.0
        self.trigger = False
        self.factor = 1.0
        self.start_level = 0.0
        self.end_level = 0.0
        self.samples_into_phase = 0
        self.samples_in_phase = 0
        self._phase = EnvelopePhase.NOTE_OFF
        self.delay_time = 0.0
        self.attack_time = 20.0
        self.hold_time = 0.0
        self.decay_time = 100.0
        self.sustain_level = 0.6
        self.release_time = 40.0

    @property
    def phase(self) -> EnvelopePhase:
        return self._phase

    def set_params(self, delay, attack, hold, decay, sustain, release) -> None:
        """Set the stage times in milliseconds and the sustain level."""
        self.delay_time = float(delay)
        self.attack_time = float(attack)
        self.hold_time = float(hold)
        self.decay_time = float(decay)
        self.sustain_level = float(sustain)
        self.release_time = float(release)

    def set_sample_rate(self, value) -> None:
        self.sample_rate = float(value)

    def trigger_on(self) -> None:
        self.trigger = True
        self.enter_phase(EnvelopePhase.DELAY)

    def trigger_off(self) -> None:
        self.trigger = False
        self.enter_phase(EnvelopePhase.RELEASE)

    def update_phase(self) -> None:
        """Move on to the next phase once the current one has run its length."""
        if self.samples_into_phase > self.samples_in_phase or self.samples_in_phase < 1:
            self.enter_phase(self._phase.next())

    def _samples_for(self, length_ms: float) -> int:
        return int(length_ms * (self.sample_rate / 1000))

    def factor_for(self, start_level, end_level, length_ms) -> float:
        """Per-sample multiplier that moves start_level to end_level in length_ms."""
        if length_ms < 0:
            raise ValueError(f"phase length must not be negative: {length_ms}")
        if start_level == 0.0:
            start_level = self.min_level
        if end_level == 0.0:
            end_level = self.min_level
        phase_samples = self._samples_for(length_ms)
        if phase_samples == 0:
            return end_level / start_level
        return math.exp((math.log(end_level) - math.log(start_level)) / phase_samples)

    def enter_phase(self, phase) -> None:
        phase = EnvelopePhase(phase)
        self._phase = phase
        self.samples_into_phase = 0
        if phase is EnvelopePhase.DELAY:
            self.start_level = self.min_level
            self.end_level = self.min_level
            self.samples_in_phase = self._samples_for(self.delay_time)
            self.factor = self.factor_for(self.start_level, self.end_level, self.delay_time)
        elif phase is EnvelopePhase.ATTACK:
            self.start_level = self.min_level
            self.end_level = 1.0
            self.samples_in_phase = self._samples_for(self.attack_time)
            self.factor = self.factor_for(self.start_level, self.end_level, self.attack_time)
        elif phase is EnvelopePhase.HOLD:
            self.start_level = 1.0
            self.end_level = 1.0
            self.samples_in_phase = self._samples_for(self.hold_time)
            self.factor = self.factor_for(self.start_level, self.end_level, self.hold_time)
        elif phase is EnvelopePhase.DECAY:
            self.start_level = 1.0
            self.end_level = self.sustain_level
            self.samples_in_phase = int(self.decay_time * self.sample_rate / 1000)
            self.factor = self.factor_for(self.start_level, self.end_level, self.decay_time)
        elif phase is EnvelopePhase.SUSTAIN:
            self.start_level = self.sustain_level
            self.end_level = self.sustain_level
            self.samples_in_phase = SUSTAIN_SAMPLES
            self.factor = 1.0
        elif phase is EnvelopePhase.RELEASE:
            self.start_level = self.sustain_level
            self.end_level = self.min_level
            self.samples_in_phase = int(self.release_time * self.sample_rate / 1000)
            self.factor = self.factor_for(self.start_level, self.end_level, self.release_time)
        else:
            self.start_level = self.min_level
            self.end_level = self.min_level
            self.samples_in_phase = NOTE_OFF_SAMPLES
            self.factor = 0.0
        self.output = self.start_level
        self.update_phase()

    def process(self, value) -> float:
        """Advance one sample and return value scaled by the envelope level."""
        self.update_phase()
        self.samples_into_phase += 1
        self.output *= self.factor
        return value * self.output

    def is_active(self) -> bool:
        return self._phase is not EnvelopePhase.NOTE_OFF