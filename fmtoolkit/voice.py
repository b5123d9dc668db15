"""A polyphony-free FM voice: operators, routing matrix and LFO bank."""

from __future__ import annotations

import math
import random

from .operator import Operator

TOTAL_LFOS = 4
MOD_OFFSET_LIMIT = 500.0
JUMP_THRESHOLD = 0.2


def mtof(note) -> float:
    """Frequency in Hz of a MIDI note number (A4 = 69 = 440 Hz)."""
    return 440.0 * 2.0 ** ((note - 69) / 12.0)


class LfoSource:
    """Low-frequency oscillator producing values in 0..level.

    Wave shapes: 0 sine, 1 triangle, 2 square, 3 saw, 4 random sample-and-hold.
    Targets: odd values modulate the amplitude of operator ``target // 2``;
    even values above zero modulate the ratio of operator ``target // 2 - 1``.
    """

    SINE = 0
    TRIANGLE = 1
    SQUARE = 2
    SAW = 3
    RANDOM = 4

    def __init__(self, index: int = 0, sample_rate: float = 44100.0, seed=None) -> None:
        self.index = index
        self.sample_rate = float(sample_rate)
        self.rate = 0.0
        self.level = 0.0
        self.target = 0
        self.wave = self.SINE
        self.ratio_mod_type = 0
        self.last_value = 0.0
        self._phase = 0.0
        self._rng = random.Random(seed)
        self._held = 0.0
        self._held_left = 0

    def _advance(self) -> float:
        phase = self._phase
        self._phase = (phase + self.rate / self.sample_rate) % 1.0
        return phase

    def _random_sample(self, ms_cycle: int) -> float:
        if self._held_left <= 0:
            self._held = self._rng.random()
            self._held_left = max(1, int(ms_cycle * self.sample_rate / 1000))
        self._held_left -= 1
        return self._held

    def get_sample_value(self) -> float:
        """Advance one sample and return the scaled LFO value."""
        wave = self.wave
        if wave == self.SINE:
            self.last_value = math.sin(2.0 * math.pi * self._advance()) * 0.5 + 0.5
        elif wave == self.TRIANGLE:
            phase = self._advance()
            self.last_value = (1.0 - 4.0 * abs(phase - 0.5)) * 0.5 + 0.5
        elif wave == self.SQUARE:
            phase = self._advance()
            self.last_value = (-1.0 if phase < 0.5 else 1.0) * 0.5 + 0.5
        elif wave == self.SAW:
            phase = self._advance()
            self.last_value = (2.0 * phase - 1.0) / 2.0 + 0.5
        elif wave == self.RANDOM:
            ms_cycle = math.floor(1000 / (self.rate + 0.0001))
            self.last_value = self._random_sample(ms_cycle)
        return self.last_value * self.level


class FmVoice:
    """One note's worth of FM operators routed through a modulation matrix."""

    def __init__(
        self,
        num_operators: int = 6,
        index: int = 0,
        sample_rate: float = 44100.0,
        num_lfos: int = TOTAL_LFOS,
    ) -> None:
        if num_operators < 1:
            raise ValueError(f"a voice needs at least one operator, got {num_operators}")
        self.voice_index = index
        self.operators = [Operator(o, index, sample_rate) for o in range(num_operators)]
        self.lfo_bank = [LfoSource(n, sample_rate) for n in range(num_lfos)]
        self.routing = [[False] * num_operators for _ in range(num_operators)]
        self.audible = [False] * num_operators
        self.fundamental = 1.0
        self.current_note = None
        self.num_jumps = 0
        self.last_op_sample = 0.0
        self.lfo_value = 0.0

    @property
    def operator_count(self) -> int:
        return len(self.operators)

    def set_routing(self, routing) -> None:
        """Set the square matrix where routing[s][d] means s modulates d."""
        rows = [[bool(x) for x in row] for row in routing]
        n = self.operator_count
        if len(rows) != n or any(len(row) != n for row in rows):
            raise ValueError(f"routing must be a {n}x{n} matrix")
        self.routing = rows

    def set_audible(self, audible) -> None:
        """Set which operators are heard in the output."""
        flags = [bool(x) for x in audible]
        if len(flags) != self.operator_count:
            raise ValueError(f"audible must hold {self.operator_count} flags")
        self.audible = flags

    def set_sample_rate(self, rate) -> None:
        for op in self.operators:
            op.update_sample_rate(rate)
        for lfo in self.lfo_bank:
            lfo.sample_rate = float(rate)

    def clear_current_note(self) -> None:
        self.current_note = None

    def start_note(self, midi_note, velocity) -> None:
        self.current_note = midi_note
        self.fundamental = mtof(midi_note)
        for op in self.operators:
            op.envelope.trigger_on()

    def stop_note(self, velocity, allow_tail_off) -> None:
        for op in self.operators:
            op.envelope.trigger_off()
        if velocity == 0 or not self.is_active():
            self.clear_current_note()

    def apply_lfo(self, index) -> None:
        """Read LFO ``index`` and apply it to its target operator."""
        lfo = self.lfo_bank[index]
        self.lfo_value = lfo.get_sample_value()
        if lfo.target > 0:
            if lfo.target % 2 != 0:
                self.operators[lfo.target // 2].set_am((1.0 + self.lfo_value) / 2.0)
            else:
                self.operators[lfo.target // 2 - 1].modulate_ratio(
                    self.lfo_value, lfo.ratio_mod_type
                )

    def is_active(self) -> bool:
        return any(op.envelope.is_active() for op in self.operators)

    def render(self, num_samples) -> tuple[list[float], list[float]]:
        """Render samples and return the (left, right) channels."""
        left: list[float] = []
        right: list[float] = []
        for _ in range(num_samples):
            op_sum = 0.0
            sum_l = 0.0
            sum_r = 0.0
            for op in self.operators:
                op.clean_freq_offset()
            for lfo_index in range(len(self.lfo_bank)):
                self.apply_lfo(lfo_index)
            for source, (src_op, targets) in enumerate(zip(self.operators, self.routing)):
                for dest_op, routed in zip(self.operators, targets):
                    if routed:
                        dest_op.mod_offset += src_op.last_output_sample
                        if abs(dest_op.mod_offset) > MOD_OFFSET_LIMIT:
                            dest_op.mod_offset = MOD_OFFSET_LIMIT
                op_sample = src_op.sample(self.fundamental)
                if self.audible[source]:
                    op_sum += op_sample
                    sum_l += src_op.last_output_l
                    sum_r += src_op.last_output_r
            left.append(sum_l)
            right.append(sum_r)
            if abs(op_sum - self.last_op_sample) > JUMP_THRESHOLD:
                self.num_jumps += 1
            self.last_op_sample = op_sum
            if not self.is_active():
                self.clear_current_note()
        return left, right