import pytest

from fmtoolkit.operator import Operator, RatioModMode
from fmtoolkit.voice import FmVoice, LfoSource, mtof


def _audible_voice(audible_index=0):
    voice = FmVoice()
    flags = [False] * voice.operator_count
    flags[audible_index] = True
    voice.set_audible(flags)
    return voice


def test_mtof_a4():
    assert mtof(69) == pytest.approx(440.0)


def test_mtof_octave_doubles():
    assert mtof(81) == pytest.approx(2 * mtof(69))
    assert mtof(57) == pytest.approx(mtof(69) / 2)


def test_silent_before_note():
    voice = _audible_voice()
    left, right = voice.render(64)
    assert len(left) == 64 and len(right) == 64
    assert all(v == 0.0 for v in left + right)


def test_note_produces_sound():
    voice = _audible_voice()
    voice.start_note(69, 1.0)
    assert voice.current_note == 69
    assert voice.fundamental == pytest.approx(mtof(69))
    left, right = voice.render(2000)
    assert max(abs(v) for v in left) > 0.01
    assert left == pytest.approx(right)


def test_inaudible_operator_is_silent():
    voice = FmVoice()
    voice.start_note(60, 1.0)
    left, right = voice.render(500)
    assert all(v == 0.0 for v in left + right)


def test_hard_left_pan():
    voice = _audible_voice()
    voice.operators[0].set_params(-1.0, 1.0, 1.0, 0.0)
    voice.start_note(60, 1.0)
    left, right = voice.render(1000)
    assert all(v == 0.0 for v in right)
    assert max(abs(v) for v in left) > 0.01


def test_routing_shape_checked():
    voice = FmVoice(num_operators=3)
    with pytest.raises(ValueError):
        voice.set_routing([[0, 1], [0, 0]])
    with pytest.raises(ValueError):
        voice.set_audible([True])


def test_zero_operators_rejected():
    with pytest.raises(ValueError):
        FmVoice(num_operators=0)


def test_mod_offset_is_clamped():
    voice = FmVoice(num_operators=2)
    voice.set_routing([[0, 1], [0, 0]])
    voice.set_audible([False, True])
    voice.operators[0].set_params(0.0, 1000.0, 1.0, 1.0)
    voice.start_note(69, 1.0)
    peak = 0.0
    for _ in range(3000):
        voice.render(1)
        peak = max(peak, abs(voice.operators[1].mod_offset))
    assert peak == 500.0


def test_stop_note_with_zero_velocity_clears():
    voice = _audible_voice()
    voice.start_note(60, 1.0)
    voice.render(10)
    voice.stop_note(0, True)
    assert voice.current_note is None


def test_release_runs_out():
    voice = _audible_voice()
    voice.start_note(60, 1.0)
    voice.render(100)
    voice.stop_note(1.0, True)
    assert voice.current_note == 60
    assert voice.is_active()
    voice.render(4000)
    assert not voice.is_active()
    assert voice.current_note is None


def test_lfo_odd_target_sets_amplitude_mod():
    voice = FmVoice()
    lfo = voice.lfo_bank[0]
    lfo.target = 3
    lfo.level = 0.0
    voice.apply_lfo(0)
    assert voice.operators[1].amplitude_mod == pytest.approx(0.5)


def test_lfo_even_target_modulates_ratio():
    voice = FmVoice()
    voice.operators[1].set_params(0.0, 1.0, 2.0, 0.0)
    lfo = voice.lfo_bank[0]
    lfo.target = 4
    lfo.level = 1.0
    lfo.rate = 5.0
    lfo.ratio_mod_type = RatioModMode.UP
    voice.apply_lfo(0)
    reference = Operator()
    reference.set_params(0.0, 1.0, 2.0, 0.0)
    reference.modulate_ratio(voice.lfo_value, RatioModMode.UP)
    assert voice.operators[1].working_ratio == pytest.approx(reference.working_ratio)


def test_lfo_no_target_leaves_operators():
    voice = FmVoice()
    voice.lfo_bank[0].level = 1.0
    voice.apply_lfo(0)
    assert all(op.amplitude_mod == 0.0 for op in voice.operators)
    assert all(op.working_ratio == op.base_ratio for op in voice.operators)


@pytest.mark.parametrize("wave", [0, 1, 2, 3, 4])
def test_lfo_values_in_range(wave):
    lfo = LfoSource(seed=1)
    lfo.wave = wave
    lfo.rate = 7.0
    lfo.level = 0.8
    values = [lfo.get_sample_value() for _ in range(20000)]
    assert min(values) >= 0.0
    assert max(values) <= 0.8 + 1e-9


def test_lfo_zero_level_is_silent():
    lfo = LfoSource()
    lfo.rate = 3.0
    assert all(lfo.get_sample_value() == 0.0 for _ in range(100))


def test_square_lfo_has_two_values():
    lfo = LfoSource()
    lfo.wave = LfoSource.SQUARE
    lfo.rate = 10.0
    lfo.level = 1.0
    values = {lfo.get_sample_value() for _ in range(10000)}
    assert values == {0.0, 1.0}


def test_random_lfo_holds_within_cycle():
    lfo = LfoSource(seed=3)
    lfo.wave = LfoSource.RANDOM
    lfo.rate = 10.0
    lfo.level = 1.0
    values = [lfo.get_sample_value() for _ in range(100)]
    assert len(set(values)) == 1