# fmtoolkit

Pure-Python building blocks for a six-operator FM synthesizer and for
basic spectral analysis. No third-party libraries are needed.

## Modules

- `fmtoolkit.envelope` — `DAHDSR`, a delay/attack/hold/decay/sustain/release
  envelope whose segments change by a constant factor per sample, and
  `EnvelopePhase`. Stage times are set in milliseconds with `set_params`;
  `trigger_on`, `trigger_off` and `process` drive it one sample at a time.
- `fmtoolkit.envelope_graph` — `trace_points` gives the outline of an
  envelope (x in milliseconds, y growing downwards), `scale_to_fit` stretches
  points onto a rectangle, `envelope_trace` does both with a 5-unit top
  margin, and `exp_curve` maps a 0..20000 control value onto an exponential
  curve.
- `fmtoolkit.operator` — `Operator`, a sine oscillator with its own `DAHDSR`,
  level, pan, frequency ratio and modulation index; `modulate_ratio` moves
  the ratio up, down or both ways (`RatioModMode`); `lerp`.
- `fmtoolkit.voice` — `FmVoice` holds the operators, a routing matrix
  (`set_routing`, where `routing[s][d]` means operator `s` modulates `d`), the
  set of audible operators (`set_audible`) and a bank of four `LfoSource`
  objects. `render(n)` returns `n` left and right samples. `mtof` converts a
  MIDI note number to Hz. An `LfoSource` is configured through its `rate`,
  `level`, `wave`, `target` and `ratio_mod_type` attributes.
- `fmtoolkit.algorithm` — `AlgorithmGraph` lays a routing matrix out as rows
  of operators, from unmodulated sources at the top to audible or terminal
  operators at the bottom. `layout(height)` returns `(column, row, index)`
  boxes and fills `paths` with line segments between cell centres (a closed
  loop for self-modulation). A cycle that never reaches an output raises
  `ValueError`. `OpInfo` and `add_if_unique` are helpers.
- `fmtoolkit.fft` — radix-2 `complex_fft`, `real_fft` and `power_spectrum`;
  `gen_window` and `window_func` for Bartlett, Hamming and Hanning windows
  (`WindowType`); bit helpers; and the `FFT` class with fixed-size buffers for
  analysis (`calc_fft`, `power_spectrum`, `cart_to_pol`, `conv_to_db`) and
  resynthesis (`pol_to_cart`, `calc_ifft`, `inverse_power_spectrum`,
  `inverse_fft_complex`).
- `fmtoolkit.spectrum` — `SpectrumAnalyzer` takes samples one at a time and
  transforms a Hann-windowed frame every hop, exposing `magnitudes`,
  `phases`, `magnitudes_db()`, `spectral_flatness()` and
  `spectral_centroid()`. `InverseSpectrum` turns spectra back into samples by
  overlap-add. `OctaveAnalyzer` averages spectrum bins into roughly
  logarithmic bands and tracks their peaks.
- `fmtoolkit.mfcc` — `MFCCAnalyser` applies a triangular mel filter bank, a
  log and a DCT to a power spectrum; `hz_to_mel` and `mel_to_hz`.

## Installing

```
pip install .
```

## Examples

```python
from fmtoolkit.voice import FmVoice

voice = FmVoice()
voice.set_audible([True, False, False, False, False, False])
voice.start_note(69, 1.0)
left, right = voice.render(512)
voice.stop_note(0.5, True)
```

```python
from fmtoolkit.envelope import DAHDSR

env = DAHDSR()
env.set_params(delay=0.0, attack=10.0, hold=0.0, decay=50.0, sustain=0.5, release=30.0)
env.trigger_on()
levels = [env.process(1.0) for _ in range(1000)]
```

```python
from fmtoolkit.algorithm import AlgorithmGraph

routing = [[False] * 6 for _ in range(6)]
routing[1][0] = True          # operator 2 modulates operator 1
audible = [True, False, False, False, False, False]
graph = AlgorithmGraph(routing, audible)
boxes = graph.layout(300.0)   # [(column, row, operator index), ...]
```

## What it does not do

The package computes samples, shapes and spectra as Python lists. It does
not play audio, read MIDI input, draw anything on screen, store or load
presets, or manage several voices at once; those are left to the program
that uses it. Everything runs in pure Python, so it is far slower than
real-time for anything but short buffers.

## Running the tests

```
pip install .[test]
pytest
```