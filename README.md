# melquiades

The audio core of a small Bluetooth audio deck, written as a plain Python
package with no third-party dependencies.

It provides:

- `melquiades.audio_dsp`: a three-band equaliser built from biquad filters
  (low-pass at 250 Hz, band-pass around 1 kHz, high-pass at 4 kHz), plus an
  overall gain and an optional gain for each channel. It works on interleaved
  16-bit little-endian stereo PCM, and every gain is clamped to ±20 dB.
  `db_to_linear` converts decibels to a linear factor.
- `melquiades.audio_output`: `AudioOutput` runs PCM through the DSP (unless
  the DSP is disabled) and writes it to a binary sink you supply. It can be
  used as a context manager. `volume_to_db` maps a 0–100 % volume onto
  decibels: 0 % is -40 dB, 50 % is 0 dB and 100 % is +20 dB. Values above
  100 are treated as 100.
- `melquiades.sine_wave`: `SineWaveGenerator`, a continuous-phase stereo sine
  generator; `square_wave`, a full-scale square wave; and `play_test_tone`,
  which writes blocks to an output, switching between the two waveforms.
- `melquiades.a2dp_sink`: equaliser presets (`EqPreset`), a `DspController`
  that holds the volume, balance, preset and on/off state and applies them to
  an output, `sample_rate_from_sbc`, and an `A2dpSink` that reacts to
  connection, audio-state, codec-configuration and audio-data events.
- `melquiades.state`: `DeckState`, the sensor-streaming flags and background
  task handles that the deck shares between its parts.

## Installing

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Processing audio

```python
from melquiades.audio_dsp import AudioDsp, DspConfig

dsp = AudioDsp(44100)
config = DspConfig(gain_db=6.0, bass_gain_db=10.0, treble_gain_db=-2.0)
processed = dsp.process(pcm_bytes, config)
```

The filters keep their history between calls, so consecutive blocks of one
stream are filtered continuously. Calling `configure` with a new sample rate
redesigns the filters and clears their history.

## Driving an output

```python
import io
from melquiades.audio_output import AudioOutput
from melquiades.a2dp_sink import A2dpSink, EqPreset

with AudioOutput(io.BytesIO()) as output:
    sink = A2dpSink(output)
    sink.dsp.set_eq_preset(EqPreset.BASS_BOOST)
    sink.dsp.set_volume(60)
    sink.dsp.set_balance(-0.2)
    sink.on_audio_config(0x20)      # 44.1 kHz
    sink.on_audio_data(pcm_bytes)
```

`A2dpSink` starts with the DSP enabled, the flat preset, 75 % volume and the
balance centred.

## What this package does not do

It has no command shell and no command-line program: settings are changed
by calling `DspController` from Python. It does not talk to a Bluetooth
stack, an audio device, LEDs or sensors; events and audio are passed in by
the caller, and audio goes to whatever binary sink is supplied.