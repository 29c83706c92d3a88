import struct

import pytest

from melquiades.audio_dsp import (
    AudioDsp,
    BiquadFilter,
    DspConfig,
    FilterType,
    db_to_linear,
)


def pcm(*values):
    return struct.pack(f"<{len(values)}h", *values)


def unpcm(data):
    return struct.unpack(f"<{len(data) // 2}h", data[: len(data) // 2 * 2])


def dc_gain(f):
    return (f.b0 + f.b1 + f.b2) / (1.0 + f.a1 + f.a2)


def test_db_to_linear_reference_points():
    assert db_to_linear(0.0) == pytest.approx(1.0)
    assert db_to_linear(20.0) == pytest.approx(10.0)
    assert db_to_linear(-20.0) == pytest.approx(0.1)


def test_lowpass_passes_dc():
    f = BiquadFilter.design(FilterType.LOWPASS, 250.0, 0.707, 0.0, 44100)
    assert dc_gain(f) == pytest.approx(1.0)


@pytest.mark.parametrize("kind", [FilterType.BANDPASS, FilterType.HIGHPASS])
def test_bandpass_and_highpass_block_dc(kind):
    f = BiquadFilter.design(kind, 1000.0, 1.0, 0.0, 44100)
    assert dc_gain(f) == pytest.approx(0.0, abs=1e-12)


def test_design_accepts_plain_int_type():
    by_int = BiquadFilter.design(2, 4000.0, 0.707, 0.0, 48000)
    by_enum = BiquadFilter.design(FilterType.HIGHPASS, 4000.0, 0.707, 0.0, 48000)
    assert by_int == by_enum


def test_design_rejects_bad_sample_rate():
    with pytest.raises(ValueError):
        BiquadFilter.design(FilterType.LOWPASS, 250.0, 0.707, 0.0, 0)


def test_design_rejects_unknown_type():
    with pytest.raises(ValueError):
        BiquadFilter.design(7, 250.0, 0.707, 0.0, 44100)


def test_filter_history_and_reset():
    f = BiquadFilter.design(FilterType.LOWPASS, 250.0, 0.707, 0.0, 44100)
    first = f.process(0.5)
    f.process(0.25)
    assert f.x1 == 0.25 and f.x2 == 0.5
    f.reset()
    assert (f.x1, f.x2, f.y1, f.y2) == (0.0, 0.0, 0.0, 0.0)
    assert f.process(0.5) == pytest.approx(first)


def test_silence_stays_silent():
    dsp = AudioDsp(44100)
    out = dsp.process(bytes(64), DspConfig(gain_db=12.0))
    assert out == bytes(64)


def test_length_and_trailing_byte_preserved():
    dsp = AudioDsp()
    data = pcm(1000, -1000, 500) + b"\x7f"
    out = dsp.process(data, DspConfig())
    assert len(out) == len(data)
    assert out[-1:] == b"\x7f"


def test_output_is_clipped_to_int16_range():
    dsp = AudioDsp()
    data = pcm(*([32767, -32768] * 200))
    out = unpcm(dsp.process(data, DspConfig(gain_db=20.0, bass_gain_db=20.0)))
    assert max(out) <= 32767
    assert min(out) >= -32767
    assert 32767 in out


def test_gains_are_clamped():
    data = pcm(*([3000, -2000] * 50))
    over = AudioDsp().process(data, DspConfig(gain_db=100.0))
    at_limit = AudioDsp().process(data, DspConfig(gain_db=20.0))
    assert over == at_limit


def test_dc_passes_through_after_settling():
    dsp = AudioDsp()
    value = 8000
    out = unpcm(dsp.process(pcm(*([value, value] * 4000)), DspConfig()))
    assert abs(out[-2] - value) <= 2
    assert abs(out[-1] - value) <= 2


def test_channels_are_independent():
    dsp = AudioDsp()
    out = unpcm(dsp.process(pcm(*([5000, 0] * 100)), DspConfig()))
    assert all(v == 0 for v in out[1::2])
    assert any(v != 0 for v in out[0::2])


def test_separate_channel_gain_attenuates_one_side():
    dsp = AudioDsp()
    config = DspConfig(separate_channels=True, left_gain_db=-20.0, right_gain_db=0.0)
    out = unpcm(dsp.process(pcm(*([8000, 8000] * 2000)), config))
    assert abs(out[-2]) < abs(out[-1])


def test_channel_gains_ignored_unless_separate():
    data = pcm(*([4000, -4000] * 100))
    plain = AudioDsp().process(data, DspConfig())
    ignored = AudioDsp().process(data, DspConfig(left_gain_db=-20.0, right_gain_db=10.0))
    assert plain == ignored


def test_state_carries_across_blocks():
    samples = [((i * 37) % 2000) - 1000 for i in range(400)]
    whole = AudioDsp().process(pcm(*samples), DspConfig(bass_gain_db=6.0))
    dsp = AudioDsp()
    split = (dsp.process(pcm(*samples[:150]), DspConfig(bass_gain_db=6.0))
             + dsp.process(pcm(*samples[150:]), DspConfig(bass_gain_db=6.0)))
    assert whole == split


def test_configure_resets_history():
    samples = pcm(*([6000, -6000] * 50))
    dsp = AudioDsp(48000)
    first = dsp.process(samples, DspConfig())
    dsp.configure(48000)
    assert dsp.sample_rate == 48000
    assert dsp.process(samples, DspConfig()) == first


def test_missing_config_raises():
    with pytest.raises(TypeError):
        AudioDsp().process(pcm(1, 2), None)