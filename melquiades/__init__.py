"""Audio deck core: equaliser DSP, audio output, test tones and A2DP sink handling."""

__version__ = "0.1.0"