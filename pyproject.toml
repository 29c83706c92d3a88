[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "melquiades"
version = "0.1.0"
description = "Audio deck core: three-band equaliser DSP, volume and balance control, test tones and A2DP sink event handling."
requires-python = ">=3.10"
dependencies = []
keywords = ["audio", "dsp", "equalizer", "biquad", "a2dp", "pcm"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Sound/Audio",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["melquiades"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
