[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "fmtoolkit"
version = "0.1.0"
description = "FM synthesis building blocks: envelopes, operators, voices, algorithm layout, FFT and MFCC analysis"
requires-python = ">=3.10"
dependencies = []
keywords = ["fm", "synthesis", "audio", "envelope", "lfo", "fft", "mfcc", "dsp"]
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
    "Topic :: Multimedia :: Sound/Audio :: Sound Synthesis",
    "Topic :: Multimedia :: Sound/Audio :: Analysis",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["fmtoolkit"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
