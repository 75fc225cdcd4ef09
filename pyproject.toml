[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "airconvolver"
version = "0.1.0"
description = "5.1 surround convolution reverb driven by first-order B-format impulse responses"
requires-python = ">=3.10"
dependencies = [
    "numpy",
]
keywords = [
    "audio",
    "convolution",
    "reverb",
    "impulse response",
    "ambisonics",
    "b-format",
    "surround",
    "5.1",
    "wav",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: End Users/Desktop",
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
test = [
    "pytest",
]

[project.scripts]
airconvolver = "airconvolver.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["airconvolver"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]
