[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "flightx"
version = "0.1.0"
description = "RGBE (.hdr) image I/O, cross cube-map extraction, FFT ocean wave synthesis and a shader/volume resource cache"
requires-python = ">=3.10"
keywords = ["rgbe", "hdr", "radiance", "cubemap", "ocean", "tessendorf", "fft", "ex5"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Multimedia :: Graphics :: 3D Rendering",
]
dependencies = [
    "numpy",
]

[project.optional-dependencies]
test = [
    "pytest",
    "numpy",
]

[tool.hatch.build.targets.wheel]
packages = ["flightx"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
