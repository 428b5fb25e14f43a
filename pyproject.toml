[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "focdrive"
version = "0.1.0"
description = "Field oriented control for BLDC motors: modulation, PID and low-pass filters, sensor and current sense bases, and a text command protocol"
requires-python = ">=3.10"
dependencies = []
keywords = ["foc", "bldc", "motor-control", "pid", "svpwm", "field-oriented-control"]
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
    "Topic :: Software Development :: Embedded Systems",
    "Topic :: Scientific/Engineering",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["focdrive"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
