[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "vbcounter"
version = "0.1.0"
description = "Cycle model of an 8-bit counter with BCD decoder, VCD tracing and a Vbuddy serial testbench"
requires-python = ">=3.10"
keywords = ["simulation", "vcd", "bcd", "double-dabble", "counter", "vbuddy", "serial", "testbench"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Education",
    "Intended Audience :: Science/Research",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Electronic Design Automation (EDA)",
]
dependencies = [
    "pyserial",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
vbcounter = "vbcounter.testbench:main"

[tool.hatch.build.targets.wheel]
packages = ["vbcounter"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
