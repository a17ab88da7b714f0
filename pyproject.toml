[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "rcgreedy-sim"
version = "0.1.0"
description = "Discrete-event simulation comparing the EQUI and RCGREEDY server allocation schedulers"
requires-python = ">=3.10"
keywords = ["scheduling", "simulation", "parallel jobs", "queueing", "speedup"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering",
]
dependencies = []

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
rcgreedy-sim = "rcgreedy_sim.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["rcgreedy_sim"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
