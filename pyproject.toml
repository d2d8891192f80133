[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "halofinder"
version = "0.1.0"
description = "Building blocks of a phase-space dark matter halo finder: configuration, cosmology, periodic bounds, friends-of-friends grouping and spatial trees."
requires-python = ">=3.10"
dependencies = []
keywords = ["astronomy", "cosmology", "halo finder", "friends-of-friends", "n-body", "bsp-tree"]
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
    "Topic :: Scientific/Engineering :: Astronomy",
    "Topic :: Scientific/Engineering :: Physics",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["halofinder"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
