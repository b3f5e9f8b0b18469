[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "cfrcore"
version = "0.1.0"
description = "Compact bit-level data structures and read-classification helpers for metagenomic sequence classification"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "bioinformatics",
    "metagenomics",
    "succinct data structures",
    "bitvector",
    "rank select",
    "read merging",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Bio-Informatics",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["cfrcore"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
