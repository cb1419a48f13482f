[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "demobits"
version = "0.1.0"
description = "Bit-exact readers and writers for Source engine demo data: bit streams, encoded floats, arenas and buffered stream reading"
requires-python = ">=3.10"
dependencies = []
keywords = ["demo", "bitstream", "source-engine", "binary", "parsing"]
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
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest", "hypothesis"]

[tool.hatch.build.targets.wheel]
packages = ["demobits"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
