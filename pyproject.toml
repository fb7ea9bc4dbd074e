[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "tabflow"
version = "0.1.0"
description = "A small typed column store with a release-gated thread pool and parallel CSV/SQLite loading."
requires-python = ">=3.10"
dependencies = []
keywords = ["dataframe", "csv", "sqlite", "thread pool", "columns"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Information Analysis",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["tabflow"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
