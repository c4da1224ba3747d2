[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "neutrino_elements"
version = "0.1.0"
description = "Light-client building blocks for Elements/Liquid: P2P wire messages, compact block filters and a filter-based chain scanner"
requires-python = ">=3.10"
keywords = ["liquid", "elements", "neutrino", "bip157", "bip158", "p2p", "compact-filters", "gcs"]
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
    "Topic :: Internet",
]
dependencies = [
    "pycryptodome",
    "requests",
]

[project.optional-dependencies]
test = [
    "pytest",
    "responses",
]

[tool.hatch.build.targets.wheel]
packages = ["neutrino_elements"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
