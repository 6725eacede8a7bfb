[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "lichess_indexer"
version = "0.1.0"
description = "Sample Lichess PGN dumps and upload the selected games to an opening explorer import endpoint"
requires-python = ">=3.10"
keywords = ["chess", "pgn", "lichess", "opening explorer", "indexing"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Games/Entertainment :: Board Games",
]
dependencies = [
    "requests",
]

[project.optional-dependencies]
test = [
    "pytest",
    "responses",
]

[project.scripts]
index-lichess = "lichess_indexer.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["lichess_indexer"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
