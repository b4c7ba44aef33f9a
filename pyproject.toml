[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "tubestore"
version = "0.1.0"
description = "A small WSGI server that keeps video metadata, users and refresh tokens in SQLite and serves static files and assets from disk"
requires-python = ">=3.10"
keywords = ["video", "http", "wsgi", "sqlite", "assets", "static-files"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Web Environment",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
    "Topic :: Internet :: WWW/HTTP :: WSGI :: Application",
]
dependencies = [
    "werkzeug>=3.0",
    "python-dotenv>=1.0",
]

[project.optional-dependencies]
test = [
    "pytest>=7.0",
]

[project.scripts]
tubestore = "tubestore.server:main"

[tool.hatch.build.targets.wheel]
packages = ["tubestore"]

[tool.hatch.build.targets.sdist]
include = ["tubestore", "tests", "README.md"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
