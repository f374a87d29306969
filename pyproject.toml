[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "impactserver"
version = "1.0.0"
description = "WSGI web server for a game client's site: releases feed, installer downloads, redirects, caching and proxying"
requires-python = ">=3.10"
keywords = ["http", "server", "wsgi", "middleware", "proxy", "installer", "releases"]
classifiers = [
    "Development Status :: 4 - Beta",
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
    "werkzeug",
    "requests",
    "cryptography",
]

[project.optional-dependencies]
test = [
    "pytest",
    "responses",
]

[project.scripts]
impactserver = "impactserver.site:main"

[tool.hatch.build.targets.wheel]
packages = ["impactserver"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
