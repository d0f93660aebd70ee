[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "rssterm"
version = "0.1.0"
description = "Read RSS and Atom feeds in the terminal"
requires-python = ">=3.11"
keywords = ["rss", "atom", "feeds", "terminal", "tui", "reader"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP :: Browsers",
]
dependencies = [
    "httpx",
    "blessed",
    "humanize",
    "defusedxml",
    "beautifulsoup4",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[project.scripts]
rssterm = "rssterm.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["rssterm"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py311"

[tool.ruff.lint]
select = ["E", "F", "I", "B", "UP"]
