[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "zimdesk"
version = "2.3.1"
description = "Core logic for a desktop ZIM reader: single-instance handling, translations, zim:// URL routing and tab management"
requires-python = ">=3.10"
keywords = ["zim", "offline", "reader", "single-instance", "file-lock", "tabs", "translation"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP :: Browsers",
]
dependencies = [
    "portalocker",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["zimdesk"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
