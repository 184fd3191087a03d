[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "teapotd"
version = "0.1.0"
description = "A small multiplexed HTTP/1.0 static file server that also answers HTCPCP BREW requests"
requires-python = ">=3.10"
dependencies = []
keywords = ["http", "server", "static-files", "htcpcp", "selectors"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: No Input/Output (Daemon)",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
teapotd = "teapotd.server:main"

[tool.hatch.build.targets.wheel]
packages = ["teapotd"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
