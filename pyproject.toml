[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "primeweb"
version = "1.0.0"
description = "Prime factorization model with small TCP and HTTP server and client building blocks"
requires-python = ">=3.10"
dependencies = []
keywords = ["http", "tcp", "server", "client", "prime", "factorization"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Web Environment",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
    "Topic :: Scientific/Engineering :: Mathematics",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["primeweb"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
