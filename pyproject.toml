[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "schaufel"
version = "0.11"
description = "Building blocks for shovelling messages: a thread-safe message queue with hooks and metadata, Redis producers and consumers, and configuration handling"
requires-python = ">=3.10"
keywords = ["queue", "redis", "pipeline", "messaging", "configuration"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Distributed Computing",
]
dependencies = [
    "redis",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["schaufel"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
