[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "coclai"
version = "0.1.5"
description = "JSON-RPC message classification, contract checks, metrics, hooks and client configuration for app-server clients."
requires-python = ">=3.10"
dependencies = []
keywords = ["json-rpc", "app-server", "hooks", "metrics", "validation"]
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
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest", "pytest-asyncio"]

[tool.hatch.build.targets.wheel]
packages = ["coclai"]

[tool.pytest.ini_options]
addopts = "-ra"
