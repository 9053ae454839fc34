[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "apclient"
version = "0.1.0"
description = "Client back end for a simulated source-routed drone network: flooding, routing, fragmentation and in-memory message storage"
requires-python = ">=3.10"
dependencies = []
keywords = ["networking", "source-routing", "simulation", "fragmentation", "flooding"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: System :: Networking",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["apclient"]

[tool.pytest.ini_options]
addopts = "-ra"
