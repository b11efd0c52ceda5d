[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "powergrid"
version = "0.1.0"
description = "Board model, wire protocol and client plumbing for an online Power Grid board game"
requires-python = ">=3.11"
keywords = ["power grid", "board game", "websocket", "game protocol", "dijkstra"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Games/Entertainment :: Board Games",
]
dependencies = [
    "websockets",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["powergrid"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
