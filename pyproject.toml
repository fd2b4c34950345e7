[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "pont"
version = "0.1.0"
description = "A multiplayer tile-matching board game: rules engine, binary protocol, WebSocket room server and client-side model"
requires-python = ">=3.10"
keywords = ["game", "board-game", "tiles", "multiplayer", "websocket"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Framework :: AsyncIO",
    "Intended Audience :: Developers",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Games/Entertainment :: Board Games",
]
dependencies = [
    "websockets",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[project.scripts]
pont-server = "pont.server:main"

[tool.hatch.build.targets.wheel]
packages = ["pont"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]
