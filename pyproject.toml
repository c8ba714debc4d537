[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "mazeshooter"
version = "0.1.0"
description = "Authoritative UDP game server for a multiplayer maze shooter"
requires-python = ">=3.10"
dependencies = []
keywords = ["game", "server", "multiplayer", "shooter", "maze", "ecs", "udp"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Games/Entertainment :: First Person Shooters",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
mazeshooter-server = "mazeshooter.server:main"

[tool.hatch.build.targets.wheel]
packages = ["mazeshooter"]

[tool.pytest.ini_options]
addopts = "-ra"
