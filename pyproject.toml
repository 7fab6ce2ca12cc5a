[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "mediadeck"
version = "0.1.0"
description = "Display mode matching and remote-control input sources for a media player front end"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "media player",
    "display modes",
    "refresh rate",
    "remote control",
    "hdmi-cec",
    "lirc",
    "joystick",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Video :: Display",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["mediadeck"]

[tool.hatch.build.targets.sdist]
include = ["mediadeck", "tests", "pyproject.toml", "README.md"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]
