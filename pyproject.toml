[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "germber"
version = "0.1.0"
description = "A Game Boy (DMG) emulator with an SM83 CPU, MBC1 cartridges, a pixel-FIFO PPU and a pygame window"
requires-python = ">=3.10"
keywords = ["game boy", "emulator", "dmg", "sm83", "gameboy"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Emulators",
    "Topic :: Games/Entertainment",
]
dependencies = [
    "pygame",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
germber = "germber.emu:main"

[tool.hatch.build.targets.wheel]
packages = ["germber"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
