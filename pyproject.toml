[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "minamos"
version = "0.0.1"
description = "A small simulated hobby kernel: VGA text screen, port bus, interrupts, timer, heap allocator and a command shell"
requires-python = ">=3.10"
dependencies = []
keywords = ["kernel", "emulator", "vga", "shell", "allocator", "simulation"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Education",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Emulators",
    "Topic :: Education",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
minamos = "minamos.kernel:main"

[tool.hatch.build.targets.wheel]
packages = ["minamos"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
