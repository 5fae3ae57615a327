[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "brafos"
version = "0.1.0"
description = "A simulated hobby operating system: framebuffer console, chained-sector file system and a text editor"
requires-python = ">=3.10"
dependencies = []
keywords = ["emulator", "framebuffer", "console", "filesystem", "text-editor", "hobby-os"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Emulators",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
brafos = "brafos.shell:main"

[tool.hatch.build.targets.wheel]
packages = ["brafos"]

[tool.pytest.ini_options]
addopts = "-ra"
