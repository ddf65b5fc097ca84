[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "quadplay"
version = "0.1.0"
description = "Play black-and-white video as a quadtree of white rectangles"
requires-python = ">=3.10"
keywords = ["quadtree", "video", "animation", "morton", "pygame"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: X11 Applications",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Video :: Display",
]
dependencies = [
    "numpy",
    "imageio",
    "pygame",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
quadplay = "quadplay.app:main"

[tool.hatch.build.targets.wheel]
packages = ["quadplay"]

[tool.pytest.ini_options]
addopts = "-ra"
