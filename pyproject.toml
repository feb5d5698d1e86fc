[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "opium"
version = "0.1.0"
description = "Slab allocator model, size-class arena, red-black tree, intrusive list, djb2 hash and a small logger"
requires-python = ">=3.10"
dependencies = []
keywords = ["slab", "allocator", "arena", "red-black tree", "linked list", "bitmask", "djb2"]
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
    "Topic :: Software Development :: Libraries",
]

[project.optional-dependencies]
test = ["pytest", "hypothesis"]

[tool.hatch.build.targets.wheel]
packages = ["opium"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
