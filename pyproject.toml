[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "whereabouts"
version = "0.1.0"
description = "IP address management helpers: range calculation, address assignment and pool consistency checks"
requires-python = ">=3.10"
dependencies = []
keywords = ["ipam", "ip", "networking", "cidr", "ipv6", "kubernetes"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Networking",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["whereabouts"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
