[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "flyos"
version = "1.0.0"
description = "Interactive command shell for network appliances, with route types and a command-line route manager"
requires-python = ">=3.11"
keywords = ["shell", "repl", "routing", "network", "cli", "bgp", "ospf"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Shells",
    "Topic :: System :: Networking",
]
dependencies = [
    "watchdog",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
flyos = "flyos.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["flyos"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py311"

[tool.mypy]
python_version = "3.11"
warn_unused_ignores = true
