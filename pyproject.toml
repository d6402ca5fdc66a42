[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "varknet"
version = "0.1.0"
description = "Container networking helpers: DHCP lease proxy records and cache, aardvark-dns configuration files and structured errors"
requires-python = ">=3.10"
dependencies = []
keywords = ["containers", "networking", "dhcp", "dns", "aardvark", "lease"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Networking",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["varknet"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]
