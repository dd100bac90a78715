[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "mullvadinst"
version = "0.1.0"
description = "Fetch, verify, unpack and install the Mullvad VPN desktop app from its .deb release on Linux"
requires-python = ">=3.10"
dependencies = [
    "cryptography",
]
keywords = ["mullvad", "vpn", "installer", "deb", "openpgp"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Installation/Setup",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
mullvadinst = "mullvadinst.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["mullvadinst"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
