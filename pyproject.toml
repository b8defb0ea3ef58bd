[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "rolling-deployer"
version = "0.2.17"
description = "A tool for deploying new versions of traefik configs"
requires-python = ">=3.10"
keywords = ["traefik", "deployer", "configs", "docker", "compose", "swarm"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Software Distribution",
    "Topic :: System :: Systems Administration",
]
dependencies = [
    "pyyaml",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
rolling-deployer = "rolling_deployer.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["rolling_deployer"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
