[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "copygit"
version = "0.1.0"
description = "Configuration, registry and credential tooling for keeping Git repositories in sync across several hosting providers."
requires-python = ">=3.11"
keywords = ["git", "sync", "mirror", "github", "gitlab", "gitea"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Version Control :: Git",
]
dependencies = [
    "tomli-w",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
copygit = "copygit.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["copygit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py311"
