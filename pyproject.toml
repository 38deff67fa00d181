[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "netfuncs"
version = "0.1.0"
description = "Network function catalogue, name-resolver service, compute controller helpers and packet-processing building blocks"
requires-python = ">=3.10"
dependencies = [
    "lxml",
]
keywords = [
    "network functions",
    "nfv",
    "orchestration",
    "name resolver",
    "dpi",
    "packet filtering",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: System Administrators",
    "Intended Audience :: Telecommunications Industry",
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
test = [
    "pytest",
]

[project.scripts]
netfuncs-resolver = "netfuncs.resolver_cli:main"

[tool.hatch.build.targets.wheel]
packages = ["netfuncs"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
