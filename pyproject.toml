[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "banco"
version = "0.1.0"
description = "A small multi-terminal bank simulator with account storage, transaction logs and an anomaly monitor"
requires-python = ">=3.10"
dependencies = []
keywords = ["bank", "accounts", "transactions", "simulation", "monitor"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Education",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Office/Business :: Financial :: Accounting",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
banco = "banco.bank:main"
banco-user = "banco.user:main"
banco-monitor = "banco.monitor:main"
banco-init-accounts = "banco.accounts:main"

[tool.hatch.build.targets.wheel]
packages = ["banco"]

[tool.pytest.ini_options]
addopts = "-ra"
