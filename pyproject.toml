[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "walletms"
version = "0.1.0"
description = "Digital wallet services: clients, accounts, transfers between accounts and a balance service fed by transaction events."
requires-python = ">=3.10"
dependencies = [
    "werkzeug",
]
keywords = ["wallet", "accounts", "transactions", "balance", "events", "unit of work"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Office/Business :: Financial",
    "Topic :: Internet :: WWW/HTTP :: WSGI :: Application",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
walletms = "walletms.app:main"
walletms-balance = "walletms.balance.app:main"

[tool.hatch.build.targets.wheel]
packages = ["walletms"]

[tool.hatch.build.targets.sdist]
include = ["walletms", "tests"]

[tool.pytest.ini_options]
addopts = "-ra"
