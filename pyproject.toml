[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "cronbeat"
version = "0.1.0"
description = "An asyncio beat service that sends messages to a broker on cron and interval schedules."
requires-python = ">=3.10"
dependencies = []
keywords = ["cron", "crontab", "scheduler", "beat", "periodic", "tasks", "broker", "asyncio"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Framework :: AsyncIO",
    "Topic :: System :: Distributed Computing",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[tool.hatch.build.targets.wheel]
packages = ["cronbeat"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
