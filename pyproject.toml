[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "wxbridge"
version = "0.1.0"
description = "Building blocks for a Matrix puppeting bridge to WeChat: identifiers, Matrix event types, third-party lookup payloads, retry and reconnection, rate limiting, queues, caching and metrics."
requires-python = ">=3.10"
keywords = ["matrix", "wechat", "bridge", "chat", "retry", "rate-limiting", "metrics"]
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
    "Framework :: AsyncIO",
    "Topic :: Communications :: Chat",
    "Typing :: Typed",
]
dependencies = []

[project.optional-dependencies]
test = [
    "pytest>=7",
    "pytest-asyncio>=0.21",
    "respx>=0.20",
]

[tool.hatch.build.targets.wheel]
packages = ["wxbridge"]

[tool.hatch.build.targets.sdist]
include = ["wxbridge", "tests", "pyproject.toml", "README.md"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
