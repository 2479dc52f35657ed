[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "causechain"
version = "0.1.0"
description = "Exception wrapping with equivalence marks, safe details, telemetry keys, stack traces and report building"
requires-python = ">=3.10"
dependencies = []
keywords = ["errors", "exceptions", "wrapping", "redaction", "stack-trace", "reporting"]
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
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["causechain"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
