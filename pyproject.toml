[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "rtrtool"
version = "0.8.0"
description = "Helpers for RPKI/RTR client tools: command line parsing, update formatting, ROA export templates and route origin validation query handling."
requires-python = ">=3.10"
dependencies = []
keywords = ["rpki", "rtr", "bgp", "roa", "aspa", "route-origin-validation"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: System Administrators",
    "Intended Audience :: Telecommunications Industry",
    "Operating System :: OS Independent",
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
packages = ["rtrtool"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
strict = true
