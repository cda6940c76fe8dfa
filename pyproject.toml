[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "docbasestore"
version = "0.1.0"
description = "Flatten alert and case JSON documents and keep them, and log messages, in Elasticsearch indexes"
requires-python = ">=3.10"
keywords = ["elasticsearch", "json", "documents", "storage", "logging"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Database",
]
dependencies = [
    "requests>=2.28",
]

[project.optional-dependencies]
test = [
    "pytest>=7",
    "responses>=0.23",
]

[tool.hatch.build.targets.wheel]
packages = ["docbasestore"]

[tool.pytest.ini_options]
addopts = "-ra"
