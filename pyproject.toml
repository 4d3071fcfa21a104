[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "mangaroo"
version = "0.1.0"
description = "Library that downloads manga chapters and stores their images and metadata in Elasticsearch"
requires-python = ">=3.10"
keywords = ["manga", "scraper", "downloader", "elasticsearch"]
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
    "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
]
dependencies = [
    "flask",
    "requests",
    "beautifulsoup4",
]

[project.optional-dependencies]
test = [
    "pytest",
    "responses",
]

[tool.hatch.build.targets.wheel]
packages = ["mangaroo"]

[tool.pytest.ini_options]
addopts = "-ra"
