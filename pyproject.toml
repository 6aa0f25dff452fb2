[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "repokeywords"
version = "0.1.0"
description = "Clone git repositories, index their markdown documents, pick keywords by TF-IDF and serve the results as JSON."
requires-python = ">=3.10"
dependencies = []
keywords = ["keywords", "tf-idf", "indexing", "git", "markdown", "documentation"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Environment :: Console",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Text Processing :: Indexing",
    "Topic :: Software Development :: Documentation",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
repokeywords = "repokeywords.server:main"

[tool.hatch.build.targets.wheel]
packages = ["repokeywords"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
