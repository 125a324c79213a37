[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "noqli"
version = "0.1.0"
description = "An interactive command line for MySQL with a brace-based query syntax instead of SQL"
requires-python = ">=3.10"
keywords = ["mysql", "cli", "repl", "database", "query"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Database :: Front-Ends",
]
dependencies = [
    "pymysql",
    "python-dotenv",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
noqli = "noqli.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["noqli"]

[tool.pytest.ini_options]
addopts = "-ra"
