[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "treeshell"
version = "0.1.0"
description = "A small command shell that parses command lines into a syntax tree and runs them with pipes, redirections, here-documents and logical operators"
requires-python = ">=3.10"
dependencies = []
keywords = ["shell", "pipeline", "redirection", "heredoc", "parser"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Shells",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
treeshell = "treeshell.shell:main"

[tool.hatch.build.targets.wheel]
packages = ["treeshell"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
