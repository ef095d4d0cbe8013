[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "agentchat"
version = "0.1.0"
description = "Headless model of an agent chat panel: transcript log, markdown blocks, asset context and permission prompts."
requires-python = ">=3.10"
dependencies = []
keywords = ["chat", "agent", "markdown", "transcript", "permissions", "mentions"]
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
    "Topic :: Communications :: Chat",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["agentchat"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 88
target-version = "py310"

[tool.mypy]
python_version = "3.10"
