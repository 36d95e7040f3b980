[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "presetweaver"
version = "0.1.0"
description = "Convert Lost Ark character customization presets (.cus files) between game regions"
requires-python = ">=3.10"
dependencies = []
keywords = ["lost ark", "customization", "presets", "cus", "region", "steam"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Games/Entertainment",
    "Topic :: Utilities",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
presetweaver = "presetweaver.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["presetweaver"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
