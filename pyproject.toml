[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "rsmodwalk"
version = "0.1.0"
description = "Discover the source files of a Rust crate by following its manifest and mod declarations"
requires-python = ">=3.11"
dependencies = []
keywords = ["rust", "cargo", "modules", "traversal", "source discovery"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Quality Assurance",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
rsmodwalk = "rsmodwalk.extract:main"

[tool.hatch.build.targets.wheel]
packages = ["rsmodwalk"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py311"

[tool.mypy]
python_version = "3.11"
strict = true
