[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "fabriclint"
version = "0.1.0"
description = "Lint rules for Terraform configurations of Microsoft Fabric resources"
requires-python = ">=3.10"
dependencies = []
keywords = ["terraform", "lint", "fabric", "hcl", "static-analysis"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Quality Assurance",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
fabriclint = "fabriclint.ruleset:main"

[tool.hatch.build.targets.wheel]
packages = ["fabriclint"]

[tool.hatch.build.targets.sdist]
include = ["fabriclint", "tests", "pyproject.toml", "README.md"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
