[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "doitplatform"
version = "0.1.0"
description = "Quiz, content and gateway services for an online learning and testing platform"
requires-python = ">=3.10"
keywords = ["quiz", "education", "testing", "mongodb", "flask", "s3", "microservices"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Web Environment",
    "Framework :: Flask",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Education :: Testing",
    "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
]
dependencies = [
    "flask>=2.2",
    "pymongo>=4.0",
    "requests>=2.28",
    "python-dotenv>=1.0",
]

[project.optional-dependencies]
test = [
    "pytest>=7.0",
    "responses>=0.23",
]

[project.scripts]
doit-quiz = "doitplatform.quiz.app:main"
doit-content = "doitplatform.content.app:main"

[tool.hatch.build.targets.wheel]
packages = ["doitplatform"]

[tool.hatch.build.targets.sdist]
include = ["doitplatform", "tests", "README.md", "pyproject.toml"]

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
ignore_missing_imports = true
