[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "bundlekit"
version = "0.1.0"
description = "Service bundle specs, JSON Schema generation for plans, custom resource conversions, an etcd version probe and a sandbox gauge."
requires-python = ">=3.10"
dependencies = [
    "semver",
]
keywords = ["service-broker", "bundle", "json-schema", "crd", "etcd"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["bundlekit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
