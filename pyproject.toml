[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "rvps"
version = "0.1.0"
description = "Reference Value Provider Service: verifies provenance, stores the reference values it carries and serves them over gRPC"
requires-python = ">=3.11"
keywords = [
    "attestation",
    "reference-values",
    "confidential-computing",
    "grpc",
    "provenance",
    "swid",
    "key-broker",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Security",
    "Topic :: System :: Systems Administration",
]
dependencies = [
    "grpcio>=1.50",
    "requests>=2.28",
    "pyjwt>=2.6",
    "cryptography>=41",
]

[project.optional-dependencies]
test = [
    "pytest>=7.4",
    "responses>=0.23",
]

[project.scripts]
rvps = "rvps.cli:main"
rvps-tool = "rvps.tool:main"

[tool.hatch.build.targets.wheel]
packages = ["rvps"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py311"

[tool.ruff.lint]
select = ["E", "F", "I", "B", "UP"]

[tool.mypy]
python_version = "3.11"
warn_unused_ignores = true
