[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "adaptorsig"
version = "0.1.0"
description = "Two-party ECDSA adaptor signatures on secp256k1 with Paillier-based presigning and zero-knowledge proofs"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "ecdsa",
    "adaptor-signature",
    "two-party",
    "secp256k1",
    "paillier",
    "zero-knowledge",
    "mpc",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Security :: Cryptography",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
adaptorsig-bench = "adaptorsig.bench:main"

[tool.hatch.build.targets.wheel]
packages = ["adaptorsig"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
