[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "mptrie"
version = "0.1.0"
description = "A Merkle Patricia trie with a pure-Python Keccak/SHA-3 implementation"
requires-python = ">=3.10"
dependencies = []
keywords = ["merkle", "patricia", "trie", "keccak", "sha3", "shake", "hash"]
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
    "Topic :: Security :: Cryptography",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
mptrie-demo = "mptrie.trie:main"

[tool.hatch.build.targets.wheel]
packages = ["mptrie"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
