[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "mcscan"
version = "0.1.0"
description = "Scan IPv4 ranges for Minecraft servers and record their status responses"
requires-python = ">=3.10"
dependencies = []
keywords = ["minecraft", "scanner", "server-list-ping", "network", "status", "socks5", "tor"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Framework :: AsyncIO",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Networking :: Monitoring",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[project.scripts]
mcscan = "mcscan.scanner:main"

[tool.hatch.build.targets.wheel]
packages = ["mcscan"]

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
