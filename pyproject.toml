[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "cloudstore"
version = "0.1.0"
description = "A small file storage server with user accounts, instant upload by hash and chunked upload, plus a WebSocket echo server"
requires-python = ">=3.10"
keywords = ["file server", "upload", "multipart upload", "flask", "websocket", "storage"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Web Environment",
    "Framework :: Flask",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
]
dependencies = [
    "flask",
    "pymysql",
    "redis",
    "websockets",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[project.scripts]
cloudstore-server = "cloudstore.server:main"
cloudstore-ws = "cloudstore.wsserver:main"

[tool.hatch.build.targets.wheel]
packages = ["cloudstore"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
ignore_missing_imports = true
