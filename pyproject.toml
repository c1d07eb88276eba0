[build-system]
requires = ["setuptools>=61.0"]
build-backend = "setuptools.build_meta"

[project]
name = "remotefs"
version = "0.1.0"
description = "A small TCP file server and client for writing, fetching, removing and listing remote files"
requires-python = ">=3.10"
dependencies = []
keywords = ["file transfer", "tcp", "file server", "remote files"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: File Transfer Protocol (FTP)",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
rfs = "remotefs.client:main"
rfserver = "remotefs.server:main"

[tool.setuptools.packages.find]
include = ["remotefs*"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
