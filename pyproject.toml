[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "sysproxy"
version = "0.3.0"
description = "Get and set the system proxy and automatic proxy configuration on Windows, macOS and Linux."
requires-python = ">=3.10"
dependencies = [
    "psutil",
]
keywords = ["system-proxy", "proxy", "networksetup", "gsettings", "kioslaverc", "pac"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: Microsoft :: Windows",
    "Operating System :: MacOS",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Networking",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["sysproxy"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
