[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "bcvk"
version = "0.1.0"
description = "Helpers for running bootable containers as virtual machines through podman, libvirt and systemd"
requires-python = ">=3.11"
keywords = ["bootc", "podman", "libvirt", "qemu", "virtual-machine", "containers"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Emulators",
]
dependencies = [
    "tabulate",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
bcvk-ephemeral = "bcvk.ephemeral:main"

[tool.hatch.build.targets.wheel]
packages = ["bcvk"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py311"

[tool.mypy]
python_version = "3.11"
warn_unused_ignores = true
