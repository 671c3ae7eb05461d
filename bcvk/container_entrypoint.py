"""Helpers used as entry points inside the VM-hosting container."""

from __future__ import annotations

import json
import logging
import subprocess
from collections.abc import Sequence
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any

log = logging.getLogger(__name__)

DEFAULT_SSH_KEY = "/tmp/ssh"
DEFAULT_VM_HOST = "root@10.0.2.15"
_U32_MAX = 2**32 - 1


def _u32(data: dict[str, Any], key: str) -> int:
    value = data[key]
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{key} must be an integer")
    if not 0 <= value <= _U32_MAX:
        raise ValueError(f"{key} out of range: {value}")
    return value


@dataclass
class ContainerConfig:
    """Configuration handed to the container through ``BCK_CONFIG``."""

    memory_mb: int
    vcpus: int
    console: bool
    extra_args: str | None = None

    @classmethod
    def from_json(cls, text: str) -> ContainerConfig:
        """Parse and validate a JSON configuration."""
        data = json.loads(text)
        if not isinstance(data, dict):
            raise ValueError("Configuration must be a JSON object")
        try:
            memory_mb = _u32(data, "memory_mb")
            vcpus = _u32(data, "vcpus")
            console = data["console"]
            extra_args = data.get("extra_args")
        except KeyError as exc:
            raise ValueError(f"Missing field {exc.args[0]}") from None
        if not isinstance(console, bool):
            raise ValueError("console must be a boolean")
        if extra_args is not None and not isinstance(extra_args, str):
            raise ValueError("extra_args must be a string")
        return cls(memory_mb=memory_mb, vcpus=vcpus, console=console, extra_args=extra_args)

    def to_json(self) -> str:
        """Serialize to JSON."""
        return json.dumps(asdict(self))


def build_ssh_command(args: Sequence[str], key_path: str = DEFAULT_SSH_KEY) -> list[str]:
    """ssh argument vector for reaching the VM over QEMU user networking."""
    argv = ["ssh"]
    if Path(key_path).exists():
        argv += ["-i", key_path]
    argv += [
        "-o", "StrictHostKeyChecking=no",
        "-o", "UserKnownHostsFile=/dev/null",
        "-o", "LogLevel=ERROR",
    ]
    has_host = any("@" in arg for arg in args)
    if not has_host:
        argv.append(DEFAULT_VM_HOST)
        if args:
            argv.append("--")
    argv += list(args)
    return argv


def ssh_to_vm(args: Sequence[str]) -> int:
    """Run ssh into the VM and return its exit code (1 if killed by a signal)."""
    log.debug("SSH to VM with args: %r", list(args))
    returncode = subprocess.run(build_ssh_command(args), check=False).returncode
    return returncode if returncode >= 0 else 1