"""Run commands on the host, also from inside a privileged container.

Inside a container started with ``--privileged`` and ``--pid=host`` commands
are wrapped in ``systemd-run`` so that they execute on the host, bound to the
lifetime of the container's scope unit.
"""

from __future__ import annotations

import os
import secrets
import string
import subprocess
from collections.abc import Iterable
from dataclasses import dataclass
from typing import BinaryIO

from bcvk.containerenv import ContainerExecutionInfo
from bcvk.envdetect import Environment

_RUN_ID_ALPHABET = string.ascii_letters + string.digits
_RUN_ID_LENGTH = 8


class HostExecError(RuntimeError):
    """Raised when a host command cannot be prepared or fails."""


@dataclass
class SystemdConfig:
    """Settings for ``systemd-run`` wrapping."""

    detached: bool = False


def _host_container_info() -> ContainerExecutionInfo | None:
    """Container info when host access goes through systemd-run, else None."""
    if "TOOLBOX_PATH" in os.environ:
        return None
    env = Environment.get_cached()
    if not env.container:
        return None
    info = env.containerenv
    if info is None or not env.privileged:
        raise HostExecError("This command requires running with --privileged")
    if not env.pidhost:
        raise HostExecError("This command requires running with --pid=host")
    return info


def _run_id() -> str:
    return "".join(secrets.choice(_RUN_ID_ALPHABET) for _ in range(_RUN_ID_LENGTH))


def command(
    exe: str | os.PathLike[str], config: SystemdConfig | None = None
) -> list[str]:
    """Argument vector that runs ``exe`` on the host."""
    exe = os.fspath(exe)
    config = config or SystemdConfig()
    info = _host_container_info()
    if info is None:
        return [exe]

    container_id = info.id
    unit = f"hostcmd-{container_id}-{_run_id()}.service"
    scope = f"libpod-{container_id}.scope"
    argv = [
        "systemd-run",
        "--quiet",
        "--collect",
        "-u",
        unit,
        "--property=ExecSearchPath=/usr/bin",
    ]
    if not config.detached:
        argv.append("--pipe")
    if info.rootless is not None:
        argv.append("--user")
    for prop in (f"BindsTo={scope}", f"After={scope}"):
        argv += ["-p", prop]
    argv += ["--", exe]
    return argv


def run(
    exe: str | os.PathLike[str], args: Iterable[str | os.PathLike[str]] = ()
) -> None:
    """Run ``exe`` with ``args`` on the host, inheriting standard streams."""
    argv = command(exe) + [os.fspath(arg) for arg in args]
    result = subprocess.run(argv, check=False)
    if result.returncode != 0:
        raise HostExecError(
            f"Command {argv!r} failed with exit status {result.returncode}"
        )


def podman() -> list[str]:
    """Argument vector for running podman on the host."""
    return command("podman")


def parse_env(stream: BinaryIO) -> dict[str, str]:
    """Parse ``KEY=VALUE`` lines as printed by ``env``.

    Only the text between the first and second ``=`` is kept as the value;
    lines without ``=`` are skipped.
    """
    result: dict[str, str] = {}
    for line in stream.read().split(b"\n"):
        parts = line.split(b"=")
        if len(parts) < 2:
            continue
        result[os.fsdecode(parts[0])] = os.fsdecode(parts[1])
    return result