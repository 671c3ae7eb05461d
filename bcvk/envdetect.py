"""Detection of container, privilege and PID-namespace state."""

from __future__ import annotations

import os
import threading
from dataclasses import dataclass
from pathlib import Path

from bcvk.containerenv import (
    ContainerExecutionInfo,
    get_container_execution_info,
    is_container,
)

_CAP_SYS_ADMIN = 21

_cached: Environment | None = None
_cache_lock = threading.Lock()


def has_sys_admin_capability(status_text: str) -> bool:
    """Whether CAP_SYS_ADMIN is in the bounding set of a ``/proc/*/status`` text."""
    for line in status_text.splitlines():
        key, sep, value = line.partition(":")
        if sep and key.strip() == "CapBnd":
            mask = int(value.strip(), 16)
            return bool((mask >> _CAP_SYS_ADMIN) & 1)
    raise ValueError("No CapBnd entry in process status")


def is_hostpid() -> bool:
    """Detect whether the process can see its real parent (``--pid=host``)."""
    ppid = os.getppid()
    if ppid == 0:
        return False
    parent = Path(f"/proc/{ppid}")
    if parent.stat().st_uid != os.getuid():
        return True
    parent_ns = os.readlink(parent / "ns" / "mnt")
    own_ns = os.readlink("/proc/self/ns/mnt")
    return parent_ns != own_ns


@dataclass
class Environment:
    """Detected execution environment."""

    privileged: bool = False
    pidhost: bool = False
    container: bool = False
    containerenv: ContainerExecutionInfo | None = None

    @classmethod
    def detect(cls, rootfs: str | os.PathLike[str] = "/") -> Environment:
        """Probe the current environment."""
        status = Path("/proc/self/status").read_text(encoding="utf-8")
        return cls(
            privileged=has_sys_admin_capability(status),
            pidhost=is_hostpid(),
            container=is_container(rootfs),
            containerenv=get_container_execution_info(rootfs),
        )

    @classmethod
    def get_cached(cls) -> Environment:
        """Detect once per process; a failed detection is retried next time."""
        global _cached
        with _cache_lock:
            if _cached is None:
                _cached = cls.detect()
            return _cached