"""Parsing of the ``/run/.containerenv`` file written by podman."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

PATH = "run/.containerenv"


@dataclass
class ContainerExecutionInfo:
    """Metadata about the container this process runs in."""

    engine: str = ""
    name: str = ""
    id: str = ""
    image: str = ""
    imageid: str = ""
    rootless: str | None = None


_STRING_FIELDS = {"engine", "name", "id", "image", "imageid"}


def parse_containerenv(text: str) -> ContainerExecutionInfo:
    """Parse the ``key="value"`` lines of a containerenv file."""
    info = ContainerExecutionInfo()
    for raw in text.split("\n"):
        line = raw.strip()
        key, sep, value = line.partition("=")
        if not sep:
            continue
        value = value.lstrip('"').rstrip('"')
        if key in _STRING_FIELDS:
            setattr(info, key, value)
        elif key == "rootless":
            info.rootless = value
    return info


def is_container(rootfs: str | os.PathLike[str] = "/") -> bool:
    """True if ``rootfs`` holds a containerenv file."""
    return (Path(rootfs) / PATH).exists()


def get_container_execution_info(
    rootfs: str | os.PathLike[str] = "/",
) -> ContainerExecutionInfo | None:
    """Load and parse the containerenv file, or return None if absent."""
    try:
        text = (Path(rootfs) / PATH).read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    return parse_containerenv(text)