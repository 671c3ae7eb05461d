"""Listing and inspection of bootc container images through podman."""

from __future__ import annotations

import json
import logging
import re
import shlex
import subprocess
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from tabulate import tabulate

from bcvk import hostexec
from bcvk.hostexec import HostExecError

log = logging.getLogger(__name__)

_UNITS = ("B", "KB", "MB", "GB", "TB")
_FRACTION = re.compile(r"(\.\d{6})\d+")
_TABLE_HEADERS = ("REPOSITORY", "TAG", "IMAGE ID", "CREATED", "SIZE")


def _parse_timestamp(value: str | None) -> datetime | None:
    if value is None:
        return None
    text = _FRACTION.sub(r"\1", value.strip())
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        raise ValueError(f"Timestamp without timezone: {value!r}")
    return parsed.astimezone(timezone.utc)


def _format_timestamp(value: datetime | None) -> str | None:
    if value is None:
        return None
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


@dataclass
class ImageListEntry:
    """One image as reported by ``podman images``."""

    names: list[str] | None
    id: str
    size: int
    created_at: datetime | None = None

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> ImageListEntry:
        """Build from podman's JSON object."""
        names = data.get("Names")
        return cls(
            names=list(names) if names is not None else None,
            id=data["Id"],
            size=int(data["Size"]),
            created_at=_parse_timestamp(data.get("CreatedAt")),
        )

    def to_json(self) -> dict[str, Any]:
        """JSON object with podman's field names."""
        return {
            "Names": self.names,
            "Id": self.id,
            "Size": self.size,
            "CreatedAt": _format_timestamp(self.created_at),
        }


@dataclass
class ImageInspect:
    """Image metadata from ``podman image inspect``."""

    id: str
    size: int
    created: datetime | None = None

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> ImageInspect:
        """Build from podman's JSON object."""
        return cls(
            id=data["Id"],
            size=int(data["Size"]),
            created=_parse_timestamp(data.get("Created")),
        )


def format_size(size: int) -> str:
    """Human-readable size using 1024-based units."""
    value = float(size)
    unit = 0
    while value >= 1024.0 and unit < len(_UNITS) - 1:
        value /= 1024.0
        unit += 1
    if unit == 0:
        return f"{int(value)} {_UNITS[0]}"
    return f"{value:.1f} {_UNITS[unit]}"


def _plural(count: int, unit: str) -> str:
    if count == 1:
        return f"1 {unit} ago"
    return f"{count} {unit}s ago"


def format_relative_time(dt: datetime, now: datetime | None = None) -> str:
    """Describe ``dt`` relative to ``now``, e.g. ``"3 days ago"``."""
    now = now or datetime.now(timezone.utc)
    seconds = int((now - dt).total_seconds())
    if seconds < 60:
        return f"{seconds} seconds ago"
    minutes = seconds // 60
    if minutes < 60:
        return _plural(minutes, "minute")
    hours = minutes // 60
    if hours < 24:
        return _plural(hours, "hour")
    days = seconds // 86400
    if days < 30:
        return _plural(days, "day")
    if days < 365:
        return _plural(days // 30, "month")
    return _plural(days // 365, "year")


def parse_osrelease(text: str) -> dict[str, str]:
    """Parse os-release ``KEY=value`` lines, unquoting values shell-style."""
    result: dict[str, str] = {}
    for line in text.splitlines():
        key, sep, value = line.partition("=")
        if not sep or key.startswith("#"):
            continue
        try:
            words = shlex.split(value)
        except ValueError:
            continue
        if words:
            result[key] = words[0]
    return result


def split_repository_tag(names: list[str] | None) -> tuple[str, str]:
    """Repository and tag of the first image name."""
    if not names:
        return "<none>", "<none>"
    repo, sep, tag = names[0].rpartition(":")
    if not sep:
        return names[0], "latest"
    return repo, tag


def render_image_table(
    images: list[ImageListEntry], now: datetime | None = None
) -> str:
    """Table of images in the style of ``podman images``."""
    rows = []
    for image in images:
        repository, tag = split_repository_tag(image.names)
        created = (
            format_relative_time(image.created_at, now)
            if image.created_at is not None
            else "N/A"
        )
        rows.append([repository, tag, image.id[:12], created, format_size(image.size)])
    return tabulate(rows, headers=_TABLE_HEADERS, tablefmt="fancy_grid")


def _run_json(argv: list[str]) -> Any:
    result = subprocess.run(argv, capture_output=True, text=True, check=False)
    if result.returncode != 0:
        raise HostExecError(
            f"Command {argv!r} failed with exit status {result.returncode}: "
            f"{result.stderr.strip()}"
        )
    return json.loads(result.stdout)


def list_images() -> list[ImageListEntry]:
    """All bootc images known to podman."""
    argv = hostexec.command("podman") + [
        "images",
        "--format",
        "json",
        "--filter=label=containers.bootc=1",
    ]
    return [ImageListEntry.from_json(item) for item in _run_json(argv)]


def inspect(name: str) -> ImageInspect:
    """Inspect one image."""
    argv = hostexec.command("podman") + ["image", "inspect", name]
    entries = _run_json(argv)
    if not entries:
        raise LookupError("No such image")
    return ImageInspect.from_json(entries[-1])


def get_image_size(name: str) -> int:
    """Image size in bytes."""
    log.debug("Getting size for image: %s", name)
    size = inspect(name).size
    log.debug("Found image size: %d bytes", size)
    return size


def get_image_digest(name: str) -> str:
    """Image digest in ``sha256:...`` form."""
    log.debug("Getting digest for image: %s", name)
    argv = hostexec.command("skopeo") + ["inspect", f"containers-storage:{name}"]
    try:
        output = _run_json(argv)
    except HostExecError as exc:
        raise HostExecError(f"Failed to inspect image with skopeo: {exc}") from exc
    digest = output.get("Digest") if isinstance(output, dict) else None
    if isinstance(digest, str):
        log.debug("Found image digest: %s", digest)
        return digest
    log.debug("No digest in skopeo output, falling back to podman inspect")
    image_id = inspect(name).id
    if image_id.startswith("sha256:"):
        return image_id
    return f"sha256:{image_id}"


def run_list(json_output: bool = False) -> None:
    """Print bootc images as a table or as JSON."""
    images = list_images()
    if json_output:
        print(json.dumps([image.to_json() for image in images], indent=2))
    else:
        print(render_image_table(images))