"""Management of containers that host ephemeral bootc VMs."""

from __future__ import annotations

import argparse
import json
import subprocess
import sys
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any

from tabulate import tabulate

from bcvk import hostexec
from bcvk.hostexec import HostExecError

EPHEMERAL_LABEL = "bcvk.ephemeral=1"
_SHORT_ID_LEN = 12
_IMAGE_WIDTH = 30
_TABLE_HEADERS = ("CONTAINER ID", "IMAGE", "CREATED", "STATUS", "NAMES")


@dataclass
class ContainerListEntry:
    """One container as reported by ``podman ps --format json``."""

    id: str
    names: list[str] = field(default_factory=list)
    state: str = ""
    created_at: str = ""
    image: str = ""
    command: list[str] = field(default_factory=list)

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> ContainerListEntry:
        """Build from podman's JSON object."""
        try:
            return cls(
                id=data["Id"],
                names=list(data["Names"]),
                state=data["State"],
                created_at=data["CreatedAt"],
                image=data["Image"],
                command=list(data["Command"]),
            )
        except (KeyError, TypeError) as exc:
            raise ValueError(f"Invalid container entry: {exc}") from None

    def to_json(self) -> dict[str, Any]:
        """JSON object with podman's field names."""
        return {
            "Id": self.id,
            "Names": self.names,
            "State": self.state,
            "CreatedAt": self.created_at,
            "Image": self.image,
            "Command": self.command,
        }


def short_id(container_id: str) -> str:
    """Abbreviated container ID."""
    return container_id[:_SHORT_ID_LEN]


def render_container_table(containers: Sequence[ContainerListEntry]) -> str:
    """Table of containers in the style of ``podman ps``."""
    rows = []
    for container in containers:
        image = container.image
        if len(image) > _IMAGE_WIDTH:
            image = image[:_IMAGE_WIDTH] + "..."
        rows.append(
            [
                short_id(container.id),
                image,
                container.created_at,
                container.state,
                ", ".join(container.names),
            ]
        )
    return tabulate(rows, headers=_TABLE_HEADERS, tablefmt="fancy_grid")


def list_ephemeral_containers() -> list[ContainerListEntry]:
    """Containers carrying the ephemeral VM label."""
    argv = hostexec.command("podman") + [
        "ps",
        "--all",
        "--format",
        "json",
        f"--filter=label={EPHEMERAL_LABEL}",
    ]
    try:
        result = subprocess.run(argv, capture_output=True, text=True, check=False)
    except OSError as exc:
        raise HostExecError(f"Failed to list ephemeral containers: {exc}") from exc
    if result.returncode != 0:
        raise HostExecError(
            f"Failed to list ephemeral containers: {result.stderr.strip()}"
        )
    try:
        data = json.loads(result.stdout)
    except json.JSONDecodeError as exc:
        raise HostExecError(f"Failed to list ephemeral containers: {exc}") from exc
    return [ContainerListEntry.from_json(item) for item in data]


def remove_all_ephemeral_containers(
    force: bool = False, prompt: Callable[[str], str] = input
) -> None:
    """Force-remove every ephemeral container, asking first unless ``force``."""
    containers = list_ephemeral_containers()
    if not containers:
        print("No ephemeral containers found.")
        return

    if not force:
        print(f"Found {len(containers)} ephemeral container(s):")
        for container in containers:
            print(f"  {short_id(container.id)} ({', '.join(container.names)})")
        answer = prompt("Remove all ephemeral containers? [y/N]: ").strip().lower()
        if answer not in ("y", "yes"):
            print("Aborted.")
            return

    for container in containers:
        cid = short_id(container.id)
        print(f"Removing container {cid}")
        try:
            hostexec.run("podman", ["rm", "-f", container.id])
        except (HostExecError, OSError) as exc:
            print(f"Failed to remove {cid}: {exc}", file=sys.stderr)
        else:
            print(f"Removed {cid}")


def ps(json_output: bool = False) -> None:
    """Print ephemeral containers as a table or as JSON."""
    containers = list_ephemeral_containers()
    if json_output:
        print(json.dumps([c.to_json() for c in containers], indent=2))
    else:
        print(render_container_table(containers))


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bcvk ephemeral", description="Ephemeral VM operations"
    )
    sub = parser.add_subparsers(dest="command", required=True)
    ps_parser = sub.add_parser("ps", help="List ephemeral VM containers")
    ps_parser.add_argument(
        "--json",
        action="store_true",
        help="Output as structured JSON instead of table format",
    )
    rm_parser = sub.add_parser("rm-all", help="Remove all ephemeral VM containers")
    rm_parser.add_argument(
        "-f",
        "--force",
        action="store_true",
        help="Force removal without confirmation",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run an ephemeral subcommand; returns the exit status."""
    args = _build_parser().parse_args(argv)
    try:
        if args.command == "ps":
            ps(args.json)
        else:
            remove_all_ephemeral_containers(args.force)
    except (HostExecError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0