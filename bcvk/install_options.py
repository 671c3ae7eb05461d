"""Installation options shared by disk-producing commands."""

from __future__ import annotations

import argparse
from dataclasses import dataclass
from pathlib import Path


@dataclass
class InstallOptions:
    """Filesystem and storage options for bootc installs."""

    filesystem: str | None = None
    root_size: str | None = None
    storage_path: Path | None = None

    def to_bootc_args(self) -> list[str]:
        """Arguments to pass to ``bootc install``."""
        args: list[str] = []
        if self.filesystem is not None:
            args += ["--filesystem", self.filesystem]
        if self.root_size is not None:
            args += ["--root-size", self.root_size]
        return args

    @staticmethod
    def add_arguments(parser: argparse.ArgumentParser) -> None:
        """Register the installation options on ``parser``."""
        parser.add_argument(
            "--filesystem",
            help="Root filesystem type (e.g. ext4, xfs, btrfs)",
        )
        parser.add_argument(
            "--root-size",
            help="Root filesystem size (e.g., '10G', '5120M')",
        )
        parser.add_argument(
            "--storage-path",
            type=Path,
            help="Path to host container storage (auto-detected if not specified)",
        )

    @classmethod
    def from_namespace(cls, namespace: argparse.Namespace) -> InstallOptions:
        """Build options from parsed arguments."""
        return cls(
            filesystem=namespace.filesystem,
            root_size=namespace.root_size,
            storage_path=namespace.storage_path,
        )