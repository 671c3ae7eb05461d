"""Command-line options shared across commands."""

from __future__ import annotations

import argparse
from dataclasses import dataclass

DEFAULT_MEMORY_USER_STR = "4G"


@dataclass
class MemoryOpts:
    """Memory size option."""

    memory: str = DEFAULT_MEMORY_USER_STR

    def __str__(self) -> str:
        return self.memory

    @staticmethod
    def add_arguments(parser: argparse.ArgumentParser) -> None:
        """Register ``--memory`` on ``parser``."""
        parser.add_argument(
            "--memory",
            default=DEFAULT_MEMORY_USER_STR,
            help="Memory size (e.g. 4G, 2048M, or plain number for MB)",
        )

    @classmethod
    def from_namespace(cls, namespace: argparse.Namespace) -> MemoryOpts:
        """Build options from parsed arguments."""
        return cls(memory=namespace.memory)