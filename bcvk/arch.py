"""Host architecture detection and libvirt/QEMU settings per architecture."""

from __future__ import annotations

import platform
from dataclasses import dataclass

_ALIASES = {
    "amd64": "x86_64",
    "x64": "x86_64",
    "arm64": "aarch64",
}

_MACHINES = {
    "x86_64": "q35",
    "aarch64": "virt",
}

_X86_64_FEATURES = """
  <features>
    <acpi/>
    <apic/>
    <vmport state='off'/>
  </features>"""

_GENERIC_FEATURES = """
  <features>
    <acpi/>
    <apic/>
  </features>"""

_X86_64_TIMERS = """
    <timer name='rtc' tickpolicy='catchup'/>
    <timer name='pit' tickpolicy='delay'/>
    <timer name='hpet' present='no'/>"""

_GENERIC_TIMERS = """
    <timer name='rtc' tickpolicy='catchup'/>"""


class UnsupportedArchitectureError(RuntimeError):
    """Raised when the host architecture has no known VM configuration."""


def _normalize(machine: str) -> str:
    lowered = machine.lower()
    return _ALIASES.get(lowered, lowered)


def _host_machine() -> str:
    return _normalize(platform.machine())


@dataclass(frozen=True)
class ArchConfig:
    """Architecture configuration for libvirt domains and QEMU."""

    arch: str
    machine: str
    os_type: str = "hvm"

    @classmethod
    def detect(cls, machine: str | None = None) -> ArchConfig:
        """Return the configuration for ``machine``, or for the host if omitted."""
        arch = _normalize(machine) if machine else _host_machine()
        try:
            machine_type = _MACHINES[arch]
        except KeyError:
            raise UnsupportedArchitectureError(
                f"Unsupported architecture: {arch}. "
                "Supported architectures: x86_64, aarch64"
            ) from None
        return cls(arch=arch, machine=machine_type, os_type="hvm")

    def xml_features(self) -> str:
        """Architecture-specific ``<features>`` block for libvirt XML."""
        if self.arch == "x86_64":
            return _X86_64_FEATURES
        return _GENERIC_FEATURES

    def xml_timers(self) -> str:
        """Architecture-specific timer elements for libvirt XML."""
        if self.arch == "x86_64":
            return _X86_64_TIMERS
        return _GENERIC_TIMERS

    def supports_vmport(self) -> bool:
        """Whether VMport (an x86_64-only feature) is available."""
        return self.arch == "x86_64"

    def cpu_mode(self) -> str:
        """Recommended libvirt CPU mode."""
        if self.arch in ("x86_64", "aarch64"):
            return "host-passthrough"
        return "host-model"


def host_arch() -> str:
    """Architecture string of the host, if supported."""
    return ArchConfig.detect().arch


def is_x86_64() -> bool:
    """True when running on x86_64."""
    return _host_machine() == "x86_64"


def is_aarch64() -> bool:
    """True when running on ARM64/AArch64."""
    return _host_machine() == "aarch64"