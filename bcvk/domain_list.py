"""Listing of bootc libvirt domains, using libvirt as the source of truth."""

from __future__ import annotations

import re
import subprocess
import sys
from dataclasses import dataclass
from datetime import datetime

_U32_MAX = 2**32 - 1
_U32_TEXT = re.compile(r"\+?[0-9]+")
_DISK_MARKER = '<disk type="file"'
_SOURCE_MARKER = '<source file="'


class DomainListError(RuntimeError):
    """Raised when virsh cannot be run or reports a failure."""


@dataclass
class PodmanBootcDomain:
    """A bootc domain as seen by libvirt."""

    name: str
    state: str
    image: str | None = None
    created: datetime | None = None
    memory_mb: int | None = None
    vcpus: int | None = None
    disk_path: str | None = None

    def is_running(self) -> bool:
        """True if libvirt reports the domain as running."""
        return self.state == "running"

    def is_stopped(self) -> bool:
        """True if libvirt reports the domain as shut off."""
        return self.state == "shut off"

    def status_string(self) -> str:
        """State as shown to users."""
        return {"shut off": "stopped"}.get(self.state, self.state)


def _parse_u32(text: str) -> int | None:
    if not _U32_TEXT.fullmatch(text):
        return None
    value = int(text)
    return value if value <= _U32_MAX else None


def extract_xml_value(xml: str, element: str) -> str | None:
    """Text content of the first ``element`` in ``xml``, found by plain search."""
    start_tag = f"<{element}>"
    end_tag = f"</{element}>"

    start_pos = xml.find(start_tag)
    if start_pos != -1:
        start = start_pos + len(start_tag)
        end_pos = xml.find(end_tag, start)
        if end_pos != -1:
            return xml[start:end_pos].strip()

    start_pos = xml.find(f"<{element} ")
    if start_pos != -1:
        close_pos = xml.find(">", start_pos)
        if close_pos != -1:
            start = close_pos + 1
            end_pos = xml.find(end_tag, start)
            if end_pos != -1:
                return xml[start:end_pos].strip()

    return None


def extract_disk_path(xml: str) -> str | None:
    """Source path of the first file-backed disk in domain XML."""
    disk_start = xml.find(_DISK_MARKER)
    if disk_start == -1:
        return None
    source_start = xml.find(_SOURCE_MARKER, disk_start)
    if source_start == -1:
        return None
    path_start = source_start + len(_SOURCE_MARKER)
    quote_end = xml.find('"', path_start)
    if quote_end == -1:
        return None
    return xml[path_start:quote_end]


def is_bootc_domain_xml(xml: str) -> bool:
    """Whether domain XML carries the bootc metadata written at creation."""
    return "bootc:source-image" in xml or "bootc:container" in xml


class DomainLister:
    """Queries libvirt through virsh for bootc domains."""

    def __init__(self, connect_uri: str | None = None) -> None:
        self.connect_uri = connect_uri

    def _run(self, args: list[str], launch_error: str) -> subprocess.CompletedProcess:
        argv = ["virsh"]
        if self.connect_uri is not None:
            argv += ["-c", self.connect_uri]
        argv += args
        try:
            return subprocess.run(argv, capture_output=True, check=False)
        except OSError as exc:
            raise DomainListError(f"{launch_error}: {exc}") from exc

    @staticmethod
    def _stderr(result: subprocess.CompletedProcess) -> str:
        return (result.stderr or b"").decode("utf-8", errors="replace")

    def list_all_domains(self) -> list[str]:
        """Names of all domains, running and inactive."""
        result = self._run(["list", "--all", "--name"], "Failed to run virsh list")
        if result.returncode != 0:
            raise DomainListError(f"Failed to list domains: {self._stderr(result)}")
        text = result.stdout.decode("utf-8")
        return [line.strip() for line in text.splitlines() if line.strip()]

    def get_domain_state(self, domain_name: str) -> str:
        """State of a domain as reported by ``virsh domstate``."""
        result = self._run(
            ["domstate", domain_name],
            f"Failed to get state for domain '{domain_name}'",
        )
        if result.returncode != 0:
            raise DomainListError(
                f"Failed to get domain state for '{domain_name}': {self._stderr(result)}"
            )
        return result.stdout.decode("utf-8").strip()

    def get_domain_xml(self, domain_name: str) -> str:
        """Full XML description of a domain."""
        result = self._run(
            ["dumpxml", domain_name],
            f"Failed to dump XML for domain '{domain_name}'",
        )
        if result.returncode != 0:
            raise DomainListError(
                f"Failed to get XML for domain '{domain_name}': {self._stderr(result)}"
            )
        return result.stdout.decode("utf-8")

    def get_domain_info(self, domain_name: str) -> PodmanBootcDomain:
        """Detailed information about one domain."""
        state = self.get_domain_state(domain_name)
        xml = self.get_domain_xml(domain_name)

        image = extract_xml_value(xml, "bootc:source-image")
        if image is None:
            image = extract_xml_value(xml, "source-image")
        memory = extract_xml_value(xml, "memory")
        vcpu = extract_xml_value(xml, "vcpu")

        return PodmanBootcDomain(
            name=domain_name,
            state=state,
            image=image,
            created=None,
            memory_mb=_parse_u32(memory) if memory is not None else None,
            vcpus=_parse_u32(vcpu) if vcpu is not None else None,
            disk_path=extract_disk_path(xml),
        )

    def list_bootc_domains(self) -> list[PodmanBootcDomain]:
        """All domains created for bootc images; unreadable domains are skipped."""
        domains = []
        for name in self.list_all_domains():
            try:
                xml = self.get_domain_xml(name)
            except (DomainListError, ValueError) as exc:
                print(
                    f"Warning: Failed to get XML for domain '{name}': {exc}",
                    file=sys.stderr,
                )
                continue
            if not is_bootc_domain_xml(xml):
                continue
            try:
                domains.append(self.get_domain_info(name))
            except (DomainListError, ValueError) as exc:
                print(
                    f"Warning: Failed to get info for domain '{name}': {exc}",
                    file=sys.stderr,
                )
        return domains

    def list_running_bootc_domains(self) -> list[PodmanBootcDomain]:
        """Only the running bootc domains."""
        return [d for d in self.list_bootc_domains() if d.is_running()]