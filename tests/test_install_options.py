import argparse
from pathlib import Path

from bcvk.install_options import InstallOptions


def _parse(argv):
    parser = argparse.ArgumentParser()
    InstallOptions.add_arguments(parser)
    return InstallOptions.from_namespace(parser.parse_args(argv))


def test_no_options_no_args():
    assert InstallOptions().to_bootc_args() == []


def test_all_options():
    opts = InstallOptions(filesystem="ext4", root_size="10G")
    assert opts.to_bootc_args() == ["--filesystem", "ext4", "--root-size", "10G"]


def test_storage_path_not_passed():
    opts = InstallOptions(storage_path=Path("/var/lib/containers/storage"))
    assert opts.to_bootc_args() == []


def test_parse_defaults():
    assert _parse([]) == InstallOptions()


def test_parse_round_trip():
    opts = _parse(
        ["--filesystem", "xfs", "--root-size", "5120M", "--storage-path", "/srv/store"]
    )
    assert opts.filesystem == "xfs"
    assert opts.root_size == "5120M"
    assert opts.storage_path == Path("/srv/store")
    assert opts.to_bootc_args() == ["--filesystem", "xfs", "--root-size", "5120M"]