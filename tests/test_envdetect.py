import os
from unittest import mock

import pytest

from bcvk.containerenv import PATH
from bcvk.envdetect import Environment, has_sys_admin_capability, is_hostpid


def test_sys_admin_present():
    text = "Name:\tpython\nCapBnd:\t000001ffffffffff\nCapAmb:\t0000000000000000\n"
    assert has_sys_admin_capability(text) is True


def test_sys_admin_absent():
    text = "CapBnd:\t0000000000000000\n"
    assert has_sys_admin_capability(text) is False


def test_sys_admin_missing_entry():
    with pytest.raises(ValueError):
        has_sys_admin_capability("Name:\tpython\n")


def test_hostpid_no_parent():
    with mock.patch("bcvk.envdetect.os.getppid", return_value=0):
        assert is_hostpid() is False


def test_hostpid_same_namespace():
    with mock.patch("bcvk.envdetect.os.getppid", return_value=os.getpid()):
        assert is_hostpid() is False


def test_hostpid_uid_differs():
    uid = os.getuid() + 1
    with mock.patch("bcvk.envdetect.os.getppid", return_value=os.getpid()), mock.patch(
        "bcvk.envdetect.os.getuid", return_value=uid
    ):
        assert is_hostpid() is True


def test_detect_without_containerenv(tmp_path):
    env = Environment.detect(tmp_path)
    assert env.container is False
    assert env.containerenv is None


def test_detect_with_containerenv(tmp_path):
    target = tmp_path / PATH
    target.parent.mkdir(parents=True)
    target.write_text('engine="podman-4.9.3"\nid="abc123"\n')
    env = Environment.detect(tmp_path)
    assert env.container is True
    assert env.containerenv.engine == "podman-4.9.3"
    assert env.containerenv.id == "abc123"


def test_get_cached_returns_same_instance():
    first = Environment.get_cached()
    assert Environment.get_cached() is first