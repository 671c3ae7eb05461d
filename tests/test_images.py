import json
from datetime import datetime, timedelta, timezone

import pytest

from bcvk.images import (
    ImageInspect,
    ImageListEntry,
    format_relative_time,
    format_size,
    get_image_digest,
    get_image_size,
    inspect,
    list_images,
    parse_osrelease,
    render_image_table,
    run_list,
    split_repository_tag,
)

NOW = datetime(2024, 6, 1, 12, 0, 0, tzinfo=timezone.utc)

LIST_JSON = json.dumps(
    [
        {
            "Names": ["quay.io/fedora/fedora-bootc:42"],
            "Id": "0123456789abcdef0123",
            "Size": 2048,
            "CreatedAt": "2024-01-01T00:00:00Z",
        }
    ]
)


@pytest.fixture
def fake_tools(tmp_path, monkeypatch):
    monkeypatch.setenv("TOOLBOX_PATH", "/usr/bin/toolbox")
    monkeypatch.setenv("PATH", f"{tmp_path}:/usr/bin:/bin")

    def install(name, output):
        script = tmp_path / name
        script.write_text(f"#!/bin/sh\ncat <<'EOF'\n{output}\nEOF\n")
        script.chmod(0o755)

    return install


def test_parse_osrelease():
    text = """NAME="Fedora Linux"
VERSION="39 (Container Image)"
ID=fedora
VERSION_ID=39
PLATFORM_ID="platform:f39"
PRETTY_NAME="Fedora Linux 39 (Container Image)"
# Comment here then a blank line

LOGO="fedora-logo-icon"
# Trailing comment
"""
    expected = {
        "NAME": "Fedora Linux",
        "VERSION": "39 (Container Image)",
        "ID": "fedora",
        "VERSION_ID": "39",
        "PLATFORM_ID": "platform:f39",
        "PRETTY_NAME": "Fedora Linux 39 (Container Image)",
        "LOGO": "fedora-logo-icon",
    }
    assert parse_osrelease(text) == expected


def test_parse_osrelease_skips_commented_keys():
    assert parse_osrelease("#ID=x\nID=y\n") == {"ID": "y"}


@pytest.mark.parametrize(
    "size, expected",
    [
        (0, "0 B"),
        (1023, "1023 B"),
        (1024, "1.0 KB"),
        (1536, "1.5 KB"),
        (1024 * 1024 * 1024, "1.0 GB"),
        (1024**5, "1024.0 TB"),
    ],
)
def test_format_size(size, expected):
    assert format_size(size) == expected


@pytest.mark.parametrize(
    "delta, expected",
    [
        (timedelta(seconds=30), "30 seconds ago"),
        (timedelta(seconds=60), "1 minute ago"),
        (timedelta(minutes=5), "5 minutes ago"),
        (timedelta(hours=1), "1 hour ago"),
        (timedelta(hours=2), "2 hours ago"),
        (timedelta(days=1), "1 day ago"),
        (timedelta(days=60), "2 months ago"),
        (timedelta(days=400), "1 year ago"),
        (timedelta(days=800), "2 years ago"),
    ],
)
def test_format_relative_time(delta, expected):
    assert format_relative_time(NOW - delta, NOW) == expected


@pytest.mark.parametrize(
    "names, expected",
    [
        (["quay.io/fedora/fedora-bootc:42"], ("quay.io/fedora/fedora-bootc", "42")),
        (["localhost/image"], ("localhost/image", "latest")),
        ([], ("<none>", "<none>")),
        (None, ("<none>", "<none>")),
    ],
)
def test_split_repository_tag(names, expected):
    assert split_repository_tag(names) == expected


def test_list_entry_json_round_trip():
    data = json.loads(LIST_JSON)[0]
    entry = ImageListEntry.from_json(data)
    assert entry.created_at == datetime(2024, 1, 1, tzinfo=timezone.utc)
    assert entry.to_json() == data


def test_list_entry_accepts_nanoseconds():
    entry = ImageListEntry.from_json(
        {"Names": None, "Id": "x", "Size": 1, "CreatedAt": "2024-01-01T00:00:00.123456789Z"}
    )
    assert entry.created_at.microsecond == 123456
    assert entry.names is None


def test_render_image_table():
    entry = ImageListEntry.from_json(json.loads(LIST_JSON)[0])
    table = render_image_table([entry], NOW)
    assert "REPOSITORY" in table
    assert "quay.io/fedora/fedora-bootc" in table
    assert "0123456789ab" in table
    assert "0123456789abc" not in table
    assert "5 months ago" in table
    assert "2.0 KB" in table


def test_render_image_table_missing_created():
    entry = ImageListEntry(names=None, id="abc", size=5)
    table = render_image_table([entry], NOW)
    assert "N/A" in table
    assert "<none>" in table


def test_list_images(fake_tools):
    fake_tools("podman", LIST_JSON)
    images = list_images()
    assert [image.id for image in images] == ["0123456789abcdef0123"]


def test_run_list_json(fake_tools, capsys):
    fake_tools("podman", LIST_JSON)
    run_list(json_output=True)
    assert json.loads(capsys.readouterr().out) == json.loads(LIST_JSON)


def test_inspect_and_size(fake_tools):
    fake_tools("podman", json.dumps([{"Id": "sha256:feed", "Size": 4096, "Created": None}]))
    assert inspect("img") == ImageInspect(id="sha256:feed", size=4096, created=None)
    assert get_image_size("img") == 4096


def test_inspect_missing_image(fake_tools):
    fake_tools("podman", "[]")
    with pytest.raises(LookupError, match="No such image"):
        inspect("img")


def test_digest_from_skopeo(fake_tools):
    fake_tools("skopeo", json.dumps({"Digest": "sha256:abc"}))
    assert get_image_digest("img") == "sha256:abc"


def test_digest_falls_back_to_podman(fake_tools):
    fake_tools("skopeo", json.dumps({"Name": "img"}))
    fake_tools("podman", json.dumps([{"Id": "beef", "Size": 1}]))
    assert get_image_digest("img") == "sha256:beef"