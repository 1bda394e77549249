from __future__ import annotations

import io
from pathlib import Path

import pytest

from resource_loader.exceptions import (
    MalformedLocationError,
    ResourceNotFoundError,
    UnresolvableResourceError,
)
from resource_loader.resources.base import AbstractResource, Resource, describe_resource


class TrackingStream(io.BytesIO):
    def __init__(self, data: bytes, fail_read: bool = False, fail_close: bool = False):
        super().__init__(data)
        self.fail_read = fail_read
        self.fail_close = fail_close
        self.close_calls = 0

    def read(self, size=-1):
        if self.fail_read:
            raise OSError("read failed")
        return super().read(size)

    def close(self):
        self.close_calls += 1
        super().close()
        if self.fail_close:
            raise OSError("close failed")


class DummyResource(AbstractResource):
    """Stream-only resource; only description and get_input_stream are implemented."""

    def __init__(self, name: str, data: bytes | None = b"", fail_read=False, fail_close=False, url=None):
        self.name = name
        self.data = data
        self.fail_read = fail_read
        self.fail_close = fail_close
        self.url = url
        self.streams: list[TrackingStream] = []

    @property
    def description(self) -> str:
        return f"dummy [{self.name}]"

    def get_input_stream(self):
        if self.data is None:
            raise ResourceNotFoundError(self.description)
        s = TrackingStream(self.data, fail_read=self.fail_read, fail_close=self.fail_close)
        self.streams.append(s)
        return s

    def get_url(self) -> str:
        if self.url is None:
            return super().get_url()
        return self.url


class FileBackedDummy(DummyResource):
    def __init__(self, path: Path):
        super().__init__(str(path))
        self.path = path

    def get_file(self) -> Path:
        return self.path


def test_equality_is_structural():
    r1 = DummyResource("same")
    r2 = DummyResource("same")
    r3 = DummyResource("other")
    assert r1 == r1
    assert r1 == r2
    assert hash(r1) == hash(r2)
    assert r1 != r3
    assert str(r1) == "dummy [same]"
    assert isinstance(r1, Resource)


def test_defaults():
    r = DummyResource("x", b"abc")
    assert r.is_open() is False
    assert r.is_file() is False
    assert r.filename is None
    assert r.is_readable() is True
    with pytest.raises(UnresolvableResourceError, match="cannot be resolved to URL"):
        r.get_url()
    with pytest.raises(UnresolvableResourceError, match="absolute file path"):
        r.get_file()
    with pytest.raises(UnresolvableResourceError, match="Cannot create a relative resource"):
        r.create_relative("other.txt")
    # URI derives from URL, so the same error surfaces
    with pytest.raises(UnresolvableResourceError):
        r.get_uri()
    # both kinds are FileNotFoundError for callers that only care about absence
    with pytest.raises(FileNotFoundError):
        r.get_file()


def test_get_uri_escapes_spaces_and_rejects_invalid():
    ok = DummyResource("u", url="http://example.org/some dir/file.txt")
    uri = ok.get_uri()
    assert uri.scheme == "http"
    assert uri.path == "/some%20dir/file.txt"

    bad = DummyResource("u", url="http://example.org/<file>")
    with pytest.raises(MalformedLocationError, match="Invalid URI"):
        bad.get_uri()


def test_exists_falls_back_to_stream():
    present = DummyResource("present", b"data")
    assert present.exists() is True
    # the probe stream is closed again
    assert present.streams[-1].close_calls == 1

    absent = DummyResource("absent", None)
    assert absent.exists() is False
    assert absent.is_readable() is False


def test_exists_ignores_close_failure():
    r = DummyResource("flaky", b"data", fail_close=True)
    assert r.exists() is True


def test_exists_uses_file_when_available(tmp_path):
    assert FileBackedDummy(tmp_path / "missing.txt").exists() is False
    f = tmp_path / "there.txt"
    f.write_text("x")
    assert FileBackedDummy(f).exists() is True


def test_content_length_counts_all_bytes_and_closes():
    for size in (0, 1, 255, 256, 257, 4096 + 3):
        r = DummyResource("len", b"z" * size)
        assert r.content_length() == size
        assert r.streams[-1].close_calls == 1


def test_content_length_closes_stream_on_read_failure():
    r = DummyResource("broken", b"abc", fail_read=True)
    with pytest.raises(OSError, match="read failed"):
        r.content_length()
    assert r.streams[-1].close_calls == 1


def test_content_length_close_failure_does_not_mask_result():
    r = DummyResource("flaky", b"abcd", fail_close=True)
    assert r.content_length() == 4


def test_last_modified(tmp_path):
    with pytest.raises(ResourceNotFoundError, match="last-modified"):
        FileBackedDummy(tmp_path / "missing.txt").last_modified()

    f = tmp_path / "present.txt"
    f.write_text("x")
    assert FileBackedDummy(f).last_modified() > 0


def test_last_modified_without_file_is_unresolvable():
    with pytest.raises(UnresolvableResourceError):
        DummyResource("x", b"").last_modified()


def test_content_helpers():
    r = DummyResource("text", "grüße".encode("utf-8"))
    assert r.get_content_as_bytes() == "grüße".encode("utf-8")
    assert r.get_content_as_string() == "grüße"
    assert all(s.closed for s in r.streams)


def test_describe_resource_is_best_effort():
    info = describe_resource(DummyResource("d", b"12345"))
    assert info.locator == "dummy [d]"
    assert info.size == 5
    # no file behind the resource, so no timestamp
    assert info.last_modified is None

    missing = describe_resource(DummyResource("gone", None), locator="gone")
    assert missing.locator == "gone"
    assert missing.size is None
