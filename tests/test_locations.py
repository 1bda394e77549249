import pytest

from resource_loader.exceptions import MalformedLocationError
from resource_loader.utils.locations import (
    apply_relative_path,
    clean_path,
    get_filename,
    get_scheme,
    is_url,
    join_url,
    to_uri,
)


def test_clean_path():
    assert clean_path("a/b/../c.txt") == "a/c.txt"
    assert clean_path("/a/./b.txt") == "/a/b.txt"
    assert clean_path("../a/b.txt") == "../a/b.txt"
    assert clean_path("a\\b\\c.txt") == "a/b/c.txt"
    assert clean_path("file:/a/../b.txt") == "file:/b.txt"
    assert clean_path("a/b/") == "a/b/"
    assert clean_path("") == ""


def test_apply_relative_path():
    assert apply_relative_path("a/b.txt", "c.txt") == "a/c.txt"
    assert apply_relative_path("a/b.txt", "/c.txt") == "a/c.txt"
    assert apply_relative_path("b.txt", "c.txt") == "c.txt"


def test_is_url_and_scheme():
    assert is_url("classpath:foo.txt")
    assert is_url("https://example.org/")
    assert is_url("file:/tmp/x")
    assert not is_url("cloud:Resource.class")
    assert not is_url("C:\\data\\x.txt")
    assert not is_url("relative/path")
    assert not is_url("")
    assert get_scheme("HTTP://example.org") == "http"
    assert get_scheme("C:/x") is None


def test_join_url():
    assert join_url("https://example.org/a/b.txt", "c.txt") == "https://example.org/a/c.txt"
    assert join_url("zip:file:///x.zip!/dir/a.txt", "b.txt") == "zip:file:///x.zip!/dir/b.txt"
    assert join_url("zip:file:///x.zip!/dir/a.txt", "../b.txt") == "zip:file:///x.zip!/b.txt"


def test_to_uri():
    assert to_uri("http://example.org/a b").path == "/a%20b"
    with pytest.raises(MalformedLocationError):
        to_uri("no-scheme/path")
    with pytest.raises(MalformedLocationError):
        to_uri("http://example.org/{x}")


def test_get_filename():
    assert get_filename("a/b/c.txt") == "c.txt"
    assert get_filename("c.txt") == "c.txt"
    assert get_filename(None) is None
