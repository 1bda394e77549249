import asyncio

from resource_loader import main


def test_resolve_resource_file_url(tmp_path):
    f = tmp_path / "notes.txt"
    f.write_text("hello notes")
    res = asyncio.run(main.resolve_resource(location=f.as_uri()))
    assert isinstance(res, dict)
    assert res["exists"] is True
    assert res["is_file"] is True
    assert res["filename"] == "notes.txt"
    assert res["size"] == 11
    assert res["last_modified"] is not None


def test_resolve_resource_missing(tmp_path):
    res = asyncio.run(main.resolve_resource(location=(tmp_path / "missing.txt").as_uri()))
    assert res["exists"] is False
    assert res["size"] is None


def test_read_resource_truncates(tmp_path):
    f = tmp_path / "long.txt"
    f.write_text("abcdefghij")
    res = asyncio.run(main.read_resource(location=f.as_uri(), max_bytes=4))
    assert res["content"] == "abcd"
    assert res["truncated"] is True
    assert res["meta"]["effective_limit"] == 4

    full = asyncio.run(main.read_resource(location=f.as_uri()))
    assert full["content"] == "abcdefghij"
    assert full["truncated"] is False


def test_read_resource_not_found(tmp_path):
    res = asyncio.run(main.read_resource(location=(tmp_path / "missing.txt").as_uri()))
    assert "error" in res
    assert "content" not in res


def test_list_protocol_resolvers():
    res = asyncio.run(main.list_protocol_resolvers())
    assert res["count"] == len(main.loader.protocol_resolvers)
    assert any("VfsProtocolResolver" in r for r in res["resolvers"])


def test_read_resource_directory_reports_error(tmp_path):
    res = asyncio.run(main.read_resource(location=tmp_path.as_uri()))
    assert "error" in res
    assert "content" not in res


def test_settings_are_shared_with_loader_module():
    from resource_loader import loader as loader_module

    assert main.settings is loader_module.settings
    assert main.mcp.state.settings is loader_module.settings
