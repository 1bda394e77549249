from __future__ import annotations

import importlib
import io
import sys
import uuid
import zipfile
from pathlib import Path

import pytest


@pytest.fixture
def package_name(tmp_path, monkeypatch):
    """Create an importable package on a temporary sys.path entry and return its name.

    Layout:
        <pkg>/__init__.py
        <pkg>/Resource.class
        <pkg>/config/app.properties
    """
    name = f"respkg_{uuid.uuid4().hex[:8]}"
    pkg = tmp_path / name
    (pkg / "config").mkdir(parents=True)
    (pkg / "__init__.py").write_text("")
    (pkg / "Resource.class").write_bytes(b"\xca\xfe\xba\xbe" + b"\x00" * 300)
    (pkg / "config" / "app.properties").write_text("name=demo\n")
    monkeypatch.syspath_prepend(str(tmp_path))
    importlib.invalidate_caches()
    yield name
    sys.modules.pop(name, None)


def make_zip(path: Path, entries: dict[str, bytes]) -> Path:
    b = io.BytesIO()
    with zipfile.ZipFile(b, "w") as zf:
        for name, data in entries.items():
            zf.writestr(name, data)
    path.write_bytes(b.getvalue())
    return path


@pytest.fixture
def archive(tmp_path) -> Path:
    return make_zip(
        tmp_path / "site.zip",
        {
            "b.txt": b"top level",
            "dir/a.txt": b"hello",
            "dir/sub/c.txt": b"nested content",
        },
    )
