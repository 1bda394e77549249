"""CLI for resolving locations manually."""
from __future__ import annotations

import sys

from resource_loader.config import Settings
from resource_loader.main import build_loader, describe


def main(argv: list[str]) -> int:
    if not argv:
        print("usage: cli_resolve.py LOCATION [LOCATION ...]")
        return 2
    loader = build_loader(Settings())
    missing = 0
    for location in argv:
        summary = describe(loader.get_resource(location))
        if not summary["exists"]:
            missing += 1
        print(f"{location} -> {summary['description']} exists={summary['exists']} size={summary['size']}")
    return 1 if missing else 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
