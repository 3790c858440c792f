#!/usr/bin/env python3
"""
Fail if pyproject.toml and readiness_core.__version__ disagree.
Usage: python scripts/check_version_sync.py [project_root]
"""
from __future__ import annotations
import importlib
import pathlib
import sys

try:
    import tomllib  # Python 3.11+
except ModuleNotFoundError:  # Python 3.10
    import tomli as tomllib  # type: ignore[no-redef]


def main(root: pathlib.Path) -> int:
    with open(root / "pyproject.toml", "rb") as f:
        declared = tomllib.load(f)["project"]["version"]

    sys.path.insert(0, str(root / "src"))
    actual = getattr(importlib.import_module("readiness_core"), "__version__", None)

    if declared != actual:
        print(f"version mismatch: pyproject={declared} readiness_core={actual}", file=sys.stderr)
        return 1
    print(f"version OK: {declared}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main(pathlib.Path(sys.argv[1] if len(sys.argv) > 1 else ".").resolve()))
