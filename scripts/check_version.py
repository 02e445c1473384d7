#!/usr/bin/env python3
"""Validate version consistency between passgate/__init__.py and pyproject.toml.

Exit codes:
    0: Versions match
    1: Version mismatch or error
"""

from __future__ import annotations

import re
import sys
import tomllib
from pathlib import Path


def get_init_version(init_file: Path) -> str | None:
    """Extract ``__version__`` from a module file."""
    content = init_file.read_text(encoding="utf-8")
    match = re.search(r'^__version__\s*=\s*["\']([^"\']+)["\']', content, re.MULTILINE)
    return match.group(1) if match else None


def get_pyproject_version(pyproject_file: Path) -> str | None:
    """Extract ``project.version`` from pyproject.toml."""
    with pyproject_file.open("rb") as f:
        data = tomllib.load(f)
    return data.get("project", {}).get("version")


def main() -> int:
    root = Path(__file__).parent.parent
    init_version = get_init_version(root / "passgate" / "__init__.py")
    pyproject_version = get_pyproject_version(root / "pyproject.toml")

    if init_version is None or pyproject_version is None:
        print("✗ Could not read version", file=sys.stderr)
        return 1

    if init_version != pyproject_version:
        print(
            f"✗ Version mismatch: __init__.py={init_version} "
            f"pyproject.toml={pyproject_version}",
            file=sys.stderr,
        )
        return 1

    print(f"✓ Version {init_version}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
