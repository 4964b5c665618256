# SPDX-License-Identifier: BUSL-1.1
"""Shared utilities for graftpack."""

import sys
from pathlib import Path


def die(msg: str, code: int = 1):
    """Print error message and exit."""
    print(f"Error: {msg}")
    sys.exit(code)


def merge_unique(items: list) -> list:
    """Return unique non-empty strings in order."""
    out = []
    seen = set()
    for item in items or []:
        value = str(item).strip()
        if value and value not in seen:
            seen.add(value)
            out.append(value)
    return out


def format_command(cmd: list) -> str:
    """Render an argv list for progress and error messages."""
    return " ".join(str(part) for part in cmd)


def path_within(root, relative: str) -> Path:
    """Join relative onto root, refusing a result that resolves outside root."""
    dest = Path(root) / str(relative).lstrip("/")
    base = Path(root).resolve()
    target = dest.resolve()
    if target != base and base not in target.parents:
        raise ValueError(f"'{relative}' resolves outside {root}")
    return dest
