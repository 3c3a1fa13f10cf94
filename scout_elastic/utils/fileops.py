"""File helpers for lock markers and the config file."""

from __future__ import annotations

from pathlib import Path


def secure_mkdir(path: Path) -> None:
    """Create directory with 0o700 permissions (owner-only access).

    Parent directories are created as needed. Permissions of an existing
    directory are left alone, since lock directories may be shared.
    """
    if path.exists():
        return
    path.mkdir(parents=True, exist_ok=True)
    path.chmod(0o700)
